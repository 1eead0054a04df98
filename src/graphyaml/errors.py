"""Exception hierarchy shared by the graphyaml reader, model and writer."""

from __future__ import annotations


class YamlError(ValueError):
    """Base class for every error raised by graphyaml."""


class YamlSyntaxError(YamlError):
    """Raised when the parser encounters malformed document structure."""

    def __init__(
        self,
        message: str,
        line_no: int | None = None,
        text: str | None = None,
    ) -> None:
        self.message = message
        self.line_no = line_no
        self.text = text
        detail = message
        if line_no is not None:
            detail = f"{detail} (line {line_no})"
        if text is not None:
            detail = f"{detail}: '{text}'"
        super().__init__(detail)


class YamlTypeError(YamlError, TypeError):
    """Raised when an element is requested as a kind it does not hold."""


class YamlConstructionError(YamlError):
    """Raised when an invalid value graph is built through the API."""


class NoSuchYamlElementError(YamlError, LookupError):
    """Raised by typed getters when the requested key holds no element."""


class YamlDumpError(YamlError):
    """Raised when data cannot be converted or written as a document."""
