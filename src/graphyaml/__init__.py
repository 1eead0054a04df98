"""Typed surface of the graphyaml document reader and writer."""

from __future__ import annotations

from beartype.claw import beartype_this_package

beartype_this_package()

from typing import Any  # noqa: E402
from typing import Final  # noqa: E402

from graphyaml import serializer as _serializer  # noqa: E402
from graphyaml.config import NullStyle  # noqa: E402
from graphyaml.config import YamlConfig  # noqa: E402
from graphyaml.errors import NoSuchYamlElementError  # noqa: E402
from graphyaml.errors import YamlConstructionError  # noqa: E402
from graphyaml.errors import YamlDumpError  # noqa: E402
from graphyaml.errors import YamlError  # noqa: E402
from graphyaml.errors import YamlSyntaxError  # noqa: E402
from graphyaml.errors import YamlTypeError  # noqa: E402
from graphyaml.io import YamlReader  # noqa: E402
from graphyaml.io import YamlWriter  # noqa: E402
from graphyaml.model import NULL  # noqa: E402
from graphyaml.model import ScalarKind  # noqa: E402
from graphyaml.model import YamlAlias  # noqa: E402
from graphyaml.model import YamlAnchor  # noqa: E402
from graphyaml.model import YamlElement  # noqa: E402
from graphyaml.model import YamlMapping  # noqa: E402
from graphyaml.model import YamlNull  # noqa: E402
from graphyaml.model import YamlScalar  # noqa: E402
from graphyaml.model import YamlSequence  # noqa: E402
from graphyaml.model import from_python  # noqa: E402
from graphyaml.parser import YamlParser  # noqa: E402

__version__: Final = "1.0.0"

__all__ = [
    "NULL",
    "NoSuchYamlElementError",
    "NullStyle",
    "ScalarKind",
    "YamlAlias",
    "YamlAnchor",
    "YamlConfig",
    "YamlConstructionError",
    "YamlDumpError",
    "YamlElement",
    "YamlError",
    "YamlMapping",
    "YamlNull",
    "YamlParser",
    "YamlReader",
    "YamlScalar",
    "YamlSequence",
    "YamlSyntaxError",
    "YamlTypeError",
    "YamlWriter",
    "dumps",
    "from_python",
    "loads",
    "parse",
    "render",
]


def parse(text: str, /, config: YamlConfig | None = None) -> YamlElement:
    """Parse one document into the value model.

    Returns:
        The root element; the null element for an empty document.
    """
    return YamlParser(text, config).read_document()


def render(element: Any, /, config: YamlConfig | None = None) -> str:
    """Serialize an element (or plain data) without a trailing newline.

    Returns:
        The document text.
    """
    return _serializer.render(element, config)


def loads(text: str, /, config: YamlConfig | None = None) -> Any:
    """Parse one document into plain dict/list/scalar structures.

    Returns:
        Parsed data built from ``dict``, ``list``, ``str``, ``int``,
        ``float``, ``bool`` and ``None``.

    Raises:
        YamlTypeError: If the document keeps unresolved aliases, which
            happens when ``config`` preserves anchors.
    """
    return parse(text, config).to_python()


def dumps(data: Any, /, config: YamlConfig | None = None) -> str:
    """Serialize plain data or an element into document text.

    Returns:
        The document text, terminated by a newline.

    Raises:
        YamlDumpError: If ``data`` holds types with no document form.
    """
    return _serializer.render_document(data, config)
