"""Flat option set consumed by the parser and the serializer."""

from __future__ import annotations

import dataclasses
import enum
from dataclasses import dataclass
from typing import Any
from typing import ClassVar


class NullStyle(enum.Enum):
    """Spelling used when rendering the null element."""

    NULL = "null"
    TILDE = "~"
    EMPTY = ""


@dataclass(frozen=True, slots=True)
class YamlConfig:
    """Reader and writer options.

    ``strict`` restricts booleans to ``true``/``false`` and rejects content
    after the first document. ``resolve_anchors`` selects resolve mode
    (aliases are replaced by their anchored value) over preserve mode.
    """

    strict: bool = True
    indent: str = "  "
    use_block_style: bool = True
    use_document_markers: bool = False
    null_style: NullStyle = NullStyle.NULL
    resolve_anchors: bool = True
    allow_duplicate_keys: bool = False
    encoding: str = "utf-8"
    max_depth: int = 64

    DEFAULT: ClassVar[YamlConfig]
    PRESERVE_ANCHORS: ClassVar[YamlConfig]
    LENIENT: ClassVar[YamlConfig]

    def __post_init__(self) -> None:
        if not self.indent or self.indent.strip(" "):
            msg = f"indent must be a non-empty run of spaces, got {self.indent!r}"
            raise ValueError(msg)
        if self.max_depth < 1:
            msg = f"max_depth must be positive, got {self.max_depth}"
            raise ValueError(msg)
        if not self.encoding:
            msg = "encoding must not be empty"
            raise ValueError(msg)

    @property
    def indent_width(self) -> int:
        return len(self.indent)

    def with_options(self, **changes: Any) -> YamlConfig:
        """Return a copy with ``changes`` applied."""
        return dataclasses.replace(self, **changes)


YamlConfig.DEFAULT = YamlConfig()
YamlConfig.PRESERVE_ANCHORS = YamlConfig(resolve_anchors=False)
YamlConfig.LENIENT = YamlConfig(strict=False, allow_duplicate_keys=True)
