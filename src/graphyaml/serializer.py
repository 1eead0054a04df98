"""Rendering of value graphs back into document text."""

from __future__ import annotations

import logging
import math
from typing import Any
from typing import Final

from graphyaml.config import NullStyle
from graphyaml.config import YamlConfig
from graphyaml.errors import YamlConstructionError
from graphyaml.errors import YamlDumpError
from graphyaml.lexer import parse_scalar
from graphyaml.model import ScalarKind
from graphyaml.model import YamlAlias
from graphyaml.model import YamlAnchor
from graphyaml.model import YamlElement
from graphyaml.model import YamlMapping
from graphyaml.model import YamlNull
from graphyaml.model import YamlScalar
from graphyaml.model import YamlSequence
from graphyaml.model import from_python
from graphyaml.scanner import DOCUMENT_END
from graphyaml.scanner import DOCUMENT_START
from graphyaml.scanner import opens_quote

logger = logging.getLogger(__name__)

INDICATOR_CHARS: Final = frozenset("-?:,[]{}#&*!|>'\"%@`")
QUOTE_TRIGGERS: Final = frozenset(":#,[]{}\n\r\t")
COMPACT_PREFIX: Final = "- "
COMPACT_CONTINUATION: Final = "  "

_ESCAPES: Final = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\0": "\\0",
    "\a": "\\a",
    "\b": "\\b",
    "\f": "\\f",
    "\v": "\\v",
    "\x1b": "\\e",
    "\x85": "\\N",
    "\xa0": "\\_",
    "\u2028": "\\L",
    "\u2029": "\\P",
}


def render(value: Any, config: YamlConfig | None = None) -> str:
    """Render ``value`` (an element or plain data) as document text.

    The text has no trailing newline, except when the document ends in a
    ``|+`` block whose kept blank lines need one.

    Raises:
        YamlDumpError: If ``value`` cannot be represented as elements.
    """
    options = config if config is not None else YamlConfig.DEFAULT
    try:
        element = from_python(value)
    except YamlConstructionError as exc:
        raise YamlDumpError(str(exc)) from exc
    emitter = _Emitter(options)
    if options.use_block_style:
        lines = emitter.root_lines(element)
    else:
        lines = [emitter.flow(element)]
    if options.use_document_markers:
        lines = [DOCUMENT_START, *lines, DOCUMENT_END]
    logger.debug(
        "rendered %s in %s style",
        element.type_name,
        "block" if options.use_block_style else "flow",
    )
    text = "\n".join(lines)
    if len(lines) > 1 and not lines[-1]:
        text += "\n"
    return text


def needs_quoting(text: str) -> bool:
    """Return whether ``text`` would not read back as the same plain string."""
    if not text or text != text.strip():
        return True
    if text[0] in INDICATOR_CHARS or text.startswith(DOCUMENT_END):
        return True
    if any(ch in QUOTE_TRIGGERS or not ch.isprintable() for ch in text):
        return True
    if any(opens_quote(text, idx) for idx in range(len(text))):
        return True
    return parse_scalar(text) != YamlScalar(text)


def format_key(key: str) -> str:
    """Render a mapping key, quoting it when it is ambiguous."""
    if needs_quoting(key) or key[0].isdigit() or key == "<<":
        return quote(key)
    return key


def quote(text: str) -> str:
    """Double-quote ``text``, escaping what a plain line cannot hold."""
    parts: list[str] = ['"']
    for ch in text:
        if ch in _ESCAPES:
            parts.append(_ESCAPES[ch])
        elif ch.isprintable():
            parts.append(ch)
        elif ord(ch) <= 0xFF:  # noqa: PLR2004
            parts.append(f"\\x{ord(ch):02x}")
        elif ord(ch) <= 0xFFFF:  # noqa: PLR2004
            parts.append(f"\\u{ord(ch):04x}")
        else:
            parts.append(f"\\U{ord(ch):08x}")
    parts.append('"')
    return "".join(parts)


def format_float(value: float) -> str:
    if math.isnan(value):
        return ".nan"
    if math.isinf(value):
        return ".inf" if value > 0 else "-.inf"
    return repr(value)


def format_scalar(scalar: YamlScalar) -> str:
    """Render a scalar on one line."""
    value = scalar.value
    if scalar.kind is ScalarKind.BOOLEAN:
        return "true" if value else "false"
    if scalar.kind in {ScalarKind.INTEGER, ScalarKind.LONG}:
        return str(value)
    if scalar.kind in {ScalarKind.FLOAT, ScalarKind.DOUBLE}:
        return format_float(float(value))
    text = str(value)
    return quote(text) if needs_quoting(text) else text


def literal_lines(text: str) -> tuple[str, list[str]] | None:
    """Return the ``|`` header and body lines for ``text``.

    Returns ``None`` when ``text`` is not safely representable as a literal
    block and must be double-quoted instead.
    """
    if "\n" not in text or "\r" in text:
        return None
    content = text.rstrip("\n")
    if not content:
        return None
    if any(ch != "\n" and not ch.isprintable() for ch in text):
        return None
    lines = content.split("\n")
    if any(line and not line.strip() for line in lines):
        return None
    first = next(line for line in lines if line)
    if first.startswith(" "):
        return None
    trailing = len(text) - len(content)
    if trailing == 0:
        return "|-", lines
    if trailing == 1:
        return "|", lines
    return "|+", lines + [""] * (trailing - 1)


class _Emitter:
    def __init__(self, config: YamlConfig) -> None:
        self.config = config
        self.unit = config.indent

    # Block style ------------------------------------------------------------
    def root_lines(self, element: YamlElement) -> list[str]:
        head, nested, _ = self._node(element)
        if not head:
            return nested or [""]
        return [head, *self._indented(nested)]

    def _node(self, element: YamlElement) -> tuple[str, list[str], bool]:
        """Split ``element`` into the text that follows ``key:`` or ``-``.

        Returns the inline head, the lines nested below it, and whether the
        nested lines may be folded into a compact sequence item.
        """
        if isinstance(element, YamlAnchor):
            inner = _anchored(element)
            head, nested, _ = self._node(inner)
            marker = f"&{element.name}"
            return (f"{marker} {head}" if head else marker), nested, False
        if isinstance(element, YamlAlias):
            return f"*{element.name}", [], False
        if isinstance(element, YamlNull):
            return self.config.null_style.value, [], False
        if isinstance(element, YamlScalar):
            if element.is_string():
                literal = literal_lines(str(element.value))
                if literal is not None:
                    header, body = literal
                    return header, body, False
            return format_scalar(element), [], False
        if isinstance(element, YamlMapping):
            if element.is_empty():
                return "{}", [], False
            return "", self._mapping_lines(element), True
        if isinstance(element, YamlSequence):
            if element.is_empty():
                return "[]", [], False
            return "", self._sequence_lines(element), True
        msg = f"cannot render {type(element).__name__}"
        raise YamlDumpError(msg)

    def _mapping_lines(self, mapping: YamlMapping) -> list[str]:
        lines: list[str] = []
        for key, value in mapping.items():
            head, nested, _ = self._node(value)
            prefix = f"{format_key(key)}:"
            lines.append(f"{prefix} {head}" if head else prefix)
            lines.extend(self._indented(nested))
        return lines

    def _sequence_lines(self, sequence: YamlSequence) -> list[str]:
        lines: list[str] = []
        for item in sequence:
            head, nested, compact = self._node(item)
            if compact:
                lines.append(COMPACT_PREFIX + nested[0])
                lines.extend(_prefixed(nested[1:], COMPACT_CONTINUATION))
                continue
            lines.append(f"- {head}" if head else "-")
            lines.extend(self._indented(nested))
        return lines

    def _indented(self, lines: list[str]) -> list[str]:
        return _prefixed(lines, self.unit)

    # Flow style -------------------------------------------------------------
    def flow(self, element: YamlElement) -> str:
        """Render ``element`` on a single line."""
        if isinstance(element, YamlAnchor):
            return f"&{element.name} {self.flow(_anchored(element))}"
        if isinstance(element, YamlAlias):
            return f"*{element.name}"
        if isinstance(element, YamlNull):
            if self.config.null_style is NullStyle.EMPTY:
                return NullStyle.NULL.value
            return self.config.null_style.value
        if isinstance(element, YamlScalar):
            return format_scalar(element)
        if isinstance(element, YamlMapping):
            entries = ", ".join(
                f"{format_key(key)}: {self.flow(value)}" for key, value in element.items()
            )
            return "{" + entries + "}"
        if isinstance(element, YamlSequence):
            return "[" + ", ".join(self.flow(item) for item in element) + "]"
        msg = f"cannot render {type(element).__name__}"
        raise YamlDumpError(msg)


def _anchored(anchor: YamlAnchor) -> YamlElement:
    inner = anchor.element
    if isinstance(inner, YamlAnchor):
        msg = f"anchor '{anchor.name}' wraps another anchor; a node carries one anchor"
        raise YamlDumpError(msg)
    return inner


def _prefixed(lines: list[str], prefix: str) -> list[str]:
    return [prefix + line if line else line for line in lines]


def render_document(value: Any, config: YamlConfig | None = None) -> str:
    """Render ``value`` as a complete document terminated by one newline."""
    text = render(value, config)
    return text if text.endswith("\n") else text + "\n"
