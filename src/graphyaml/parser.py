"""Recursive-descent reader for the graphyaml document format."""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from typing import Final

from graphyaml.anchors import AnchorTable
from graphyaml.anchors import check_name
from graphyaml.config import YamlConfig
from graphyaml.errors import YamlSyntaxError
from graphyaml.lexer import closing_quote_index
from graphyaml.lexer import is_quoted
from graphyaml.lexer import parse_scalar
from graphyaml.lexer import unquote
from graphyaml.model import NULL
from graphyaml.model import YamlElement
from graphyaml.model import YamlMapping
from graphyaml.model import YamlScalar
from graphyaml.model import YamlSequence
from graphyaml.scanner import DOCUMENT_START
from graphyaml.scanner import Line
from graphyaml.scanner import LineIndex
from graphyaml.scanner import flow_end
from graphyaml.scanner import is_sequence_item
from graphyaml.scanner import leading_spaces
from graphyaml.scanner import split_flow_items
from graphyaml.scanner import split_key_value
from graphyaml.scanner import strip_comment

logger = logging.getLogger(__name__)

MERGE_KEY: Final = "<<"
# characters that never start a block mapping key
NODE_INDICATORS: Final = frozenset("[{&*|>!%@`")
RESERVED_INDICATORS: Final = frozenset("!%@`")
BLOCK_SCALAR_HEADER: Final = re.compile(r"([|>])([-+1-9]{0,2})")


class _NestingGuard:
    """Counts open collections and fails once the configured depth is exceeded."""

    def __init__(self, limit: int) -> None:
        self.limit = limit
        self.level = 0

    def enter(self, line: Line) -> _NestingGuard:
        if self.level >= self.limit:
            msg = f"document nesting exceeds the maximum depth of {self.limit}"
            raise YamlSyntaxError(msg, line.line_no, line.raw)
        self.level += 1
        return self

    def __enter__(self) -> None:
        return None

    def __exit__(self, *exc_info: object) -> None:
        self.level -= 1


class YamlParser:
    """Reads one document from ``text`` into the value model.

    The parser keeps its anchor table as instance state, so independent
    parser instances never interfere. Every :meth:`read_document` call starts
    from the first line with an empty table.
    """

    def __init__(self, text: str, config: YamlConfig | None = None) -> None:
        self.config = config if config is not None else YamlConfig.DEFAULT
        self._lines = LineIndex(text)
        self._anchors = AnchorTable(resolve=self.config.resolve_anchors)
        self._nesting = _NestingGuard(self.config.max_depth)

    @property
    def anchors(self) -> Mapping[str, YamlElement]:
        """Anchors recorded by the last :meth:`read_document` call."""
        return self._anchors

    # Public -----------------------------------------------------------------
    def read_document(self) -> YamlElement:
        """Parse the input into one root element.

        Empty input, or input holding only comments and markers, is null.

        Raises:
            YamlSyntaxError: If the input is not a well-formed document.
        """
        self._lines.reset()
        self._anchors.clear()
        self._nesting.level = 0
        line = self._lines.skip_blank()
        if line is None:
            return NULL
        if line.is_document_start:
            inline = strip_comment(line.content[len(DOCUMENT_START) :]).strip()
            self._lines.advance()
            if inline:
                root = self._parse_inline_value(inline, line, -1)
            else:
                root = self._nested_or_null(-1)
        else:
            root = self._nested_or_null(-1)
        self._finish_document()
        logger.debug("parsed document with %d anchor(s)", len(self._anchors))
        return root

    # Document structure -----------------------------------------------------
    def _finish_document(self) -> None:
        line = self._lines.skip_blank()
        if line is not None and line.is_document_end:
            self._lines.advance()
            line = self._lines.skip_blank()
        if line is None:
            return
        if self.config.strict:
            if line.is_document_start:
                msg = "only one document per input is supported"
            else:
                msg = "unexpected content after the document"
            raise YamlSyntaxError(msg, line.line_no, line.raw)
        logger.debug("ignoring trailing content from line %d", line.line_no)

    def _read_nested(
        self,
        parent_indent: int,
        *,
        sequence_at_parent: bool = False,
    ) -> YamlElement | None:
        """Read the block that belongs to a node at ``parent_indent``, if any.

        ``sequence_at_parent`` lets a block sequence sit at the parent's own
        indentation, as mapping values may.
        """
        line = self._lines.skip_blank()
        if line is None or line.is_document_marker:
            return None
        if line.indent > parent_indent:
            return self._read_node()
        if (
            sequence_at_parent
            and line.indent == parent_indent
            and is_sequence_item(strip_comment(line.content))
        ):
            return self._read_node()
        return None

    def _nested_or_null(
        self,
        parent_indent: int,
        *,
        sequence_at_parent: bool = False,
    ) -> YamlElement:
        nested = self._read_nested(parent_indent, sequence_at_parent=sequence_at_parent)
        return NULL if nested is None else nested

    def _read_node(self) -> YamlElement:
        line = self._lines.current()
        content = strip_comment(line.content)
        if is_sequence_item(content):
            return self._read_block_sequence(line.indent)
        if content.startswith("? ") or content == "?":
            msg = "complex mapping keys are not supported"
            raise YamlSyntaxError(msg, line.line_no, line.raw)
        if self._is_block_entry(content):
            return self._read_block_mapping(line.indent)
        self._lines.advance()
        return self._parse_inline_value(content, line, line.indent - 1)

    @staticmethod
    def _is_block_entry(content: str) -> bool:
        return content[0] not in NODE_INDICATORS and split_key_value(content) is not None

    # Block collections ------------------------------------------------------
    def _read_block_mapping(
        self,
        indent: int,
        first: tuple[str, str, Line] | None = None,
    ) -> YamlMapping:
        """Read the entries of a block mapping whose keys sit at ``indent``.

        ``first`` carries an entry already split out of a compact sequence
        item (``- key: value``); its line has been consumed.
        """
        mapping = YamlMapping()
        merged: set[str] = set()
        start = first[2] if first is not None else self._lines.current()
        with self._nesting.enter(start):
            if first is not None:
                key_text, value_text, line = first
                self._add_entry(mapping, merged, key_text, value_text, line, indent)
            while True:
                line = self._lines.skip_blank()
                if line is None or line.is_document_marker or line.indent < indent:
                    break
                if line.indent > indent:
                    msg = "inconsistent indentation"
                    raise YamlSyntaxError(msg, line.line_no, line.raw)
                content = strip_comment(line.content)
                if is_sequence_item(content):
                    msg = "unexpected sequence item inside a mapping"
                    raise YamlSyntaxError(msg, line.line_no, line.raw)
                pair = split_key_value(content)
                if pair is None:
                    msg = "expected a 'key: value' mapping entry"
                    raise YamlSyntaxError(msg, line.line_no, line.raw)
                self._lines.advance()
                self._add_entry(mapping, merged, pair[0], pair[1], line, indent)
        return mapping

    def _add_entry(  # noqa: PLR0913, PLR0917
        self,
        mapping: YamlMapping,
        merged: set[str],
        key_text: str,
        value_text: str,
        line: Line,
        indent: int,
    ) -> None:
        key = self._parse_key(key_text, line)
        if key_text == MERGE_KEY and self.config.resolve_anchors:
            value = self._parse_inline_value(value_text, line, indent, sequence_at_parent=True)
            self._merge_into(mapping, merged, value, line)
            return
        self._check_duplicate(mapping, merged, key, line)
        value = self._parse_inline_value(value_text, line, indent, sequence_at_parent=True)
        merged.discard(key)
        mapping.add(key, value)

    def _read_block_sequence(
        self,
        indent: int,
        first: tuple[str, Line] | None = None,
    ) -> YamlSequence:
        """Read the items of a block sequence whose dashes sit at ``indent``.

        ``first`` carries the item text of a compact nested sequence
        (``- - value``); its line has been consumed.
        """
        sequence = YamlSequence()
        start = first[1] if first is not None else self._lines.current()
        with self._nesting.enter(start):
            if first is not None:
                sequence.add(self._read_sequence_item(first[0], first[1], indent))
            while True:
                line = self._lines.skip_blank()
                if line is None or line.is_document_marker or line.indent < indent:
                    break
                if line.indent > indent:
                    msg = "inconsistent indentation"
                    raise YamlSyntaxError(msg, line.line_no, line.raw)
                content = strip_comment(line.content)
                if not is_sequence_item(content):
                    break
                self._lines.advance()
                sequence.add(self._read_sequence_item(content, line, indent))
        return sequence

    def _read_sequence_item(self, content: str, line: Line, indent: int) -> YamlElement:
        rest = content[1:]
        body = rest.lstrip(" ")
        if not body:
            return self._nested_or_null(indent)
        column = indent + 1 + len(rest) - len(body)
        if is_sequence_item(body):
            return self._read_block_sequence(column, first=(body, line))
        pair = split_key_value(body)
        if pair is not None and body[0] not in NODE_INDICATORS:
            return self._read_block_mapping(column, first=(pair[0], pair[1], line))
        return self._parse_inline_value(body, line, indent)

    # Values -----------------------------------------------------------------
    def _parse_inline_value(  # noqa: C901, PLR0911
        self,
        text: str,
        line: Line,
        parent_indent: int,
        *,
        sequence_at_parent: bool = False,
    ) -> YamlElement:
        """Interpret the value text found on ``line`` after a key or dash.

        Empty text means the value is the nested block that follows, or null.
        """
        if not text:
            return self._nested_or_null(parent_indent, sequence_at_parent=sequence_at_parent)
        first = text[0]
        if first == "&":
            name, _, rest = text[1:].partition(" ")
            check_name(name, line)
            rest = rest.strip()
            if rest.startswith("&"):
                msg = "a node may carry only one anchor"
                raise YamlSyntaxError(msg, line.line_no, line.raw)
            if rest.startswith("*"):
                msg = "an anchor cannot be attached to an alias"
                raise YamlSyntaxError(msg, line.line_no, line.raw)
            if rest and self._is_block_entry(rest):
                msg = "anchors cannot be attached to mapping keys"
                raise YamlSyntaxError(msg, line.line_no, line.raw)
            value = self._parse_inline_value(
                rest,
                line,
                parent_indent,
                sequence_at_parent=sequence_at_parent,
            )
            return self._anchors.define(name, value, line)
        if first == "*":
            return self._anchors.reference(text[1:], line)
        if first in "[{":
            return self._read_flow(text, line)
        if first in "|>":
            return self._read_block_scalar(text, line, parent_indent)
        if first in "'\"":
            return self._parse_quoted(text, line)
        if is_sequence_item(text):
            msg = "block sequence entries are not allowed here"
            raise YamlSyntaxError(msg, line.line_no, line.raw)
        if first in RESERVED_INDICATORS:
            msg = f"'{first}' cannot start a plain scalar"
            raise YamlSyntaxError(msg, line.line_no, line.raw)
        if split_key_value(text) is not None:
            msg = "mapping values are not allowed here"
            raise YamlSyntaxError(msg, line.line_no, line.raw)
        return parse_scalar(text, strict=self.config.strict)

    def _parse_quoted(self, text: str, line: Line) -> YamlElement:
        end = closing_quote_index(text)
        if end == -1:
            msg = "unterminated quoted scalar"
            raise YamlSyntaxError(msg, line.line_no, line.raw)
        if end != len(text) - 1:
            msg = "unexpected content after a quoted scalar"
            raise YamlSyntaxError(msg, line.line_no, line.raw)
        return YamlScalar(unquote(text))

    def _parse_key(self, key_text: str, line: Line) -> str:
        if not key_text:
            msg = "missing mapping key"
            raise YamlSyntaxError(msg, line.line_no, line.raw)
        first = key_text[0]
        if first == "&":
            msg = "anchors cannot be attached to mapping keys"
            raise YamlSyntaxError(msg, line.line_no, line.raw)
        if first == "*":
            msg = "aliases cannot be used as mapping keys"
            raise YamlSyntaxError(msg, line.line_no, line.raw)
        if first in "[{":
            msg = "complex mapping keys are not supported"
            raise YamlSyntaxError(msg, line.line_no, line.raw)
        if first in "'\"":
            if not is_quoted(key_text):
                msg = "malformed quoted mapping key"
                raise YamlSyntaxError(msg, line.line_no, line.raw)
            return unquote(key_text)
        return key_text

    def _check_duplicate(
        self,
        mapping: YamlMapping,
        merged: set[str],
        key: str,
        line: Line,
    ) -> None:
        if key in mapping and key not in merged and not self.config.allow_duplicate_keys:
            msg = f"duplicate key '{key}'"
            raise YamlSyntaxError(msg, line.line_no, line.raw)

    def _merge_into(
        self,
        mapping: YamlMapping,
        merged: set[str],
        value: YamlElement,
        line: Line,
    ) -> None:
        source = value.unwrap()
        if isinstance(source, YamlSequence):
            for item in source:
                if not isinstance(item.unwrap(), YamlMapping):
                    msg = "merge list entries must be mappings"
                    raise YamlSyntaxError(msg, line.line_no, line.raw)
                self._merge_into(mapping, merged, item, line)
            return
        if not isinstance(source, YamlMapping):
            msg = f"merge source must be a mapping, got {source.type_name}"
            raise YamlSyntaxError(msg, line.line_no, line.raw)
        for key, element in source.items():
            if key not in mapping:
                mapping.add(key, element)
                merged.add(key)

    # Block scalars ----------------------------------------------------------
    def _read_block_scalar(self, header: str, line: Line, parent_indent: int) -> YamlScalar:
        match = BLOCK_SCALAR_HEADER.fullmatch(header)
        if match is None:
            msg = "invalid block scalar header"
            raise YamlSyntaxError(msg, line.line_no, line.raw)
        style, indicators = match.groups()
        chomp = ""
        explicit: int | None = None
        for ch in indicators:
            if ch in "+-" and not chomp:
                chomp = ch
            elif ch.isdigit() and explicit is None:
                explicit = int(ch)
            else:
                msg = "invalid block scalar header"
                raise YamlSyntaxError(msg, line.line_no, line.raw)
        base = max(parent_indent, 0)
        if explicit is not None:
            content_indent = base + explicit
        else:
            content_indent = self._detect_indent(parent_indent)
        body: list[str] = []
        lines = self._lines.lines
        while not self._lines.at_end:
            current = lines[self._lines.position]
            if not current.raw.strip():
                body.append("")
            elif current.indent < content_indent or current.indent <= parent_indent:
                break
            elif current.is_document_marker:
                break
            else:
                body.append(current.raw[content_indent:])
            self._lines.advance()
        return YamlScalar(compose_block_scalar(body, folded=style == ">", chomp=chomp))

    def _detect_indent(self, parent_indent: int) -> int:
        for current in self._lines.lines[self._lines.position :]:
            if current.raw.strip():
                indent = leading_spaces(current.raw)
                return indent if indent > parent_indent else parent_indent + 1
        return parent_indent + 1

    # Flow collections -------------------------------------------------------
    def _read_flow(self, text: str, line: Line) -> YamlElement:
        """Collect a flow collection that may continue over following lines."""
        collected = text
        end = flow_end(collected, line)
        while end == -1:
            if self._lines.at_end:
                msg = "unterminated flow collection"
                raise YamlSyntaxError(msg, line.line_no, line.raw)
            current = self._lines.current()
            self._lines.advance()
            if current.is_blank or current.is_comment:
                continue
            collected = f"{collected} {strip_comment(current.content)}"
            end = flow_end(collected, line)
        if collected[end + 1 :].strip():
            msg = "unexpected content after a flow collection"
            raise YamlSyntaxError(msg, line.line_no, line.raw)
        return self._parse_flow_value(collected[: end + 1], line)

    def _parse_flow_value(self, text: str, line: Line) -> YamlElement:
        if not text:
            return NULL
        first = text[0]
        if first == "&":
            name, _, rest = text[1:].partition(" ")
            check_name(name, line)
            value = self._parse_flow_value(rest.strip(), line)
            return self._anchors.define(name, value, line)
        if first == "*":
            return self._anchors.reference(text[1:], line)
        if first in "[{":
            end = flow_end(text, line)
            if end == -1:
                msg = "unterminated flow collection"
                raise YamlSyntaxError(msg, line.line_no, line.raw)
            if end != len(text) - 1:
                msg = "unexpected content after a flow collection"
                raise YamlSyntaxError(msg, line.line_no, line.raw)
            with self._nesting.enter(line):
                if first == "[":
                    return self._parse_flow_sequence(text[1:-1], line)
                return self._parse_flow_mapping(text[1:-1], line)
        if first in "'\"":
            return self._parse_quoted(text, line)
        if first in RESERVED_INDICATORS:
            msg = f"'{first}' cannot start a plain scalar"
            raise YamlSyntaxError(msg, line.line_no, line.raw)
        return parse_scalar(text, strict=self.config.strict)

    def _flow_items(self, body: str, line: Line, kind: str) -> list[str]:
        items = split_flow_items(body)
        if len(items) == 1 and not items[0]:
            return []
        if not items[-1]:
            items.pop()
        if not all(items):
            msg = f"empty entry in flow {kind}"
            raise YamlSyntaxError(msg, line.line_no, line.raw)
        return items

    def _parse_flow_sequence(self, body: str, line: Line) -> YamlSequence:
        sequence = YamlSequence()
        for item in self._flow_items(body, line, "sequence"):
            if item[0] not in NODE_INDICATORS and split_key_value(item) is not None:
                sequence.add(self._parse_flow_mapping(item, line))
            else:
                sequence.add(self._parse_flow_value(item, line))
        return sequence

    def _parse_flow_mapping(self, body: str, line: Line) -> YamlMapping:
        mapping = YamlMapping()
        merged: set[str] = set()
        for item in self._flow_items(body, line, "mapping"):
            pair = split_key_value(item)
            key_text, value_text = pair if pair is not None else (item, "")
            key = self._parse_key(key_text, line)
            value = self._parse_flow_value(value_text, line)
            if key_text == MERGE_KEY and self.config.resolve_anchors:
                self._merge_into(mapping, merged, value, line)
                continue
            self._check_duplicate(mapping, merged, key, line)
            merged.discard(key)
            mapping.add(key, value)
        return mapping


def compose_block_scalar(lines: list[str], *, folded: bool, chomp: str) -> str:
    """Join block scalar lines and apply the chomping indicator.

    ``chomp`` is ``"+"`` (keep), ``"-"`` (strip) or ``""`` (clip to one
    trailing newline, or nothing when the block is entirely blank).
    """
    end = len(lines)
    while end and not lines[end - 1]:
        end -= 1
    content = lines[:end]
    trailing = len(lines) - end
    text = fold_lines(content) if folded else "\n".join(content)
    if chomp == "-":
        return text
    if chomp == "+":
        return text + "\n" * (trailing + 1) if content else "\n" * trailing
    return text + "\n" if content else ""


def fold_lines(lines: list[str]) -> str:
    """Fold ``>`` block lines: plain neighbours join with a space.

    Blank lines between plain lines become the line breaks; more-indented
    lines keep the breaks around them.
    """
    parts: list[str] = []
    previous: str | None = None
    blanks = 0
    for text in lines:
        if not text:
            blanks += 1
            continue
        if previous is None:
            parts.append("\n" * blanks)
        elif _is_spaced(previous) or _is_spaced(text):
            parts.append("\n" * (blanks + 1))
        elif blanks:
            parts.append("\n" * blanks)
        else:
            parts.append(" ")
        parts.append(text)
        previous = text
        blanks = 0
    return "".join(parts)


def _is_spaced(text: str) -> bool:
    return text.startswith((" ", "\t"))
