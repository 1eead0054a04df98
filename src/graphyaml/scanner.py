"""Line indexing for the block parser.

The input is split into physical lines once; the parser walks them with a
mutable cursor. Indentation is measured in spaces only.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Final

from graphyaml.errors import YamlSyntaxError
from graphyaml.lexer import closing_quote_index

LINE_BREAK: Final = re.compile(r"\r\n|\r|\n")
DOCUMENT_START: Final = "---"
DOCUMENT_END: Final = "..."


@dataclass(slots=True)
class Line:
    """One physical input line."""

    line_no: int
    raw: str
    indent: int
    content: str
    tab_indented: bool = False

    @property
    def is_blank(self) -> bool:
        return not self.content

    @property
    def is_comment(self) -> bool:
        return self.content.startswith("#")

    @property
    def is_document_start(self) -> bool:
        return self.indent == 0 and (
            self.content == DOCUMENT_START or self.content.startswith(DOCUMENT_START + " ")
        )

    @property
    def is_document_end(self) -> bool:
        return self.indent == 0 and (
            self.content == DOCUMENT_END or self.content.startswith(DOCUMENT_END + " ")
        )

    @property
    def is_document_marker(self) -> bool:
        return self.is_document_start or self.is_document_end


def split_lines(text: str) -> list[str]:
    """Split on any line break, keeping empty lines.

    A break that terminates the text does not open another line.
    """
    if not text:
        return []
    pieces = LINE_BREAK.split(text)
    if not pieces[-1]:
        pieces.pop()
    return pieces


def leading_spaces(raw: str) -> int:
    return len(raw) - len(raw.lstrip(" "))


def strip_comment(text: str) -> str:
    """Remove a trailing ``# comment`` that sits outside quotes.

    A ``#`` only opens a comment at the start of ``text`` or after
    whitespace, so ``a#b`` stays literal.
    """
    if "#" not in text:
        return text.rstrip()
    in_single = False
    in_double = False
    escaped = False
    for idx, ch in enumerate(text):
        if in_double:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_double = False
            continue
        if in_single:
            if ch == "'":
                in_single = False
            continue
        if opens_quote(text, idx):
            in_double = ch == '"'
            in_single = ch == "'"
        elif ch == "#" and (idx == 0 or text[idx - 1].isspace()):
            return text[:idx].rstrip()
    return text.rstrip()


def is_plain_char(ch: str) -> bool:
    return ch.isalnum() or ch in "_.-"


def opens_quote(text: str, idx: int) -> bool:
    """Return whether ``text[idx]`` starts a quoted run.

    A quote character glued to a preceding word character (``it's``) is
    literal.
    """
    return text[idx] in "'\"" and (idx == 0 or not is_plain_char(text[idx - 1]))


class LineIndex:
    """Cursor over the physical lines of one input."""

    def __init__(self, text: str) -> None:
        self.lines: list[Line] = [
            self._index_line(number, raw)
            for number, raw in enumerate(split_lines(text.removeprefix("\ufeff")), start=1)
        ]
        self.position = 0

    @staticmethod
    def _index_line(line_no: int, raw: str) -> Line:
        body = raw.rstrip()
        stripped = body.lstrip(" \t")
        lead = body[: len(body) - len(stripped)]
        # reported by skip_blank, so block scalar bodies may keep tabs past their indent
        tabbed = bool(stripped) and not stripped.startswith("#") and "\t" in lead
        return Line(
            line_no=line_no,
            raw=raw,
            indent=leading_spaces(body),
            content=stripped,
            tab_indented=tabbed,
        )

    def reset(self) -> None:
        self.position = 0

    @property
    def at_end(self) -> bool:
        return self.position >= len(self.lines)

    def current(self) -> Line:
        return self.lines[self.position]

    def advance(self) -> None:
        self.position += 1

    def skip_blank(self) -> Line | None:
        """Move past blank and comment-only lines; return the next content line.

        Raises:
            YamlSyntaxError: If that line is indented with tabs.
        """
        while self.position < len(self.lines):
            line = self.lines[self.position]
            if not line.is_blank and not line.is_comment:
                if line.tab_indented:
                    msg = "tabs are not allowed; use spaces for indentation"
                    raise YamlSyntaxError(msg, line.line_no, line.raw)
                return line
            self.position += 1
        return None


def is_sequence_item(content: str) -> bool:
    """Return whether comment-free ``content`` opens a block sequence entry."""
    return content == "-" or content.startswith("- ")


def split_key_value(content: str) -> tuple[str, str] | None:
    """Split ``key: value`` at the first key-colon outside quotes.

    A key-colon is a ``:`` followed by whitespace or the end of the text;
    after a quoted key the colon may follow the quote directly. Returns
    ``None`` when ``content`` holds no such separator.
    """
    if content[:1] in {"'", '"'}:
        end = closing_quote_index(content)
        if end == -1:
            return None
        rest = content[end + 1 :].lstrip(" ")
        if not rest.startswith(":"):
            return None
        return content[: end + 1], rest[1:].strip()
    quote: str | None = None
    for idx, ch in enumerate(content):
        if quote is not None:
            if ch == quote:
                quote = None
            continue
        if opens_quote(content, idx):
            quote = ch
        elif ch == ":" and (idx + 1 == len(content) or content[idx + 1] in " \t"):
            return content[:idx].strip(), content[idx + 1 :].strip()
    return None


_FLOW_CLOSERS: Final = {"[": "]", "{": "}"}


def flow_end(text: str, line: Line) -> int:
    """Return the index of the bracket closing the collection opened at ``text[0]``.

    Quoted runs never affect nesting. Returns ``-1`` while the collection
    is still open at the end of ``text``.

    Raises:
        YamlSyntaxError: If a closing bracket does not match its opener.
    """
    expected: list[str] = []
    quote: str | None = None
    idx = 0
    while idx < len(text):
        ch = text[idx]
        if quote is not None:
            if quote == '"' and ch == "\\":
                idx += 2
                continue
            if ch == quote:
                if quote == "'" and text[idx + 1 : idx + 2] == "'":
                    idx += 2
                    continue
                quote = None
        elif opens_quote(text, idx):
            quote = ch
        elif ch in _FLOW_CLOSERS:
            expected.append(_FLOW_CLOSERS[ch])
        elif ch in "]}":
            if not expected or expected.pop() != ch:
                msg = f"unbalanced '{ch}' in flow collection"
                raise YamlSyntaxError(msg, line.line_no, line.raw)
            if not expected:
                return idx
        idx += 1
    return -1


def split_flow_items(body: str) -> list[str]:
    """Split the inside of a flow collection on its top-level commas."""
    items: list[str] = []
    depth = 0
    quote: str | None = None
    start = 0
    idx = 0
    while idx < len(body):
        ch = body[idx]
        if quote is not None:
            if quote == '"' and ch == "\\":
                idx += 2
                continue
            if ch == quote:
                if quote == "'" and body[idx + 1 : idx + 2] == "'":
                    idx += 2
                    continue
                quote = None
        elif opens_quote(body, idx):
            quote = ch
        elif ch in "[{":
            depth += 1
        elif ch in "]}":
            depth -= 1
        elif ch == "," and depth == 0:
            items.append(body[start:idx].strip())
            start = idx + 1
        idx += 1
    items.append(body[start:].strip())
    return items
