"""Scalar lexing: turn one raw token into a typed leaf element.

Lexing never fails. Anything that is not a quoted string, null, boolean
or number is returned verbatim as a string scalar.
"""

from __future__ import annotations

import math
import re
from typing import Final

from graphyaml.model import NULL
from graphyaml.model import ScalarKind
from graphyaml.model import YamlElement
from graphyaml.model import YamlScalar

NULL_TOKENS: Final = frozenset({"null", "~", ""})
TRUE_TOKENS: Final = frozenset({"true", "yes", "on"})
FALSE_TOKENS: Final = frozenset({"false", "no", "off"})
STRICT_BOOLEANS: Final = {"true": True, "false": False}

POSITIVE_INFINITY_TOKENS: Final = frozenset({".inf", "+.inf"})
NEGATIVE_INFINITY_TOKENS: Final = frozenset({"-.inf"})
NAN_TOKENS: Final = frozenset({".nan"})

DECIMAL_INT: Final = re.compile(r"[-+]?[0-9]+")
DECIMAL_FLOAT: Final = re.compile(r"[-+]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][-+]?[0-9]+)?")
_RADIX_DIGITS: Final = {
    "0x": (16, re.compile(r"[0-9a-fA-F]+")),
    "0o": (8, re.compile(r"[0-7]+")),
    "0b": (2, re.compile(r"[01]+")),
}

SIMPLE_ESCAPES: Final = {
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "\\": "\\",
    '"': '"',
    "0": "\0",
    "a": "\a",
    "b": "\b",
    "f": "\f",
    "v": "\v",
    "e": "\x1b",
    " ": " ",
    "/": "/",
    "N": "\x85",
    "_": "\xa0",
    "L": "\u2028",
    "P": "\u2029",
}
HEX_ESCAPES: Final = {"x": 2, "u": 4, "U": 8}
_HEX_DIGITS: Final = frozenset("0123456789abcdefABCDEF")


def is_quoted(text: str) -> bool:
    """Return whether ``text`` is entirely one single- or double-quoted run."""
    if len(text) < 2 or text[0] not in "'\"":  # noqa: PLR2004
        return False
    return closing_quote_index(text) == len(text) - 1


def closing_quote_index(text: str) -> int:
    """Return the index of the quote closing the run opened at ``text[0]``.

    Returns ``-1`` when the run is not terminated.
    """
    quote = text[0]
    idx = 1
    while idx < len(text):
        ch = text[idx]
        if quote == '"' and ch == "\\":
            idx += 2
            continue
        if ch == quote:
            if quote == "'" and idx + 1 < len(text) and text[idx + 1] == "'":
                idx += 2
                continue
            return idx
        idx += 1
    return -1


def unquote(text: str) -> str:
    """Strip the quotes of a quoted run and process its escapes."""
    if text[0] == "'":
        return text[1:-1].replace("''", "'")
    return unescape_double_quoted(text[1:-1])


def unescape_double_quoted(body: str) -> str:
    """Process backslash escapes of a double-quoted body.

    An escape that cannot be completed emits its escape letter literally.
    """
    parts: list[str] = []
    idx = 0
    length = len(body)
    while idx < length:
        ch = body[idx]
        if ch != "\\":
            parts.append(ch)
            idx += 1
            continue
        if idx + 1 >= length:
            parts.append("\\")
            break
        letter = body[idx + 1]
        idx += 2
        if letter in SIMPLE_ESCAPES:
            parts.append(SIMPLE_ESCAPES[letter])
        elif letter in HEX_ESCAPES:
            width = HEX_ESCAPES[letter]
            digits = body[idx : idx + width]
            if len(digits) == width and all(d in _HEX_DIGITS for d in digits):
                parts.append(chr(int(digits, 16)))
                idx += width
            else:
                parts.append(letter)
        else:
            parts.append(letter)
    return "".join(parts)


def parse_scalar(raw: str, *, strict: bool = False) -> YamlElement:
    """Convert a raw token into a typed scalar or the null element."""
    text = raw.strip()
    if is_quoted(text):
        return YamlScalar(unquote(text))
    lowered = text.lower()
    if lowered in NULL_TOKENS:
        return NULL
    boolean = _parse_boolean(text, lowered, strict=strict)
    if boolean is not None:
        return YamlScalar(boolean)
    special = _parse_special_float(lowered)
    if special is not None:
        return YamlScalar(special)
    number = _parse_number(text)
    if number is not None:
        return number
    return YamlScalar(text)


def _parse_boolean(text: str, lowered: str, *, strict: bool) -> bool | None:
    if strict:
        return STRICT_BOOLEANS.get(text)
    if lowered in TRUE_TOKENS:
        return True
    if lowered in FALSE_TOKENS:
        return False
    return None


def _parse_special_float(lowered: str) -> float | None:
    if lowered in POSITIVE_INFINITY_TOKENS:
        return math.inf
    if lowered in NEGATIVE_INFINITY_TOKENS:
        return -math.inf
    if lowered in NAN_TOKENS:
        return math.nan
    return None


def _parse_number(text: str) -> YamlScalar | None:
    prefix = text[:2].lower()
    if prefix in _RADIX_DIGITS:
        base, digits = _RADIX_DIGITS[prefix]
        if digits.fullmatch(text[2:]) is None:
            return None
        return YamlScalar(int(text[2:], base))
    if DECIMAL_INT.fullmatch(text):
        try:
            return YamlScalar(int(text))
        except ValueError:
            # beyond the interpreter's integer string conversion limit
            return None
    if ("." in text or "e" in text.lower()) and DECIMAL_FLOAT.fullmatch(text):
        return YamlScalar(float(text), ScalarKind.DOUBLE)
    return None
