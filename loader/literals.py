"""Decoding of Go string and rune literals.

Go strings are byte sequences, not text: ``"\\xff"`` is one byte that is
not valid UTF-8. String constants are therefore decoded to ``bytes`` so
that ``len`` and comparisons see exactly the bytes Go sees.
"""

import string
from typing import Tuple


MAX_RUNE = 0x10FFFF

_SIMPLE_ESCAPES = {
    "a": 0x07, "b": 0x08, "f": 0x0C, "n": 0x0A, "r": 0x0D,
    "t": 0x09, "v": 0x0B, "\\": 0x5C, "'": 0x27, '"': 0x22,
}
_HEX_WIDTHS = {"x": 2, "u": 4, "U": 8}


def _check_rune(code: int) -> int:
    if code > MAX_RUNE or 0xD800 <= code <= 0xDFFF:
        raise ValueError(f"escape is invalid Unicode code point U+{code:04X}")
    return code


def _decode_escape(body: str, i: int, quote: str) -> Tuple[int, bool, int]:
    """
    Decode the escape sequence starting at ``body[i]``.

    Args:
        body: Literal text without its quotes.
        i: Index of the backslash.
        quote: The enclosing quote character; only it may be escaped.

    Returns:
        The value, whether it is a single byte (octal and ``\\x`` escapes)
        rather than a code point, and the index after the escape.
    """
    if i + 1 >= len(body):
        raise ValueError("escape sequence not terminated")
    esc = body[i + 1]
    if esc in _SIMPLE_ESCAPES:
        if esc in "'\"" and esc != quote:
            raise ValueError(f"unknown escape sequence \\{esc}")
        return _SIMPLE_ESCAPES[esc], False, i + 2
    if esc in string.octdigits:
        digits = body[i + 1:i + 4]
        if len(digits) != 3 or not all(d in string.octdigits for d in digits):
            raise ValueError(f"invalid octal escape \\{digits}")
        value = int(digits, 8)
        if value > 0xFF:
            raise ValueError(f"octal escape value \\{digits} > 255")
        return value, True, i + 4
    if esc in _HEX_WIDTHS:
        width = _HEX_WIDTHS[esc]
        digits = body[i + 2:i + 2 + width]
        if len(digits) != width or not all(d in string.hexdigits for d in digits):
            raise ValueError(f"invalid escape \\{esc}{digits}")
        value = int(digits, 16)
        if esc == "x":
            return value, True, i + 2 + width
        return _check_rune(value), False, i + 2 + width
    raise ValueError(f"unknown escape sequence \\{esc}")


def unquote_string(text: str) -> bytes:
    """Decode an interpreted ("...") or raw (`...`) string literal to bytes."""
    if text.startswith("`"):
        return text[1:-1].replace("\r", "").encode("utf-8")

    body = text[1:-1]
    out = bytearray()
    i = 0
    while i < len(body):
        if body[i] != "\\":
            out += body[i].encode("utf-8")
            i += 1
            continue
        value, is_byte, i = _decode_escape(body, i, '"')
        if is_byte:
            out.append(value)
        else:
            out += chr(value).encode("utf-8")
    return bytes(out)


def unquote_char(text: str) -> int:
    """Decode a rune literal to its value.

    Octal and ``\\x`` escapes denote a single byte value, everything else a
    code point.
    """
    body = text[1:-1]
    if body.startswith("\\"):
        value, _, end = _decode_escape(body, 0, "'")
        if end != len(body):
            raise ValueError(f"more than one character in rune literal {text}")
        return value
    if len(body) != 1:
        raise ValueError(f"invalid rune literal {text}")
    return ord(body)
