"""
lexer.py - Lexical primitives shared by the grammar rules in json_parser.

Every matcher takes the full text and an absolute offset and returns the
new offset (plus a decoded value where there is one). A matcher that does
not match raises Mismatch and leaves the caller's offset untouched.
"""

import re
from typing import Tuple

from diagnostics import Fatal, Mismatch

# ---------------------------------------------------------------------------
# REGEX BLUEPRINT
# ---------------------------------------------------------------------------
# ASCII classes only: \s and \d would admit Unicode whitespace and digits.
_WHITESPACE_RE = re.compile(r"[ \t\n\r]*")
_MANTISSA_RE   = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)")
_EXPONENT_RE   = re.compile(r"[eE][+-]?")
_DIGITS_RE     = re.compile(r"[0-9]+")


def skip_whitespace(text: str, pos: int) -> int:
    """Offset of the first character at or after pos that is not JSON whitespace."""
    return _WHITESPACE_RE.match(text, pos).end()


def expect_char(text: str, pos: int, char: str) -> int:
    if text.startswith(char, pos):
        return pos + 1
    raise Mismatch(pos, repr(char))


def match_literal(text: str, pos: int, literal: str) -> int:
    """Exact, case-sensitive match of a keyword."""
    if text.startswith(literal, pos):
        return pos + len(literal)
    raise Mismatch(pos, repr(literal))


# ---------------------------------------------------------------------------
# LITERALS
# ---------------------------------------------------------------------------
def parse_bool(text: str, pos: int) -> Tuple[bool, int]:
    if text.startswith("false", pos):
        return False, pos + 5
    if text.startswith("true", pos):
        return True, pos + 4
    raise Mismatch(pos, "'true' or 'false'")


def parse_null(text: str, pos: int) -> Tuple[None, int]:
    return None, match_literal(text, pos, "null")


# ---------------------------------------------------------------------------
# NUMBERS
# ---------------------------------------------------------------------------
def parse_number(text: str, pos: int) -> Tuple[float, int]:
    """
    Scan sign? (digits ('.' digits?)? | '.' digits) exponent? into a float.

    An exponent marker commits the scan: 'e' or 'E' without digits after
    the optional sign is Fatal, not a Mismatch.
    """
    m = _MANTISSA_RE.match(text, pos)
    if m is None:
        raise Mismatch(pos, "a number")
    end = m.end()

    exp = _EXPONENT_RE.match(text, end)
    if exp is not None:
        digits = _DIGITS_RE.match(text, exp.end())
        if digits is None:
            raise Fatal("exponent without digits", exp.end())
        end = digits.end()

    return float(text[pos:end]), end
