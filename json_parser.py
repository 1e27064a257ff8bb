# json_parser.py
# Recursive-descent JSON decoder with context-traced diagnostics.
#
# =============================================================================
#  PARSER IMPLEMENTATION: RECURSIVE DESCENT OVER OFFSETS
# =============================================================================
#
# One function per grammar rule [RFC 8259, section 2]. Each rule takes the
# whole document plus an absolute offset and returns (value, new_offset).
# A rule that does not match raises diagnostics.Mismatch; since offsets are
# immutable ints, the caller still holds its own position and can try the
# next alternative.
#
# Rules decorated with @context(...) add their label to the trace of any
# Mismatch passing through, so a failure deep inside a nested document
# reports every enclosing production, innermost first.
#
#   document   := ws (object | array) ws
#   value      := ws (string | bool | number | null | object | array) ws
#   object     := "{" ws (pair ("," pair)*)? ws "}"
#   pair       := ws string ws ":" value
#   array      := "[" (value ("," value)*)? "]"
#
# Numbers always decode to float. Repeated object keys: last one wins.
# =============================================================================

import argparse
import logging
import re
import sys
from functools import partial
from pprint import pformat
from typing import Callable, Dict, List, Optional, Sequence, Tuple, Union

from diagnostics import (
    Fatal,
    InternalParseError,
    JsonSyntaxError,
    Mismatch,
    ParseError,
    TrailingDataError,
    context,
    furthest,
)
from lexer import (
    expect_char,
    parse_bool,
    parse_null,
    parse_number,
    skip_whitespace,
)

__all__ = [
    "JsonValue",
    "ParseError",
    "JsonSyntaxError",
    "TrailingDataError",
    "InternalParseError",
    "parse",
    "parse_root",
    "main",
]

logger = logging.getLogger(__name__)

JsonValue = Union[Dict[str, "JsonValue"], List["JsonValue"], str, float, bool, None]

# ---------------------------------------------------------------------------
# CONSTANTS AND TUNABLES
# ---------------------------------------------------------------------------
DEPTH_LIMIT_DEFAULT = None   # None: bounded only by the interpreter stack

_ESCAPES = {
    '"': '"',
    "\\": "\\",
    "/": "/",
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
}
_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")

# Characters allowed unescaped inside a string: anything but '"', '\' and C0 controls.
_NORMAL_RUN_RE = re.compile(r'[^"\\\x00-\x1f]+')

# ---------------------------------------------------------------------------
# STRINGS
# ---------------------------------------------------------------------------
def _read_hex4(text: str, pos: int) -> int:
    """Four hex digits at pos as an int. Fewer than four characters left is Fatal."""
    digits = text[pos:pos + 4]
    if len(digits) < 4:
        raise Fatal("incomplete unicode escape", pos)
    if not all(c in _HEX_DIGITS for c in digits):
        raise Mismatch(pos, "4 hex digits")
    return int(digits, 16)


@context("hex_char")
def parse_hex_char(text: str, pos: int) -> Tuple[str, int]:
    """
    Decode 'uXXXX' (pos is at the 'u').

    A high surrogate must be followed by '\\uXXXX' holding a low surrogate;
    the pair decodes to one supplementary code point. Lone halves fail.
    """
    pos = expect_char(text, pos, "u")
    code = _read_hex4(text, pos)
    pos += 4

    if 0xDC00 <= code <= 0xDFFF:
        raise Mismatch(pos - 4, "a code point outside the surrogate range")
    if 0xD800 <= code <= 0xDBFF:
        if not text.startswith("\\u", pos):
            raise Mismatch(pos, "a low surrogate escape")
        low = _read_hex4(text, pos + 2)
        if not 0xDC00 <= low <= 0xDFFF:
            raise Mismatch(pos + 2, "a low surrogate escape")
        code = 0x10000 + ((code - 0xD800) << 10) + (low - 0xDC00)
        pos += 6

    return chr(code), pos


@context("escape")
def parse_escape(text: str, pos: int) -> Tuple[str, int]:
    """Decode the escape whose backslash sits just before pos."""
    if pos >= len(text):
        raise Fatal("incomplete escape", pos)
    char = text[pos]
    if char in _ESCAPES:
        return _ESCAPES[char], pos + 1
    if char == "u":
        return parse_hex_char(text, pos)
    raise Mismatch(pos, "an escape sequence")


@context("string")
def parse_string(text: str, pos: int) -> Tuple[str, int]:
    pos = expect_char(text, pos, '"')
    if text.startswith('"', pos):
        return "", pos + 1

    chunks: List[str] = []
    while True:
        run = _NORMAL_RUN_RE.match(text, pos)
        if run is not None:
            chunks.append(run.group())
            pos = run.end()
        if text.startswith("\\", pos):
            char, pos = parse_escape(text, pos + 1)
            chunks.append(char)
            continue
        break

    pos = expect_char(text, pos, '"')
    return "".join(chunks), pos

# ---------------------------------------------------------------------------
# ALTERNATION
# ---------------------------------------------------------------------------
Production = Callable[[str, int], Tuple[JsonValue, int]]


def _first_match(text: str, pos: int, productions: Sequence[Production], expected: str):
    """
    Try each production at pos in order; the first success wins.

    If every production fails, re-raise the failure that progressed past
    pos (the furthest one), or report `expected` at pos when none did.
    """
    failures = []
    for production in productions:
        try:
            return production(text, pos)
        except Mismatch as exc:
            failures.append(exc)
    best = furthest(*failures)
    if best.position > pos:
        raise best
    raise Mismatch(pos, expected)

# ---------------------------------------------------------------------------
# CORE VALUE PARSER
# ---------------------------------------------------------------------------
@context("value")
def parse_value(text: str, pos: int, depth: int = 0, max_depth: Optional[int] = None):
    """
    Parse one value with its surrounding whitespace.

    depth counts the containers enclosing this value.
    """
    start = skip_whitespace(text, pos)
    value, end = _first_match(text, start, (
        parse_string,
        parse_bool,
        parse_number,
        parse_null,
        partial(parse_object, depth=depth + 1, max_depth=max_depth),
        partial(parse_array, depth=depth + 1, max_depth=max_depth),
    ), "a value")
    return value, skip_whitespace(text, end)


def _check_depth(depth: int, max_depth: Optional[int], pos: int):
    if max_depth is not None and depth > max_depth:
        raise Fatal("depth limit exceeded", pos)


def _empty_or_raise(text: str, pos: int, closer: str, first: Mismatch) -> int:
    """
    The first element of a container failed. Accept an empty container
    (whitespace then closer); otherwise raise whichever failure is further.
    """
    after = skip_whitespace(text, pos)
    if text.startswith(closer, after):
        return after + 1
    raise furthest(first, Mismatch(after, repr(closer)))

# ---------------------------------------------------------------------------
# ARRAY PARSER
# ---------------------------------------------------------------------------
@context("array")
def parse_array(text: str, pos: int, depth: int = 1, max_depth: Optional[int] = None):
    pos = expect_char(text, pos, "[")
    _check_depth(depth, max_depth, pos - 1)

    items: List[JsonValue] = []
    try:
        item, pos = parse_value(text, pos, depth, max_depth)
    except Mismatch as exc:
        return items, _empty_or_raise(text, pos, "]", exc)
    items.append(item)

    while text.startswith(",", pos):
        item, pos = parse_value(text, pos + 1, depth, max_depth)
        items.append(item)
    if not text.startswith("]", pos):
        raise Mismatch(pos, "',' or ']'")
    return items, pos + 1

# ---------------------------------------------------------------------------
# OBJECT PARSER
# ---------------------------------------------------------------------------
def _parse_pair(text: str, pos: int, depth: int, max_depth: Optional[int]):
    pos = skip_whitespace(text, pos)
    key, pos = parse_string(text, pos)
    pos = skip_whitespace(text, pos)
    pos = expect_char(text, pos, ":")
    value, pos = parse_value(text, pos, depth, max_depth)
    return key, value, pos


@context("object")
def parse_object(text: str, pos: int, depth: int = 1, max_depth: Optional[int] = None):
    """Parse an object. A repeated key keeps the value of its last occurrence."""
    pos = expect_char(text, pos, "{")
    _check_depth(depth, max_depth, pos - 1)

    obj: Dict[str, JsonValue] = {}
    try:
        key, value, pos = _parse_pair(text, pos, depth, max_depth)
    except Mismatch as exc:
        return obj, _empty_or_raise(text, pos, "}", exc)
    obj[key] = value

    while text.startswith(",", pos):
        key, value, pos = _parse_pair(text, pos + 1, depth, max_depth)
        obj[key] = value
    if not text.startswith("}", pos):
        raise Mismatch(pos, "',' or '}'")
    return obj, pos + 1

# ---------------------------------------------------------------------------
# PUBLIC API
# ---------------------------------------------------------------------------
def parse_root(text: str, max_depth: Optional[int] = DEPTH_LIMIT_DEFAULT) -> Tuple[JsonValue, str]:
    """
    Parse the root container and return it with the unconsumed remainder.

    Only an object or an array may stand at the root [RFC 4627]. Raises the
    internal Mismatch/Fatal signals; use parse() for public errors.
    """
    pos = skip_whitespace(text, 0)
    value, pos = _first_match(text, pos, (
        partial(parse_object, max_depth=max_depth),
        partial(parse_array, max_depth=max_depth),
    ), "'{' or '['")
    pos = skip_whitespace(text, pos)
    return value, text[pos:]


def parse(text: str, *, max_depth: Optional[int] = DEPTH_LIMIT_DEFAULT) -> JsonValue:
    """
    Decode a complete JSON document.

    Raises JsonSyntaxError (trace of contexts with line/column excerpts),
    TrailingDataError (valid root followed by more text) or
    InternalParseError (irrecoverable scan; message is always "failure").
    """
    try:
        value, rest = parse_root(text, max_depth=max_depth)
    except Mismatch as exc:
        logger.debug("syntax error at offset %d: %s", exc.position, exc)
        raise JsonSyntaxError(text, exc.frames) from None
    except Fatal as exc:
        logger.debug("internal failure: %s", exc)
        raise InternalParseError(exc.reason) from None
    except RecursionError:
        logger.debug("internal failure: nesting exceeds the interpreter stack")
        raise InternalParseError("recursion limit reached") from None

    if rest:
        position = len(text) - len(rest)
        logger.debug("trailing data at offset %d", position)
        raise TrailingDataError(position)

    logger.debug("decoded %d characters into %s", len(text), type(value).__name__)
    return value

# ---------------------------------------------------------------------------
# CLI ENTRYPOINT
# ---------------------------------------------------------------------------
DEMO_VALID = """  { "a"\t: 42,
    "b": [ "x", "y", 12 ] ,
    "c": { "hello" : "world"
    }
    } """

DEMO_INVALID = """  { "a"\t: 42,
    "b": [ "x", "y", 12 ] ,
    "c": { 1"hello" : "world"
    }
    } """


def _demo(max_depth: Optional[int]) -> int:
    for label, document in (("valid", DEMO_VALID), ("invalid", DEMO_INVALID)):
        print(f"parsing {label} JSON data:\n\n****************\n{document}\n****************\n")
        try:
            print(f"result:\n{pformat(parse(document, max_depth=max_depth))}\n")
        except ParseError as exc:
            print(f"error information:\n{exc}\n")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """
    Command-line validator. Exit 0 on valid input, 1 on a parse error.
    """
    ap = argparse.ArgumentParser(description="JSON decoder with context-traced diagnostics")
    ap.add_argument("file", nargs="?", help="JSON file to decode ('-' for stdin)")
    ap.add_argument("--show", action="store_true", help="print the decoded value instead of OK")
    ap.add_argument("--max-depth", type=int, default=DEPTH_LIMIT_DEFAULT)
    ap.add_argument("--demo", action="store_true", help="decode the built-in example documents")
    ap.add_argument("-v", "--verbose", action="store_true", help="debug logging to stderr")
    args = ap.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.demo:
        return _demo(args.max_depth)
    if args.file is None:
        ap.error("a file is required unless --demo is given")

    if args.file == "-":
        data = sys.stdin.read()
    else:
        try:
            with open(args.file, "r", encoding="utf-8") as fh:
                data = fh.read()
        except (OSError, UnicodeDecodeError) as exc:
            ap.error(f"cannot read {args.file}: {exc}")

    try:
        value = parse(data, max_depth=args.max_depth)
    except ParseError as exc:
        print(f"SyntaxError: {exc}", file=sys.stderr)
        return 1

    print(pformat(value) if args.show else "OK")
    return 0

# ---------------------------------------------------------------------------
# MAIN GUARD
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    sys.exit(main())
