# diagnostics.py
# Error types, context frames and trace rendering for the JSON parser.
#
# =============================================================================
#  ERROR MODEL
# =============================================================================
#
# Productions signal two internal conditions:
#   Mismatch - the production does not match at this position. Recoverable:
#              alternation catches it and tries the next production. Carries
#              the trace built so far, innermost frame first.
#   Fatal    - the scan cannot continue (input ends inside an escape, an
#              exponent without digits, nesting limit). Never caught by
#              alternation.
#
# json_parser.parse() converts them into the public ParseError family. Only
# that family leaves the module.
#
# Line/column arithmetic follows the stdlib json.decoder.JSONDecodeError.
# =============================================================================

import functools
from typing import List, NamedTuple, Tuple

# ---------------------------------------------------------------------------
# FRAME KINDS
# ---------------------------------------------------------------------------
EXPECTED = "EXPECTED"   # innermost record: what the grammar wanted here
CONTEXT  = "CONTEXT"    # a named production that was active

GENERIC_FAILURE = "failure"
TRAILING_DATA   = "unexpected trailing data"


class Frame(NamedTuple):
    """One trace entry: (absolute position, label, kind)."""
    position: int
    label: str
    kind: str


# ---------------------------------------------------------------------------
# INTERNAL SIGNALS
# ---------------------------------------------------------------------------
class Mismatch(Exception):
    """A production failed to match; alternatives may still succeed."""

    def __init__(self, position: int, expected: str):
        super().__init__(f"expected {expected} at offset {position}")
        self.frames: List[Frame] = [Frame(position, expected, EXPECTED)]

    @property
    def position(self) -> int:
        return self.frames[0].position

    def push(self, position: int, label: str) -> None:
        self.frames.append(Frame(position, label, CONTEXT))


class Fatal(Exception):
    """Irrecoverable scanning state."""

    def __init__(self, reason: str, position: int):
        super().__init__(f"{reason} at offset {position}")
        self.reason = reason
        self.position = position


def context(label: str):
    """
    Name a production for the failure trace.

    The wrapped function takes (text, pos, ...) and returns (value, pos).
    A Mismatch passing through it gains a CONTEXT frame at the entry
    position.
    """
    def decorate(production):
        @functools.wraps(production)
        def wrapper(text, pos, *args, **kwargs):
            try:
                return production(text, pos, *args, **kwargs)
            except Mismatch as exc:
                exc.push(pos, label)
                raise
        wrapper.label = label
        return wrapper
    return decorate


def furthest(*failures: Mismatch) -> Mismatch:
    """The failure that got furthest into the input; earliest wins a tie."""
    return max(failures, key=lambda exc: exc.position)


# ---------------------------------------------------------------------------
# LOCATION AND RENDERING
# ---------------------------------------------------------------------------
def locate(document: str, position: int) -> Tuple[int, int]:
    """1-based (line, column) of an absolute offset."""
    line = document.count("\n", 0, position) + 1
    column = position - document.rfind("\n", 0, position)
    return line, column


def _source_line(document: str, position: int) -> str:
    start = document.rfind("\n", 0, position) + 1
    end = document.find("\n", position)
    if end == -1:
        end = len(document)
    return document[start:end].rstrip("\r")


def _describe(document: str, frame: Frame) -> str:
    if frame.kind == CONTEXT:
        return f"in {frame.label}"
    if frame.position >= len(document):
        return f"expected {frame.label}, got end of input"
    return f"expected {frame.label}, found {document[frame.position]!r}"


def render_trace(document: str, frames: List[Frame]) -> str:
    """
    Format a trace nearest-first, one block per frame:

        0: at line 3, column 12: expected '"', found '1'
            "c": { 1"hello" : "world"
                   ^
    """
    blocks = []
    for index, frame in enumerate(frames):
        line, column = locate(document, frame.position)
        blocks.append(
            f"{index}: at line {line}, column {column}: {_describe(document, frame)}\n"
            f"{_source_line(document, frame.position)}\n"
            f"{' ' * (column - 1)}^"
        )
    return "\n\n".join(blocks)


# ---------------------------------------------------------------------------
# PUBLIC ERRORS
# ---------------------------------------------------------------------------
class ParseError(SyntaxError):
    """Base for everything json_parser.parse() raises on invalid input."""


class JsonSyntaxError(ParseError):
    """Input does not match the grammar. str() is the rendered trace."""

    def __init__(self, document: str, frames: List[Frame]):
        super().__init__(render_trace(document, frames))
        self.document = document
        self.frames = list(frames)
        self.position = self.frames[0].position
        self.line, self.column = locate(document, self.position)

    @property
    def contexts(self) -> List[str]:
        return [f.label for f in self.frames if f.kind == CONTEXT]


class TrailingDataError(ParseError):
    def __init__(self, position: int):
        super().__init__(TRAILING_DATA)
        self.position = position


class InternalParseError(ParseError):
    def __init__(self, reason: str):
        super().__init__(GENERIC_FAILURE)
        self.reason = reason
