"""
Repair of truncated JSON text.

Closes strings, keywords, numbers and containers left open when a JSON
document is cut off mid-stream, so the result can be handed to any standard
JSON parser. Each call is independent: callers re-run the repair on the
whole buffer seen so far whenever more input arrives.
"""

import codecs
import logging
import os
import re
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any
from typing import TypeAlias

__version__ = "0.1.0"

Position: TypeAlias = int

# Fragments may arrive as text or as raw UTF-8 from the wire
Fragment = str | bytes | bytearray

logger = logging.getLogger(__name__)

# Profiling infrastructure - zero-cost when disabled
PROFILE_HOT_PATHS = __debug__ and "JMEND_PROFILE" in os.environ


@dataclass
class HotPathStats:
    """Statistics for profiling hot paths during repair."""

    function_name: str
    call_count: int = 0
    total_time_ns: int = 0
    chars_processed: int = 0

    def record_call(self, duration_ns: int, chars: int = 0) -> None:
        """Records a function call with timing and character processing info."""
        self.call_count += 1
        self.total_time_ns += duration_ns
        self.chars_processed += chars


if PROFILE_HOT_PATHS:
    _hot_path_stats: dict[str, HotPathStats] = {}

    class ProfileContext:
        """Context manager for profiling hot paths."""

        def __init__(self, func_name: str, chars_to_process: int = 0):
            self.func_name = func_name
            self.chars = chars_to_process
            self.start_time = 0

        def __enter__(self) -> "ProfileContext":
            self.start_time = time.perf_counter_ns()
            return self

        def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
            duration = time.perf_counter_ns() - self.start_time
            if self.func_name not in _hot_path_stats:
                _hot_path_stats[self.func_name] = HotPathStats(self.func_name)
            _hot_path_stats[self.func_name].record_call(duration, self.chars)

    def get_hot_path_stats() -> dict[str, HotPathStats]:
        """Returns current profiling statistics."""
        return _hot_path_stats.copy()

    def clear_hot_path_stats() -> None:
        """Clears profiling statistics."""
        _hot_path_stats.clear()

else:

    class ProfileContext:  # type: ignore[no-redef]
        def __init__(self, func_name: str, chars: int = 0) -> None:
            pass

        def __enter__(self) -> "ProfileContext":
            return self

        def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
            pass

    def get_hot_path_stats() -> dict[str, HotPathStats]:
        return {}

    def clear_hot_path_stats() -> None:
        pass


class Container(Enum):
    """Kinds of open container tracked on the context stack."""

    OBJECT = "object"
    ARRAY = "array"


class ParseState(Enum):
    """
    Grammar position of the innermost open context.

    Says what the scanner expects to see next: a root value, a key,
    a colon, a value, or a comma/closer.
    """

    START = "start"
    END = "end"
    OBJECT_START = "object_start"
    OBJECT_KEY = "object_key"
    OBJECT_COLON = "object_colon"
    OBJECT_VALUE = "object_value"
    OBJECT_COMMA = "object_comma"
    ARRAY_START = "array_start"
    ARRAY_VALUE = "array_value"
    ARRAY_COMMA = "array_comma"


class TailToken(Enum):
    """Classification of the last lexical unit before the end of input."""

    COMPLETE = "complete"
    STRING = "string"
    KEYWORD = "keyword"
    NUMBER = "number"
    DANGLING = "dangling"


class Status(Enum):
    """Whether a fragment is finished, still growing, or beyond repair."""

    VALID = "valid"
    CONTINUE = "continue"
    INVALID = "invalid"


KEYWORDS = ("true", "false", "null")

# Bare "t", "f" and "n" carry too little to commit to a keyword
MIN_KEYWORD_PREFIX = 2

_WHITESPACE = frozenset(" \t\n\r")
_LETTERS = frozenset("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ")
_NUMBER_START = frozenset("-0123456789")
_NUMBER_CHARS = frozenset("0123456789+-.eE")
_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")
_SIMPLE_ESCAPES = frozenset('"\\/bfnrt')

_CLOSERS = {Container.OBJECT: "}", Container.ARRAY: "]"}

_NUMBER = re.compile(r"-?(?:0|[1-9][0-9]*)(?:\.[0-9]+)?(?:[eE][+-]?[0-9]+)?")
_NUMBER_PREFIX = re.compile(
    r"-|-?(?:0|[1-9][0-9]*)(?:\.[0-9]*|(?:\.[0-9]+)?[eE][+-]?[0-9]*)?"
)
_STRING_SPECIAL = re.compile(r'["\\\x00-\x1f]')

_VALUE_POSITIONS = frozenset(
    {
        ParseState.START,
        ParseState.OBJECT_VALUE,
        ParseState.ARRAY_START,
        ParseState.ARRAY_VALUE,
    }
)
_KEY_POSITIONS = frozenset({ParseState.OBJECT_START, ParseState.OBJECT_KEY})
_CLOSABLE_POSITIONS = frozenset(
    {
        ParseState.OBJECT_START,
        ParseState.OBJECT_COMMA,
        ParseState.ARRAY_START,
        ParseState.ARRAY_COMMA,
    }
)
# Positions reached through a separator or key that still await a value
_DANGLING_POSITIONS = frozenset(
    {
        ParseState.OBJECT_KEY,
        ParseState.OBJECT_COLON,
        ParseState.OBJECT_VALUE,
        ParseState.ARRAY_VALUE,
    }
)


class RepairScanner:
    """
    Single-pass scanner that finds where a JSON fragment can be closed.

    Tracks the context stack, string and escape state, and the cut point:
    the latest offset after which the prefix, followed by the closers of
    the containers open there, forms a balanced document. Safe offsets are
    those right after an opening bracket, a well-formed value, or a closer.

    Input that truncation cannot explain is left in place, except closers
    that match no open container: those are blanked to a space so the output
    stays balanced without merging the tokens around them.
    """

    def __init__(self, text: str):
        self.text = text
        self.length = len(text)
        self.stack: list[Container] = []
        self.state = ParseState.START
        self.invalid = False
        self.cut: Position = 0
        self.cut_depth = 0
        self.tail = TailToken.COMPLETE
        self.token_start: Position = 0
        self.in_string = False
        self.stray_closers: list[Position] = []
        self._pending: TailToken | None = None
        self._escape_start: Position | None = None
        self._hex_digits = -1
        self._surrogate_start: Position | None = None
        self._surrogate_end: Position = -1

    def scan(self) -> TailToken:
        """Scans the whole fragment and classifies its trailing token."""
        with ProfileContext("scan", self.length):
            text = self.text
            pos = 0
            while pos < self.length:
                if self.in_string:
                    pos = self._scan_string(pos)
                    if not self.in_string:
                        self._finish_string(pos)
                    continue

                char = text[pos]
                if char in _WHITESPACE:
                    pos += 1
                elif char == '"':
                    self.in_string = True
                    self.token_start = pos
                    pos += 1
                elif char == "{" or char == "[":
                    self._open(char, pos)
                    pos += 1
                elif char == "}" or char == "]":
                    self._close(char, pos)
                    pos += 1
                elif char == ",":
                    self._comma(pos)
                    pos += 1
                elif char == ":":
                    self._colon(pos)
                    pos += 1
                elif char in _NUMBER_START:
                    pos = self._scan_scalar(
                        pos, _NUMBER_CHARS, TailToken.NUMBER
                    )
                elif char in _LETTERS:
                    pos = self._scan_scalar(pos, _LETTERS, TailToken.KEYWORD)
                else:
                    self._flag(f"unexpected character {char!r}", pos)
                    pos += 1

            self.tail = self._classify_tail()
            return self.tail

    def _classify_tail(self) -> TailToken:
        if self.in_string:
            return TailToken.STRING
        if self._pending is not None:
            return self._pending
        if self.state in _DANGLING_POSITIONS:
            return TailToken.DANGLING
        return TailToken.COMPLETE

    def _scan_string(self, pos: Position) -> Position:
        """
        Consumes string content up to and including the closing quote.

        Returns the end of input with in_string still set when the string
        is unterminated. Progress through an unfinished escape is kept so
        the repair can drop it.
        """
        text = self.text
        while pos < self.length:
            if self._hex_digits >= 0:
                if text[pos] in _HEX_DIGITS:
                    self._hex_digits += 1
                    pos += 1
                    if self._hex_digits == 4:
                        self._finish_unicode_escape(pos)
                    continue
                # Short \u escape; the character is ordinary content
                self._flag("malformed unicode escape", pos)
                self._escape_start = None
                self._hex_digits = -1
            elif self._escape_start is not None:
                char = text[pos]
                if char == "u":
                    self._hex_digits = 0
                else:
                    if char not in _SIMPLE_ESCAPES:
                        self._flag("invalid escape", pos)
                    self._escape_start = None
                pos += 1
                continue

            match = _STRING_SPECIAL.search(text, pos)
            if match is None:
                return self.length

            pos = match.start()
            char = text[pos]
            if char == '"':
                self.in_string = False
                return pos + 1
            elif char == "\\":
                self._escape_start = pos
            else:
                self._flag("control character in string", pos)
            pos += 1

        return pos

    def _finish_unicode_escape(self, end: Position) -> None:
        code_point = int(self.text[end - 4 : end], 16)
        if 0xD800 <= code_point <= 0xDBFF:
            self._surrogate_start = self._escape_start
            self._surrogate_end = end
        else:
            self._surrogate_start = None
        self._escape_start = None
        self._hex_digits = -1

    def _finish_string(self, end: Position) -> None:
        self._escape_start = None
        self._surrogate_start = None
        if self.state in _KEY_POSITIONS:
            self.state = ParseState.OBJECT_COLON
        else:
            self._complete_value(self.token_start, end)

    def _scan_scalar(
        self, start: Position, charset: frozenset[str], kind: TailToken
    ) -> Position:
        """Scans a number or keyword; one reaching end of input is pending."""
        end = start + 1
        while end < self.length and self.text[end] in charset:
            end += 1

        if end == self.length:
            self.token_start = start
            self._pending = kind
            return end

        token = self.text[start:end]
        if kind is TailToken.NUMBER:
            valid = _NUMBER.fullmatch(token) is not None
        else:
            valid = token in KEYWORDS
        if not valid:
            self._flag(f"malformed {kind.value} {token!r}", start)
        self._complete_value(start, end, well_formed=valid)
        return end

    def _complete_value(
        self, start: Position, end: Position, well_formed: bool = True
    ) -> None:
        """Takes a finished token as the value the current context awaits."""
        if self.state not in _VALUE_POSITIONS:
            self._flag(f"value out of place {self.text[start:end]!r}", start)
            return

        self.state = self._after_value()
        # Malformed tokens stay in the output but are never a place to cut
        if well_formed:
            self._mark_cut(end)

    def _after_value(self) -> ParseState:
        if not self.stack:
            return ParseState.END
        if self.stack[-1] is Container.OBJECT:
            return ParseState.OBJECT_COMMA
        return ParseState.ARRAY_COMMA

    def _open(self, char: str, pos: Position) -> None:
        if self.state not in _VALUE_POSITIONS:
            self._flag("container out of place", pos)

        if char == "{":
            self.stack.append(Container.OBJECT)
            self.state = ParseState.OBJECT_START
        else:
            self.stack.append(Container.ARRAY)
            self.state = ParseState.ARRAY_START
        self._mark_cut(pos + 1)

    def _close(self, char: str, pos: Position) -> None:
        container = Container.OBJECT if char == "}" else Container.ARRAY
        if not self.stack or self.stack[-1] is not container:
            self._flag(f"unmatched closer {char!r}", pos)
            self.stray_closers.append(pos)
            return

        if self.state not in _CLOSABLE_POSITIONS:
            self._flag("closer before value", pos)
        self.stack.pop()
        self.state = self._after_value()
        self._mark_cut(pos + 1)

    def _comma(self, pos: Position) -> None:
        if self.state is ParseState.OBJECT_COMMA:
            self.state = ParseState.OBJECT_KEY
        elif self.state is ParseState.ARRAY_COMMA:
            self.state = ParseState.ARRAY_VALUE
        else:
            self._flag("comma out of place", pos)

    def _colon(self, pos: Position) -> None:
        if self.state is ParseState.OBJECT_COLON:
            self.state = ParseState.OBJECT_VALUE
        else:
            self._flag("colon out of place", pos)

    def _mark_cut(self, end: Position) -> None:
        self.cut = end
        self.cut_depth = len(self.stack)

    def _flag(self, reason: str, pos: Position) -> None:
        if not self.invalid:
            logger.debug(
                "Fragment is not a clean truncation: %s at %d", reason, pos
            )
        self.invalid = True

    def _closers(self, depth: int) -> str:
        return "".join(
            _CLOSERS[container] for container in reversed(self.stack[:depth])
        )

    def _truncate_to_cut(self) -> str:
        return self.text[: self.cut] + self._closers(self.cut_depth)

    def repaired(self) -> str:
        """Builds the closed document for the scanned fragment."""
        if self.stray_closers:
            logger.debug(
                "Blanking %d unmatched closer(s)", len(self.stray_closers)
            )
            chars = list(self.text)
            for pos in self.stray_closers:
                chars[pos] = " "
            self.text = "".join(chars)
            self.stray_closers.clear()

        handlers = {
            TailToken.COMPLETE: self._repair_complete,
            TailToken.STRING: self._repair_string,
            TailToken.KEYWORD: self._repair_keyword,
            TailToken.NUMBER: self._repair_number,
            TailToken.DANGLING: self._repair_dangling,
        }
        return handlers[self.tail]()

    def _repair_complete(self) -> str:
        if self.state is ParseState.END:
            return self.text
        return self._truncate_to_cut()

    def _repair_dangling(self) -> str:
        logger.debug(
            "Dropping dangling %s after offset %d", self.state.value, self.cut
        )
        return self._truncate_to_cut()

    def _repair_string(self) -> str:
        if self.state not in _VALUE_POSITIONS:
            logger.debug("Dropping incomplete key at %d", self.token_start)
            return self._truncate_to_cut()

        keep = self.length
        if self._escape_start is not None:
            keep = self._escape_start
        # A high surrogate whose low half was cut off
        if self._surrogate_start is not None and self._surrogate_end == keep:
            keep = self._surrogate_start
        if keep < self.length:
            logger.debug("Dropping incomplete escape at %d", keep)
        return self.text[:keep] + '"' + self._closers(len(self.stack))

    def _repair_keyword(self) -> str:
        token = self.text[self.token_start :]
        completion = _keyword_completion(token)
        if completion is None or self.state not in _VALUE_POSITIONS:
            logger.debug("Dropping partial keyword %r", token)
            return self._truncate_to_cut()
        return self.text + completion + self._closers(len(self.stack))

    def _repair_number(self) -> str:
        token = self.text[self.token_start :]
        match = _NUMBER.match(token)
        if match is None or self.state not in _VALUE_POSITIONS:
            logger.debug("Dropping partial number %r", token)
            return self._truncate_to_cut()

        number = match.group()
        if number != token:
            logger.debug("Trimming partial number %r to %r", token, number)
        return (
            self.text[: self.token_start]
            + number
            + self._closers(len(self.stack))
        )

    def status(self) -> Status:
        """Reports whether the scanned fragment is done, growing, or broken."""
        if self.invalid or not self._tail_viable():
            return Status.INVALID

        if self.tail is TailToken.COMPLETE and self.state is ParseState.END:
            return Status.VALID

        # A root number or keyword is already a document
        if self.state is ParseState.START and not self.stack:
            token = self.text[self.token_start :]
            if self.tail is TailToken.NUMBER and _NUMBER.fullmatch(token):
                return Status.VALID
            if self.tail is TailToken.KEYWORD and token in KEYWORDS:
                return Status.VALID

        return Status.CONTINUE

    def _tail_viable(self) -> bool:
        """Checks the pending token could still become valid JSON."""
        if self.tail is TailToken.STRING:
            return (
                self.state in _VALUE_POSITIONS or self.state in _KEY_POSITIONS
            )
        if self.tail is TailToken.KEYWORD:
            token = self.text[self.token_start :]
            return self.state in _VALUE_POSITIONS and any(
                keyword.startswith(token) for keyword in KEYWORDS
            )
        if self.tail is TailToken.NUMBER:
            token = self.text[self.token_start :]
            return (
                self.state in _VALUE_POSITIONS
                and _NUMBER_PREFIX.fullmatch(token) is not None
            )
        return True


def _keyword_completion(token: str) -> str | None:
    """Returns the characters that finish a keyword prefix, if it is one."""
    if len(token) < MIN_KEYWORD_PREFIX:
        return None
    for keyword in KEYWORDS:
        if keyword.startswith(token):
            return keyword[len(token) :]
    return None


def _coerce_fragment(fragment: Fragment) -> str:
    """
    Converts a fragment to text.

    Bytes are decoded as UTF-8; a multi-byte character cut off at the end of
    the buffer is dropped like any other truncated token.
    """
    if isinstance(fragment, str):
        return fragment
    if isinstance(fragment, bytes | bytearray):
        decoder = codecs.getincrementaldecoder("utf-8")()
        return decoder.decode(bytes(fragment), final=False)
    raise TypeError(
        f"the JSON fragment must be str, bytes or bytearray, "
        f"not {type(fragment).__name__}"
    )


def repair(fragment: Fragment) -> str:
    """
    Closes a truncated JSON fragment into a balanced document.

    Open strings are terminated, keyword prefixes completed, partial numbers
    trimmed, dangling separators and keys dropped, and open containers
    closed innermost first. Complete documents come back unchanged, and
    repairing a repaired document is a no-op. Never raises for str input;
    the caller's JSON parser remains the judge of validity.
    """
    text = _coerce_fragment(fragment)
    with ProfileContext("repair", len(text)):
        scanner = RepairScanner(text)
        scanner.scan()
        return scanner.repaired()


def status(fragment: Fragment) -> Status:
    """
    Reports whether a fragment is a complete document, a prefix of one, or
    has diverged from JSON for some reason other than truncation.
    """
    text = _coerce_fragment(fragment)
    with ProfileContext("status", len(text)):
        scanner = RepairScanner(text)
        scanner.scan()
        return scanner.status()


__all__ = [
    "KEYWORDS",
    "MIN_KEYWORD_PREFIX",
    "Container",
    "Fragment",
    "HotPathStats",
    "ParseState",
    "RepairScanner",
    "Status",
    "TailToken",
    "clear_hot_path_stats",
    "get_hot_path_stats",
    "repair",
    "status",
]
