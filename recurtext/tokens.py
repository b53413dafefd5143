"""
Lexical layer of the recurrence text parser.

Every token kind owns one anchored recognizer. At each offset the tokenizer
tries all requested kinds and keeps the strictly longest match, so
overlapping categories ("day" / "day of the week", "month" / "months")
resolve deterministically. On equal lengths the kind requested first wins,
which is how "2012" becomes a year rather than a rank.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Sequence, Union

import regex as re

logger = logging.getLogger(__name__)


# =============================================================================
# Token kinds
# =============================================================================

class TokenKind(Enum):
    """Closed set of lexical categories."""
    END_OF_INPUT = "end_of_input"
    RANK = "rank"
    CLOCK_TIME = "clock_time"
    DAY_NAME = "day_name"
    MONTH_NAME = "month_name"
    YEAR = "year"
    EVERY = "every"
    EVERYDAY = "everyday"
    AFTER = "after"
    BEFORE = "before"
    SECOND = "second"
    MINUTE = "minute"
    HOUR = "hour"
    DAY = "day"
    DAY_INSTANCE = "day_instance"
    DAY_OF_WEEK = "day_of_week"
    DAY_OF_YEAR = "day_of_year"
    WEEK_OF_YEAR = "week_of_year"
    WEEK_OF_MONTH = "week_of_month"
    WEEKDAY = "weekday"
    WEEKEND = "weekend"
    MONTH = "month"
    YEAR_WORD = "year_word"
    BETWEEN = "between"
    START = "start"
    AT = "at"
    AND = "and"
    EXCEPT = "except"
    ALSO = "also"
    FIRST = "first"
    LAST = "last"
    IN = "in"
    OF = "of"
    ON_THE = "on_the"
    ON = "on"
    THROUGH = "through"
    FOR = "for"


# Patterns are applied with ``pattern.match(text, pos)``, so they are
# anchored at the cursor without a leading ``^``.
TOKEN_PATTERNS = {
    TokenKind.END_OF_INPUT: r"\Z",
    TokenKind.RANK: r"(?:\d+(?:st|nd|rd|th)?|an|a)\b",
    TokenKind.CLOCK_TIME: (
        r"(?:(?:0?[1-9]|1[0-2])(?::[0-5]\d\s?)?(?:am|pm|a|p)"
        r"|(?:0?\d|1\d|2[0-3]):[0-5]\d)\b"
    ),
    TokenKind.DAY_NAME: (
        r"(?:sun|mon|tues?|wed(?:nes)?|thu(?:rs?)?|fri|sat(?:ur)?)(?:day)?s?\b"
    ),
    TokenKind.MONTH_NAME: (
        r"(?:jan(?:uary)?|feb(?:ruary)?|mar(?:ch)?|apr(?:il)?|may|june?|july?"
        r"|aug(?:ust)?|sep(?:t(?:ember)?)?|oct(?:ober)?|nov(?:ember)?|dec(?:ember)?)\b"
    ),
    TokenKind.YEAR: r"(?:20|19)\d\d\b",
    TokenKind.EVERY: r"every\b",
    TokenKind.EVERYDAY: r"everyday\b",
    TokenKind.AFTER: r"after\b",
    TokenKind.BEFORE: r"before\b",
    TokenKind.SECOND: r"(?:s|sec(?:ond)?s?)\b",
    TokenKind.MINUTE: r"(?:m|min(?:ute)?s?)\b",
    TokenKind.HOUR: r"(?:h|hours?)\b",
    TokenKind.DAY: r"days?(?: of the month)?\b",
    TokenKind.DAY_INSTANCE: r"day instances?\b",
    TokenKind.DAY_OF_WEEK: r"days? of the week\b",
    TokenKind.DAY_OF_YEAR: r"days? of the year\b",
    TokenKind.WEEK_OF_YEAR: r"weeks?(?: of the year)?\b",
    TokenKind.WEEK_OF_MONTH: r"weeks? of the month\b",
    TokenKind.WEEKDAY: r"weekdays?\b",
    TokenKind.WEEKEND: r"weekends?\b",
    TokenKind.MONTH: r"months?\b",
    TokenKind.YEAR_WORD: r"years?\b",
    TokenKind.BETWEEN: r"(?:between(?: the)?|from)\b",
    TokenKind.START: r"start(?:ing)? (?:at|on(?: the)?)?\b",
    TokenKind.AT: r"(?:at\b|@)",
    TokenKind.AND: r"(?:,|and\b)",
    TokenKind.EXCEPT: r"except\b",
    TokenKind.ALSO: r"also\b",
    TokenKind.FIRST: r"first\b",
    TokenKind.LAST: r"last\b",
    TokenKind.IN: r"in\b",
    TokenKind.OF: r"of\b",
    TokenKind.ON_THE: r"on the\b",
    TokenKind.ON: r"on\b",
    TokenKind.THROUGH: r"(?:-|(?:to|through|thru|until|til)\b)",
    TokenKind.FOR: r"for\b",
}

RECOGNIZERS = {kind: re.compile(pattern) for kind, pattern in TOKEN_PATTERNS.items()}

WHITESPACE = re.compile(r"\s+")
WORD = re.compile(r"\S*")

# Calendar granularity nouns, in the order they are probed.
PERIOD_KINDS = (
    TokenKind.SECOND,
    TokenKind.MINUTE,
    TokenKind.HOUR,
    TokenKind.DAY_OF_YEAR,
    TokenKind.DAY_OF_WEEK,
    TokenKind.DAY_INSTANCE,
    TokenKind.DAY,
    TokenKind.MONTH,
    TokenKind.YEAR_WORD,
    TokenKind.WEEK_OF_MONTH,
    TokenKind.WEEK_OF_YEAR,
)


# =============================================================================
# Tokens and cursor
# =============================================================================

@dataclass(frozen=True)
class Token:
    """A classified span of the input text."""
    start: int
    end: int
    text: str
    kind: Optional[TokenKind] = None  # None for an unclassified word


class UnparsableInputError(ValueError):
    """No expected token could be read at ``offset``."""

    def __init__(self, offset: int, token: Optional[Token] = None):
        self.offset = offset
        self.token = token
        if token is not None and token.text:
            message = f"Unparsable input at offset {offset}: {token.text!r}"
        else:
            message = f"Unparsable input at offset {offset}"
        super().__init__(message)


@dataclass
class ParseCursor:
    text: str
    position: int = 0
    first_error_offset: int = -1

    @property
    def at_end(self) -> bool:
        return self.position >= len(self.text)

    @property
    def failed(self) -> bool:
        return self.first_error_offset >= 0

    def record_error(self, offset: int) -> None:
        # Only the first failure is kept.
        if self.first_error_offset < 0:
            self.first_error_offset = offset


KindSpec = Union[TokenKind, Iterable[TokenKind]]


def _as_kinds(kinds: KindSpec) -> Sequence[TokenKind]:
    if isinstance(kinds, TokenKind):
        return (kinds,)
    return tuple(kinds)


class Tokenizer:
    """Longest-match scanner over a lowercased input string."""

    def __init__(self, text: str):
        self.cursor = ParseCursor(text=text.lower())

    @property
    def text(self) -> str:
        return self.cursor.text

    @property
    def position(self) -> int:
        return self.cursor.position

    def skip_whitespace(self, offset: int) -> int:
        match = WHITESPACE.match(self.text, offset)
        return match.end() if match else offset

    def peek(self, kinds: KindSpec) -> Optional[Token]:
        """Return the longest token of one of ``kinds`` at the cursor, or None.

        The cursor is not moved.
        """
        start = self.skip_whitespace(self.cursor.position)
        best = None
        best_length = -1

        for kind in _as_kinds(kinds):
            match = RECOGNIZERS[kind].match(self.text, start)
            if match is None:
                continue
            length = match.end() - start
            if length > best_length:
                best_length = length
                best = Token(start=start, end=match.end(), text=match.group(0), kind=kind)

        return best

    def accept(self, token: Token) -> Token:
        if token.end < self.cursor.position:
            raise ValueError(
                f"Cannot move cursor backwards from {self.cursor.position} to {token.end}"
            )
        self.cursor.position = token.end
        return token

    def scan(self, kinds: KindSpec) -> Optional[Token]:
        token = self.peek(kinds)
        if token is not None:
            self.accept(token)
        return token

    def word_at(self, offset: Optional[int] = None) -> Token:
        """Unclassified whitespace-delimited word at ``offset``, for error reports."""
        if offset is None:
            offset = self.cursor.position
        start = self.skip_whitespace(offset)
        match = WORD.match(self.text, start)
        return Token(start=start, end=match.end(), text=match.group(0))

    def tokenize(self, kinds: KindSpec) -> list:
        """Scan repeatedly with the same kinds until nothing matches.

        Mostly useful for inspecting how a string lexes; the grammar itself
        requests a different kind set at every step.
        """
        tokens = []
        kinds = _as_kinds(kinds)
        while True:
            token = self.scan(kinds)
            if token is None or token.kind is TokenKind.END_OF_INPUT:
                break
            tokens.append(token)
        logger.debug(f"Tokenized {self.text!r} into {len(tokens)} tokens")
        return tokens
