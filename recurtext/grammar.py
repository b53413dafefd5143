"""
Recursive-descent grammar for English recurrence descriptions.

Examples of accepted text::

    every 5 minutes between the 1st and 30th minute
    at 10:00 am on tues of may in 2012
    on the 15-20th day of march-dec
    every 20 seconds every 5 minutes every 4 hours between the 10th and 20th hour
    every weekday at 9:00 except on the last day of the month

Productions read tokens through a ``Tokenizer`` and append
``Instruction`` values to the parse context. They never build schedules
themselves; see ``recurtext.schedule``.

A production that cannot find a required token raises
``UnparsableInputError``. The top-level loop records the offset of the
first failure and stops, keeping whatever was emitted before it.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, List, Optional, Sequence

from recurtext import instructions as ins
from recurtext.calendar_math import CalendarMath, calendar_math
from recurtext.instructions import FIELD_BOUNDS, Field, Instruction
from recurtext.tokens import (
    PERIOD_KINDS,
    Token,
    TokenKind,
    Tokenizer,
    UnparsableInputError,
)
from recurtext.values import WEEKDAY_DAYS, WEEKEND_DAYS, token_value

logger = logging.getLogger(__name__)


# =============================================================================
# Kind groups
# =============================================================================

STATEMENT_KINDS = (
    TokenKind.EVERY, TokenKind.AFTER, TokenKind.BEFORE,
    TokenKind.ON_THE, TokenKind.ON, TokenKind.OF, TokenKind.IN,
    TokenKind.AT, TokenKind.AND, TokenKind.EXCEPT,
    TokenKind.ALSO, TokenKind.FOR, TokenKind.DAY_NAME, TokenKind.EVERYDAY,
    TokenKind.WEEKDAY, TokenKind.WEEKEND, TokenKind.MONTH_NAME,
    TokenKind.CLOCK_TIME, TokenKind.BETWEEN, TokenKind.END_OF_INPUT,
)

# Statements that read as an "every" clause, with or without the word.
EVERY_KINDS = frozenset({
    TokenKind.EVERY, TokenKind.WEEKDAY, TokenKind.WEEKEND,
    TokenKind.DAY_NAME, TokenKind.MONTH_NAME, TokenKind.CLOCK_TIME,
    TokenKind.EVERYDAY,
})

GENERIC_TIME_KINDS = (
    TokenKind.DAY_NAME, TokenKind.YEAR, TokenKind.RANK,
    TokenKind.CLOCK_TIME, TokenKind.MONTH_NAME,
)

NAMED_TIME_KINDS = (TokenKind.CLOCK_TIME, TokenKind.DAY_NAME, TokenKind.MONTH_NAME)

DEFAULT_CLOSERS = (TokenKind.THROUGH,)
BETWEEN_CLOSERS = (TokenKind.THROUGH, TokenKind.AND)

# Granularity implied by each kind that can tag a value set.
PERIOD_FIELDS = {
    TokenKind.SECOND: Field.SECOND,
    TokenKind.MINUTE: Field.MINUTE,
    TokenKind.HOUR: Field.HOUR,
    TokenKind.DAY_OF_YEAR: Field.DAY_OF_YEAR,
    TokenKind.DAY_OF_WEEK: Field.DAY_OF_WEEK,
    TokenKind.DAY_NAME: Field.DAY_OF_WEEK,
    TokenKind.EVERYDAY: Field.DAY_OF_WEEK,
    TokenKind.DAY_INSTANCE: Field.DAY_OF_WEEK_COUNT,
    TokenKind.DAY: Field.DAY_OF_MONTH,
    TokenKind.WEEK_OF_MONTH: Field.WEEK_OF_MONTH,
    TokenKind.WEEK_OF_YEAR: Field.WEEK_OF_YEAR,
    TokenKind.MONTH: Field.MONTH,
    TokenKind.MONTH_NAME: Field.MONTH,
    TokenKind.YEAR_WORD: Field.YEAR,
    TokenKind.YEAR: Field.YEAR,
    TokenKind.CLOCK_TIME: Field.TIME,
}


# =============================================================================
# Parse context
# =============================================================================

@dataclass
class ParseContext:
    """State of a single parse, passed explicitly to every production."""
    tokenizer: Tokenizer
    now: Optional[datetime] = None
    settings: Any = None
    calendar: CalendarMath = calendar_math
    emitted: List[Instruction] = field(default_factory=list)

    @property
    def position(self) -> int:
        return self.tokenizer.position

    def emit(self, *instructions: Instruction) -> None:
        self.emitted.extend(instructions)

    def fail(self):
        position = self.tokenizer.position
        raise UnparsableInputError(position, self.tokenizer.word_at(position))

    # -------------------------------------------------------------------------
    # Token helpers
    # -------------------------------------------------------------------------

    def peek(self, kinds) -> Optional[Token]:
        return self.tokenizer.peek(kinds)

    def accept(self, token: Token) -> Token:
        return self.tokenizer.accept(token)

    def maybe(self, kinds) -> Optional[Token]:
        """Consume a token of ``kinds`` if one is next."""
        return self.tokenizer.scan(kinds)

    def expect(self, kinds) -> Token:
        """Consume a token of ``kinds`` or fail at the current position."""
        token = self.tokenizer.scan(kinds)
        if token is None:
            self.fail()
        return token

    def value(self, token: Token):
        return token_value(token, self.settings)

    def expect_value(self, kinds):
        return self.value(self.expect(kinds))


@dataclass
class PeriodGroup:
    values: List[int]
    period: Optional[TokenKind] = None


# Longest run any calendar field can hold: the span of supported years.
MAX_RUN_LENGTH = max(
    high - low + 1 for fld, (low, high) in FIELD_BOUNDS.items() if fld is not Field.TIME
)


def expand_range(start: int, end: Optional[int]) -> List[int]:
    """Inclusive run ``start..end``; ``[start]`` without an end, empty if end < start.

    Raises ``ValueError`` for a run longer than any field can hold.
    """
    if end is None:
        return [start]
    if end - start + 1 > MAX_RUN_LENGTH:
        raise ValueError(f"Run {start}-{end} is longer than {MAX_RUN_LENGTH} values")
    return list(range(start, end + 1))


# =============================================================================
# Grammar
# =============================================================================

class RecurrenceGrammar:
    """
    Productions of the recurrence grammar.

    The object holds no per-parse state; everything lives in the
    ``ParseContext`` handed to each method, so one instance is shared.
    """

    def run(self, ctx: ParseContext) -> int:
        """Parse statements until the input is exhausted or a token fails.

        Returns the first error offset, or -1.
        """
        cursor = ctx.tokenizer.cursor
        try:
            while not cursor.at_end and not cursor.failed:
                self.parse_statement(ctx)
        except UnparsableInputError as e:
            cursor.record_error(e.offset)
            logger.debug(f"Stopped parsing {cursor.text!r}: {e}")
        return cursor.first_error_offset

    def parse_statement(self, ctx: ParseContext) -> None:
        token = ctx.peek(STATEMENT_KINDS)
        kind = token.kind if token is not None else None

        if kind in EVERY_KINDS:
            if kind is TokenKind.EVERY:
                ctx.accept(token)
            self.parse_every(ctx)
        elif kind is TokenKind.FOR:
            ctx.accept(token)
            self.parse_for(ctx)
        elif kind is TokenKind.AFTER:
            ctx.accept(token)
            self.parse_bracket(ctx, ins.after)
        elif kind is TokenKind.BEFORE:
            ctx.accept(token)
            self.parse_bracket(ctx, ins.before)
        elif kind is TokenKind.ON_THE:
            ctx.accept(token)
            self.parse_on_the(ctx)
        elif kind in (TokenKind.ON, TokenKind.OF, TokenKind.IN, TokenKind.AT):
            ctx.accept(token)
            self.parse_time(ctx)
        elif kind is TokenKind.AND:
            ctx.accept(token)
        elif kind is TokenKind.ALSO:
            ctx.accept(token)
            ctx.emit(ins.also())
        elif kind is TokenKind.BETWEEN:
            self.parse_between(ctx)
        elif kind is TokenKind.EXCEPT:
            ctx.accept(token)
            ctx.emit(ins.except_())
        elif kind is TokenKind.END_OF_INPUT:
            ctx.accept(token)
        else:
            ctx.fail()

    # -------------------------------------------------------------------------
    # Periods
    # -------------------------------------------------------------------------

    def apply_period(self, ctx: ParseContext, kind: Optional[TokenKind]) -> None:
        fld = PERIOD_FIELDS.get(kind)
        if fld is None:
            ctx.fail()
        ctx.emit(ins.tag(fld))

    def parse_time_period(self, ctx: ParseContext) -> Token:
        token = ctx.expect(PERIOD_KINDS)
        self.apply_period(ctx, token.kind)
        return token

    # -------------------------------------------------------------------------
    # every ...
    # -------------------------------------------------------------------------

    def parse_every(self, ctx: ParseContext) -> None:
        if ctx.maybe(TokenKind.WEEKEND):
            ctx.emit(ins.on(*WEEKEND_DAYS), ins.tag(Field.DAY_OF_WEEK))
        elif ctx.maybe(TokenKind.WEEKDAY):
            ctx.emit(ins.on(*WEEKDAY_DAYS), ins.tag(Field.DAY_OF_WEEK))
        elif ctx.peek(NAMED_TIME_KINDS):
            self.parse_time(ctx)
        else:
            # "every 5 <period>" is a stride, unlike "every monday".
            self.parse_every_rank(ctx)

    def parse_every_rank(self, ctx: ParseContext) -> None:
        period = ctx.maybe(PERIOD_KINDS)
        if period is not None:
            ctx.emit(ins.every(1))
            self.apply_period(ctx, period.kind)
        elif ctx.maybe(TokenKind.EVERYDAY):
            ctx.emit(ins.every(1), ins.tag(Field.DAY_OF_WEEK))
        else:
            ctx.emit(ins.every(ctx.expect_value(TokenKind.RANK)))
            self.parse_time_period(ctx)

        if ctx.maybe(TokenKind.START):
            ctx.emit(ins.starting_on(ctx.expect_value(TokenKind.RANK)))
            ctx.maybe(PERIOD_KINDS)
        elif ctx.maybe(TokenKind.BETWEEN):
            # The range unit may differ from the stride unit.
            if ctx.peek(NAMED_TIME_KINDS + (TokenKind.YEAR,)):
                self.parse_time(ctx, BETWEEN_CLOSERS)
            else:
                start = ctx.expect_value(TokenKind.RANK)
                if ctx.maybe(TokenKind.AND):
                    end = ctx.expect_value(TokenKind.RANK)
                    ctx.emit(ins.between(start, end))
                    ctx.maybe(PERIOD_KINDS)

    # -------------------------------------------------------------------------
    # for / after / before / on the / between
    # -------------------------------------------------------------------------

    def parse_for(self, ctx: ParseContext) -> None:
        count = ctx.expect_value(TokenKind.RANK)
        period = ctx.expect(PERIOD_KINDS)
        fld = PERIOD_FIELDS.get(period.kind)
        if fld is None:
            ctx.fail()

        now = ctx.now or datetime.now()
        try:
            current = ctx.calendar.value(now, fld)
            end = ctx.calendar.next(now, fld, current + count)
        except ValueError as e:
            logger.debug(f"No window for {count} {period.text!r} from {now}: {e}")
            ctx.fail()

        ctx.emit(
            ins.after(now), ins.tag(Field.FULL_DATE),
            ins.before(end), ins.tag(Field.FULL_DATE),
        )

    def parse_bracket(self, ctx: ParseContext, bracket) -> None:
        if ctx.peek(TokenKind.CLOCK_TIME):
            ctx.emit(bracket(ctx.expect_value(TokenKind.CLOCK_TIME)), ins.tag(Field.TIME))
        else:
            ctx.emit(bracket(ctx.expect_value(TokenKind.RANK)))
            self.parse_time_period(ctx)

    def parse_on_the(self, ctx: ParseContext) -> None:
        if ctx.maybe(TokenKind.FIRST):
            ctx.emit(ins.first())
            self.parse_time_period(ctx)
        elif ctx.maybe(TokenKind.LAST):
            ctx.emit(ins.last())
            self.parse_time_period(ctx)
        else:
            self.parse_time(ctx)

    def parse_between(self, ctx: ParseContext) -> None:
        token = ctx.expect(TokenKind.BETWEEN)
        if token.text.startswith("between"):
            self.parse_time(ctx, BETWEEN_CLOSERS)
        else:
            self.parse_time(ctx)

    # -------------------------------------------------------------------------
    # Generic time
    # -------------------------------------------------------------------------

    def parse_time(self, ctx: ParseContext, closers: Sequence[TokenKind] = DEFAULT_CLOSERS) -> None:
        # Year is listed before rank so "2012" is a year.
        token = ctx.peek(GENERIC_TIME_KINDS)
        if token is None:
            ctx.fail()

        if token.kind is TokenKind.CLOCK_TIME:
            self.parse_time_instance_or_range(ctx, closers)
            return

        group = self.parse_period_instance_or_range(ctx, token.kind, closers)
        values = list(group.values)
        while ctx.maybe(TokenKind.AND):
            group = self.parse_period_instance_or_range(ctx, token.kind, closers)
            values.extend(group.values)

        if token.kind is TokenKind.RANK and group.period is None:
            day = ctx.maybe(TokenKind.DAY_NAME)
            if day is not None:
                # "the 1st monday": which monday of the month. The ranks count
                # day-of-week occurrences; tagging them as day-of-week would
                # read "1st" as Sunday (DESIGN.md, decision 7).
                ctx.emit(
                    ins.on(*values), ins.tag(Field.DAY_OF_WEEK_COUNT),
                    ins.on(ctx.value(day)), ins.tag(Field.DAY_OF_WEEK),
                )
                return

        ctx.emit(ins.on(*values))
        if token.kind is TokenKind.RANK:
            self.apply_period(ctx, group.period)
        else:
            self.apply_period(ctx, token.kind)

    def parse_period_instance_or_range(self, ctx: ParseContext, kind: TokenKind,
                                       closers: Sequence[TokenKind]) -> PeriodGroup:
        start = ctx.expect_value(kind)
        period = ctx.maybe(PERIOD_KINDS)
        end = ctx.expect_value(kind) if ctx.maybe(closers) else None

        if end is not None and kind is TokenKind.RANK and period is None:
            period = ctx.maybe(PERIOD_KINDS)

        try:
            values = expand_range(start, end)
        except ValueError as e:
            logger.debug(f"Rejected range: {e}")
            ctx.fail()

        return PeriodGroup(
            values=values,
            period=period.kind if period is not None else None,
        )

    def parse_time_instance_or_range(self, ctx: ParseContext,
                                     closers: Sequence[TokenKind]) -> None:
        start = ctx.expect_value(TokenKind.CLOCK_TIME)
        end = ctx.expect_value(TokenKind.CLOCK_TIME) if ctx.maybe(closers) else None

        if end is None:
            ctx.emit(ins.on(start), ins.tag(Field.TIME))
        else:
            ctx.emit(
                ins.after(start), ins.tag(Field.TIME),
                ins.before(end), ins.tag(Field.TIME),
            )


grammar = RecurrenceGrammar()
