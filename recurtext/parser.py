import logging
from datetime import datetime
from typing import Optional

from dateutil import tz
from tzlocal import get_localzone

from recurtext.calendar_math import CalendarMath, calendar_math
from recurtext.conf import apply_settings
from recurtext.grammar import ParseContext, RecurrenceGrammar, grammar
from recurtext.schedule import ParseResult, assemble_result
from recurtext.tokens import Tokenizer

logger = logging.getLogger(__name__)


def get_timezone(settings):
    if settings.TIMEZONE is None or "local" in settings.TIMEZONE.lower():
        return get_localzone()
    return tz.gettz(settings.TIMEZONE)


class RecurrenceTextParser:
    """Turns English recurrence descriptions into schedules.

    :param calendar:
        Calendar arithmetic used by ``for <n> <period>`` windows.
    :type calendar: CalendarMath
    """

    def __init__(self, calendar: Optional[CalendarMath] = None,
                 grammar: RecurrenceGrammar = grammar):
        self.calendar = calendar or calendar_math
        self.grammar = grammar

    def resolve_now(self, now, settings) -> datetime:
        if now is not None:
            return now
        if settings.RELATIVE_BASE is not None:
            return settings.RELATIVE_BASE
        return datetime.now(get_timezone(settings))

    def tokenize(self, text: str) -> Tokenizer:
        if not isinstance(text, str):
            raise TypeError("Input type must be str")
        return Tokenizer(text)

    @apply_settings
    def get_instructions(self, text, now=None, settings=None):
        """Run the grammar only; returns ``(instructions, error)``."""
        ctx = ParseContext(
            tokenizer=self.tokenize(text),
            now=self.resolve_now(now, settings),
            settings=settings,
            calendar=self.calendar,
        )
        error = self.grammar.run(ctx)
        return ctx.emitted, error

    @apply_settings
    def parse(self, text, now=None, settings=None) -> ParseResult:
        instructions, error = self.get_instructions(text, now=now, settings=settings)
        if error >= 0:
            logger.debug(f"Parse of {text!r} failed at offset {error}")
        return assemble_result(instructions, error=error, text=text)
