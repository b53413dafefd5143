__version__ = "0.1.0"

from .conf import Settings, SettingValidationError, apply_settings
from .parser import RecurrenceTextParser

from .calendar_math import CalendarMath
from .grammar import ParseContext, RecurrenceGrammar
from .instructions import Field, Instruction, Op
from .schedule import Constraint, ConstraintSet, ParseResult, ScheduleBuilder
from .tokens import PERIOD_KINDS, Token, TokenKind, Tokenizer, UnparsableInputError

_default_parser = RecurrenceTextParser()


@apply_settings
def parse_text(text, now=None, settings=None):
    """Parse an English recurrence description into schedules.

    :param text:
        A description such as ``"every 5 minutes between the 1st and 30th minute"``
        or ``"at 10:00 am on tues of may in 2012"``. Matching is case-insensitive.
    :type text: str

    :param now:
        Anchor for relative windows (``"for 2 hours"``). Defaults to the
        ``RELATIVE_BASE`` setting, then to the current time in ``TIMEZONE``.
    :type now: datetime

    :param settings:
        Configure customized behavior using settings defined in :mod:`recurtext.conf.Settings`.
    :type settings: dict

    :return: A :class:`ParseResult`. ``error`` is -1 on success, otherwise the
        offset of the first token that could not be parsed; schedules built
        before that point are still included but do not cover the whole text.
    :rtype: ParseResult

    :raises:
        ``TypeError``: text is not a string,
        ``SettingValidationError``: A provided setting is not valid.

    Example usage::

        >>> import recurtext
        >>> result = recurtext.parse_text("every 5 minutes")
        >>> result.error
        -1
        >>> result.schedules[0][recurtext.Field.MINUTE].every
        5
        >>> result.to_dict()["schedules"][0]["m"][:3]
        [0, 5, 10]

        >>> recurtext.parse_text("every").error
        5
    """
    return _default_parser.parse(text, now=now, settings=settings)


__all__ = [
    "__version__",
    "parse_text",
    "RecurrenceTextParser",
    "RecurrenceGrammar",
    "ParseContext",
    "ParseResult",
    "Constraint",
    "ConstraintSet",
    "ScheduleBuilder",
    "Field",
    "Instruction",
    "Op",
    "Token",
    "TokenKind",
    "Tokenizer",
    "PERIOD_KINDS",
    "UnparsableInputError",
    "CalendarMath",
    "Settings",
    "SettingValidationError",
]
