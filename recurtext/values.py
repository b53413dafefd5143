import regex as re

from recurtext.tokens import Token, TokenKind

# Days are numbered from Sunday (1) to Saturday (7).
NAMES = {
    "jan": 1, "feb": 2, "mar": 3, "apr": 4, "may": 5, "jun": 6,
    "jul": 7, "aug": 8, "sep": 9, "oct": 10, "nov": 11, "dec": 12,
    "sun": 1, "mon": 2, "tue": 3, "wed": 4, "thu": 5, "fri": 6, "sat": 7,
    "1st": 1, "fir": 1,
    "2nd": 2, "sec": 2,
    "3rd": 3, "thi": 3,
    "4th": 4, "for": 4,
}

WEEKEND_DAYS = (NAMES["sun"], NAMES["sat"])
WEEKDAY_DAYS = (NAMES["mon"], NAMES["tue"], NAMES["wed"], NAMES["thu"], NAMES["fri"])

CLOCK_PATTERN = re.compile(r"(\d{1,2})(?::(\d\d))?\s*(am|pm|a|p)?")
LEADING_DIGITS = re.compile(r"\d+")


def normalize_clock_time(text, midnight_as_zero_hour=True):
    """Normalize a clock token such as ``1pm`` or ``10:00 am`` to ``HH:MM``."""
    match = CLOCK_PATTERN.match(text.strip())
    if match is None:
        raise ValueError(f"Not a clock time: {text!r}")

    hour = int(match.group(1))
    minute = match.group(2) or "00"
    meridiem = match.group(3)

    if meridiem in ("pm", "p") and hour < 12:
        hour += 12
    elif meridiem in ("am", "a") and hour == 12 and midnight_as_zero_hour:
        hour = 0

    return "%02d:%s" % (hour, minute)


def rank_value(text):
    if text in ("a", "an"):
        return 1
    if text in NAMES:
        return NAMES[text]
    match = LEADING_DIGITS.match(text)
    if match is None:
        raise ValueError(f"Not a rank: {text!r}")
    return int(match.group(0))


def token_value(token: Token, settings=None):
    """Semantic value of a consumed token.

    Clock times become ``"HH:MM"`` strings; ranks, day and month names and
    years become integers. Every other kind keeps its raw text.
    """
    kind = token.kind
    text = token.text

    if kind is TokenKind.CLOCK_TIME:
        midnight_as_zero_hour = (
            settings.MIDNIGHT_AS_ZERO_HOUR if settings is not None else True
        )
        return normalize_clock_time(text, midnight_as_zero_hour)
    if kind is TokenKind.RANK:
        return rank_value(text)
    if kind in (TokenKind.MONTH_NAME, TokenKind.DAY_NAME):
        return NAMES[text[:3]]
    if kind is TokenKind.YEAR:
        return int(text)
    return text
