from datetime import datetime, timedelta

from dateutil.relativedelta import relativedelta

from recurtext.instructions import FIELD_BOUNDS, Field


def _week_of_month(dt):
    # Weeks start on Sunday; the week holding the 1st is week 1.
    first = dt.replace(day=1)
    offset = (first.isoweekday() % 7)
    return (dt.day + offset - 1) // 7 + 1


FIELD_VALUES = {
    Field.SECOND: lambda dt: dt.second,
    Field.MINUTE: lambda dt: dt.minute,
    Field.HOUR: lambda dt: dt.hour,
    Field.DAY_OF_MONTH: lambda dt: dt.day,
    Field.DAY_OF_WEEK: lambda dt: dt.isoweekday() % 7 + 1,
    Field.DAY_OF_WEEK_COUNT: lambda dt: (dt.day - 1) // 7 + 1,
    Field.DAY_OF_YEAR: lambda dt: dt.timetuple().tm_yday,
    Field.WEEK_OF_MONTH: _week_of_month,
    Field.WEEK_OF_YEAR: lambda dt: dt.isocalendar()[1],
    Field.MONTH: lambda dt: dt.month,
    Field.YEAR: lambda dt: dt.year,
}

# relativedelta unit advanced by one step of each field
FIELD_STEPS = {
    Field.SECOND: relativedelta(seconds=1),
    Field.MINUTE: relativedelta(minutes=1),
    Field.HOUR: relativedelta(hours=1),
    Field.DAY_OF_MONTH: relativedelta(days=1),
    Field.DAY_OF_WEEK: relativedelta(days=1),
    Field.DAY_OF_WEEK_COUNT: relativedelta(weeks=1),
    Field.DAY_OF_YEAR: relativedelta(days=1),
    Field.WEEK_OF_MONTH: relativedelta(weeks=1),
    Field.WEEK_OF_YEAR: relativedelta(weeks=1),
    Field.MONTH: relativedelta(months=1),
    Field.YEAR: relativedelta(years=1),
}


class CalendarMath:
    """Field arithmetic needed by relative windows such as ``for 2 hours``."""

    # Upper bound on the steps searched when the target has already passed.
    max_steps = 400

    def value(self, dt: datetime, field: Field) -> int:
        try:
            return FIELD_VALUES[field](dt)
        except KeyError:
            raise ValueError(f"No calendar value for field {field.name}") from None

    def start_of(self, dt: datetime, field: Field) -> datetime:
        """Truncate ``dt`` to the start of its current ``field`` unit."""
        if field is Field.SECOND:
            return dt.replace(microsecond=0)
        if field is Field.MINUTE:
            return dt.replace(second=0, microsecond=0)
        if field is Field.HOUR:
            return dt.replace(minute=0, second=0, microsecond=0)

        day_start = dt.replace(hour=0, minute=0, second=0, microsecond=0)
        if field is Field.MONTH:
            return day_start.replace(day=1)
        if field is Field.YEAR:
            return day_start.replace(month=1, day=1)
        if field in (Field.WEEK_OF_MONTH, Field.WEEK_OF_YEAR):
            # ISO weeks start on Monday, month weeks on Sunday.
            if field is Field.WEEK_OF_YEAR:
                return day_start - timedelta(days=day_start.weekday())
            return day_start - timedelta(days=day_start.isoweekday() % 7)
        return day_start

    def next(self, dt: datetime, field: Field, target: int) -> datetime:
        """Start of the nearest ``field`` unit at or after ``dt`` whose value is ``target``.

        A target above the current value is reached by stepping forward
        ``target - current`` units, carrying into the enclosing unit when it
        exceeds the field's range (hour 25 of today is 01:00 tomorrow).
        Otherwise the next cycle is searched. A unit beyond ``datetime.max``
        raises ``ValueError`` like any other unreachable target.
        """
        if field not in FIELD_STEPS:
            raise ValueError(f"No calendar steps for field {field.name}")

        try:
            return self._seek(dt, field, target)
        except OverflowError:
            raise ValueError(f"{field.name} {target} lies past the end of the calendar") from None

    def _seek(self, dt: datetime, field: Field, target: int) -> datetime:
        step = FIELD_STEPS[field]
        start = self.start_of(dt, field)
        current = self.value(start, field)

        if target > current:
            return start + step * (target - current)

        low, high = FIELD_BOUNDS[field]
        if not low <= target <= high:
            raise ValueError(f"{target} is out of range for {field.name}")

        candidate = start
        if candidate >= dt and current == target:
            return candidate
        for _ in range(self.max_steps):
            candidate += step
            if self.value(candidate, field) == target:
                return candidate
        raise ValueError(f"No {field.name} equal to {target} after {dt.isoformat()}")


calendar_math = CalendarMath()
