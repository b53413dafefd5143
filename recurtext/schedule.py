"""
Schedule building and result assembly.

``ScheduleBuilder`` follows the recur builder of Later.js: values, strides
and after/before modifiers are held as pending state until a granularity tag
(``minute()``, ``dayOfWeek()``, ``time()`` ...) applies them to the current
constraint set. ``also`` opens a new OR-branch; ``except_`` routes all
following constraints to the exception list.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from recurtext.instructions import FIELD_BOUNDS, Field, Instruction, Op
from recurtext.tokens import UnparsableInputError

logger = logging.getLogger(__name__)

AFTER = "after"
BEFORE = "before"


# =============================================================================
# Constraints
# =============================================================================

@dataclass
class Constraint:
    """Restriction of one calendar field inside a schedule."""
    values: List[Any] = field(default_factory=list)  # explicit values from on()
    every: Optional[int] = None                      # stride
    start: Optional[int] = None                      # range lower bound (between / starting on)
    end: Optional[int] = None                        # range upper bound
    after: Any = None
    before: Any = None
    first: bool = False
    last: bool = False

    def expand(self, fld: Field) -> Dict[str, list]:
        """Later-style value lists for this constraint, keyed by field code."""
        code = fld.code
        expanded = {}

        values = [_expand_value(fld, v) for v in self.values]

        if self.every:
            # The stride window never reaches outside the field.
            low, high = FIELD_BOUNDS[fld]
            if self.start is not None:
                low = max(low, self.start)
            if self.end is not None:
                high = min(high, self.end)
            values.extend(range(low, high + 1, self.every))

        if self.first:
            values.append(FIELD_BOUNDS[fld][0])
        if self.last:
            # Later marks "last" with 0 on fields counted from 1.
            low, high = FIELD_BOUNDS[fld]
            values.append(0 if low == 1 else high)

        if values or not (self.after is not None or self.before is not None):
            expanded[code] = sorted(set(values))
        if self.after is not None:
            expanded[code + "_a"] = [_expand_value(fld, self.after)]
        if self.before is not None:
            expanded[code + "_b"] = [_expand_value(fld, self.before)]

        return expanded


def _expand_value(fld: Field, value):
    if fld is Field.TIME and isinstance(value, str):
        hour, minute = value.split(":")[:2]
        return int(hour) * 3600 + int(minute) * 60
    if isinstance(value, datetime):
        return int(value.timestamp() * 1000)
    return value


class ConstraintSet(dict):
    """One AND-combined schedule: ``Field`` -> ``Constraint``."""

    def constraint(self, fld: Field) -> Constraint:
        if fld not in self:
            self[fld] = Constraint()
        return self[fld]

    def expand(self) -> Dict[str, list]:
        expanded = {}
        for fld, constraint in self.items():
            expanded.update(constraint.expand(fld))
        return expanded

    def __repr__(self) -> str:
        parts = ", ".join(f"{fld.name}: {constraint!r}" for fld, constraint in self.items())
        return f"ConstraintSet({{{parts}}})"


# =============================================================================
# Builder
# =============================================================================

class ScheduleBuilder:
    """Folds recurrence instructions into schedules and exceptions."""

    def __init__(self):
        self._schedules: List[ConstraintSet] = []
        self._exceptions: List[ConstraintSet] = []
        self._current_list = self._schedules
        self._current: Optional[ConstraintSet] = None
        self._last_strided: Optional[Constraint] = None
        self._reset_pending()

    def _reset_pending(self):
        self._values: List[Any] = []
        self._every: Optional[int] = None
        self._modifier: Optional[str] = None
        self._first = False
        self._last = False

    @property
    def schedules(self) -> List[ConstraintSet]:
        return self._schedules

    @property
    def exceptions(self) -> List[ConstraintSet]:
        return self._exceptions

    # -------------------------------------------------------------------------
    # Instruction dispatch
    # -------------------------------------------------------------------------

    def apply(self, instruction: Instruction) -> "ScheduleBuilder":
        op = instruction.op
        if op is Op.TAG:
            return self.tag(instruction.field)
        if op is Op.EVERY:
            return self.every(*instruction.args)
        if op is Op.ON:
            return self.on(*instruction.args)
        if op is Op.FIRST:
            return self.first()
        if op is Op.LAST:
            return self.last()
        if op is Op.BETWEEN:
            return self.between(*instruction.args)
        if op is Op.STARTING_ON:
            return self.starting_on(*instruction.args)
        if op is Op.AFTER:
            return self.after(*instruction.args)
        if op is Op.BEFORE:
            return self.before(*instruction.args)
        if op is Op.ALSO:
            return self.also()
        if op is Op.EXCEPT:
            return self.except_()
        raise ValueError(f"Unknown instruction: {instruction!r}")

    def apply_all(self, instructions) -> "ScheduleBuilder":
        for instruction in instructions:
            self.apply(instruction)
        return self

    # -------------------------------------------------------------------------
    # Pending state
    # -------------------------------------------------------------------------

    def every(self, n=1):
        self._every = n or 1
        return self

    def on(self, *values):
        self._values = list(values)
        return self

    def first(self):
        self._first = True
        return self

    def last(self):
        self._last = True
        return self

    def after(self, value):
        self._modifier = AFTER
        self._values = [value]
        return self

    def before(self, value):
        self._modifier = BEFORE
        self._values = [value]
        return self

    # -------------------------------------------------------------------------
    # Stride ranges
    # -------------------------------------------------------------------------

    def _strided(self) -> Constraint:
        if self._last_strided is None:
            raise ValueError("A range needs a preceding every() constraint")
        return self._last_strided

    def between(self, start, end):
        constraint = self._strided()
        constraint.start = start
        constraint.end = end
        return self

    def starting_on(self, start):
        self._strided().start = start
        return self

    # -------------------------------------------------------------------------
    # Branches
    # -------------------------------------------------------------------------

    def also(self):
        self._current = ConstraintSet()
        self._current_list.append(self._current)
        return self

    def except_(self):
        self._current_list = self._exceptions
        self._current = None
        return self

    # -------------------------------------------------------------------------
    # Granularity tags
    # -------------------------------------------------------------------------

    def tag(self, fld: Field):
        if self._current is None:
            self._current = ConstraintSet()
            self._current_list.append(self._current)

        constraint = self._current.constraint(fld)

        if self._modifier == AFTER:
            if self._values:
                constraint.after = self._values[0]
        elif self._modifier == BEFORE:
            if self._values:
                constraint.before = self._values[0]
        else:
            if self._every is not None:
                constraint.every = self._every
                self._last_strided = constraint
            if self._first:
                constraint.first = True
            if self._last:
                constraint.last = True
            for value in self._values:
                if value not in constraint.values:
                    constraint.values.append(value)

        self._reset_pending()
        return self

    def second(self):
        return self.tag(Field.SECOND)

    def minute(self):
        return self.tag(Field.MINUTE)

    def hour(self):
        return self.tag(Field.HOUR)

    def day_of_month(self):
        return self.tag(Field.DAY_OF_MONTH)

    def day_of_week(self):
        return self.tag(Field.DAY_OF_WEEK)

    def day_of_week_count(self):
        return self.tag(Field.DAY_OF_WEEK_COUNT)

    def day_of_year(self):
        return self.tag(Field.DAY_OF_YEAR)

    def week_of_month(self):
        return self.tag(Field.WEEK_OF_MONTH)

    def week_of_year(self):
        return self.tag(Field.WEEK_OF_YEAR)

    def month(self):
        return self.tag(Field.MONTH)

    def year(self):
        return self.tag(Field.YEAR)

    def time(self):
        return self.tag(Field.TIME)

    def full_date(self):
        return self.tag(Field.FULL_DATE)


# =============================================================================
# Result
# =============================================================================

@dataclass
class ParseResult:
    """Outcome of parsing one recurrence description.

    ``error`` is -1 on success, otherwise the offset of the first token that
    could not be parsed. Constraint sets built before the failure are kept
    but do not describe the whole input.
    """
    schedules: List[ConstraintSet] = field(default_factory=list)
    exceptions: List[ConstraintSet] = field(default_factory=list)
    error: int = -1
    instructions: List[Instruction] = field(default_factory=list)
    text: str = ""

    @property
    def ok(self) -> bool:
        return self.error == -1

    def raise_for_error(self) -> "ParseResult":
        if not self.ok:
            raise UnparsableInputError(self.error)
        return self

    def to_dict(self) -> Dict[str, Any]:
        return {
            "schedules": [schedule.expand() for schedule in self.schedules],
            "exceptions": [exception.expand() for exception in self.exceptions],
            "error": self.error,
        }


def assemble_result(instructions, error: int = -1, text: str = "") -> ParseResult:
    builder = ScheduleBuilder().apply_all(instructions)
    logger.debug(
        f"Built {len(builder.schedules)} schedules and "
        f"{len(builder.exceptions)} exceptions from {len(instructions)} instructions"
    )
    return ParseResult(
        schedules=builder.schedules,
        exceptions=builder.exceptions,
        error=error,
        instructions=list(instructions),
        text=text,
    )
