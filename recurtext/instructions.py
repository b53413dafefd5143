"""
Abstract recurrence instructions.

The grammar does not build schedules itself. It emits an ordered list of
``Instruction`` values which ``recurtext.schedule.ScheduleBuilder`` folds
into constraint sets, so both halves can be exercised on their own.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Tuple


class Field(Enum):
    """Calendar granularities a constraint can be tagged with.

    Values are the short codes used by Later-style schedules.
    """
    SECOND = "s"
    MINUTE = "m"
    HOUR = "h"
    DAY_OF_MONTH = "D"
    DAY_OF_WEEK = "d"
    DAY_OF_WEEK_COUNT = "dc"
    DAY_OF_YEAR = "dy"
    WEEK_OF_MONTH = "wm"
    WEEK_OF_YEAR = "wy"
    MONTH = "M"
    YEAR = "Y"
    TIME = "t"
    FULL_DATE = "fd"

    @property
    def code(self) -> str:
        return self.value


# Inclusive value range of each numeric field, used when expanding strides.
FIELD_BOUNDS = {
    Field.SECOND: (0, 59),
    Field.MINUTE: (0, 59),
    Field.HOUR: (0, 23),
    Field.DAY_OF_MONTH: (1, 31),
    Field.DAY_OF_WEEK: (1, 7),
    Field.DAY_OF_WEEK_COUNT: (1, 5),
    Field.DAY_OF_YEAR: (1, 366),
    Field.WEEK_OF_MONTH: (1, 6),
    Field.WEEK_OF_YEAR: (1, 53),
    Field.MONTH: (1, 12),
    Field.YEAR: (1970, 2450),
    Field.TIME: (0, 86399),
}


class Op(Enum):
    EVERY = "every"
    ON = "on"
    FIRST = "first"
    LAST = "last"
    BETWEEN = "between"
    STARTING_ON = "starting_on"
    AFTER = "after"
    BEFORE = "before"
    ALSO = "also"
    EXCEPT = "except"
    TAG = "tag"


@dataclass(frozen=True)
class Instruction:
    op: Op
    args: Tuple[Any, ...] = ()
    field: Optional[Field] = None

    def __repr__(self) -> str:
        if self.op is Op.TAG:
            return f"TAG({self.field.name})"
        return f"{self.op.name}({', '.join(repr(a) for a in self.args)})"


def every(n) -> Instruction:
    return Instruction(Op.EVERY, (n,))


def on(*values) -> Instruction:
    return Instruction(Op.ON, tuple(values))


def first() -> Instruction:
    return Instruction(Op.FIRST)


def last() -> Instruction:
    return Instruction(Op.LAST)


def between(start, end) -> Instruction:
    return Instruction(Op.BETWEEN, (start, end))


def starting_on(n) -> Instruction:
    return Instruction(Op.STARTING_ON, (n,))


def after(value) -> Instruction:
    return Instruction(Op.AFTER, (value,))


def before(value) -> Instruction:
    return Instruction(Op.BEFORE, (value,))


def also() -> Instruction:
    return Instruction(Op.ALSO)


def except_() -> Instruction:
    return Instruction(Op.EXCEPT)


def tag(field: Field) -> Instruction:
    return Instruction(Op.TAG, field=field)
