"""
Pricing Fetcher - Schedule Algebra

A schedule is an immutable expression tree of time predicates. Leaves match
one field of a Time against a set of values; Union / Intersection / Negate
combine them as boolean OR / AND / NOT. Times limits a schedule to its first
n matching occurrences and needs an EvaluationContext to count them.

Node types (closed set, handled exhaustively by evaluate()):
    Weeks, DaysOfWeek, Hours, Minutes, Months   -- leaf matchers
    Always, Never                               -- identities
    Union, Intersection, Negate                 -- boolean combinators
    Times                                       -- occurrence limit

Example:
    wednesdays = days_of_the_week(DayOfWeek.WEDNESDAY) & hours_of_the_day(6, 12)
    matches(wednesdays, Time.of(0, 6, "wed"))   # True
"""
from dataclasses import dataclass
from typing import Any, Callable, ClassVar, FrozenSet, List, Tuple

from .errors import ScheduleValueError
from .models import DayOfWeek, Time


# ---------------------------------------------------------------------------
# Base node
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Schedule:
    """
    Base class of all schedule nodes.

    Combinators are available as methods and as operators:
        a.union(b)         a | b
        a.intersection(b)  a & b
        a.negate()         ~a
        a.times(n)
    """

    def union(self, other: "Schedule") -> "Schedule":
        return Union(self, other)

    def intersection(self, other: "Schedule") -> "Schedule":
        return Intersection(self, other)

    def negate(self) -> "Schedule":
        return Negate(self)

    def times(self, n: int) -> "Schedule":
        return Times(self, n)

    def __or__(self, other: "Schedule") -> "Schedule":
        if not isinstance(other, Schedule):
            return NotImplemented
        return Union(self, other)

    def __and__(self, other: "Schedule") -> "Schedule":
        if not isinstance(other, Schedule):
            return NotImplemented
        return Intersection(self, other)

    def __invert__(self) -> "Schedule":
        return Negate(self)

    def __str__(self) -> str:
        from .parser import format_schedule
        return format_schedule(self)


def _check_schedule(value: Any, role: str) -> None:
    if not isinstance(value, Schedule):
        raise TypeError(f"{role} must be a Schedule, got {type(value).__name__}")


# ---------------------------------------------------------------------------
# Leaf matchers
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class _FieldMatcher(Schedule):
    """Matches when one field of the time point is in `values`."""
    values: FrozenSet[int] = frozenset()

    time_field: ClassVar[str] = ""
    keyword: ClassVar[str] = ""
    minimum: ClassVar[int] = 0
    maximum: ClassVar[int] = 0

    def __post_init__(self):
        object.__setattr__(self, "values", frozenset(self._coerce(v) for v in self.values))

    @classmethod
    def _coerce(cls, value: Any) -> int:
        # bool is an int subclass; True/False are never meant as hours.
        if isinstance(value, bool) or not isinstance(value, int):
            raise ScheduleValueError(
                f"{cls.keyword} values must be integers, got {value!r}",
                field=cls.time_field,
                value=value,
            )
        if not cls.minimum <= value <= cls.maximum:
            raise ScheduleValueError(
                f"{cls.keyword} value {value} out of range {cls.minimum}..{cls.maximum}",
                field=cls.time_field,
                value=value,
            )
        return int(value)

    def accepts(self, time: Time) -> bool:
        return getattr(time, self.time_field) in self.values


@dataclass(frozen=True)
class Weeks(_FieldMatcher):
    time_field: ClassVar[str] = "week_of_month"
    keyword: ClassVar[str] = "weeks"
    minimum: ClassVar[int] = 1
    maximum: ClassVar[int] = 5


@dataclass(frozen=True)
class DaysOfWeek(_FieldMatcher):
    time_field: ClassVar[str] = "day_of_week"
    keyword: ClassVar[str] = "days"
    minimum: ClassVar[int] = 0
    maximum: ClassVar[int] = 6

    @classmethod
    def _coerce(cls, value: Any) -> int:
        if isinstance(value, str):
            try:
                return DayOfWeek.from_name(value)
            except ValueError as e:
                raise ScheduleValueError(str(e), field=cls.time_field, value=value) from e
        return DayOfWeek(super()._coerce(value))


@dataclass(frozen=True)
class Hours(_FieldMatcher):
    time_field: ClassVar[str] = "hour_of_day"
    keyword: ClassVar[str] = "hours"
    minimum: ClassVar[int] = 0
    maximum: ClassVar[int] = 23


@dataclass(frozen=True)
class Minutes(_FieldMatcher):
    time_field: ClassVar[str] = "minute_of_hour"
    keyword: ClassVar[str] = "minutes"
    minimum: ClassVar[int] = 0
    maximum: ClassVar[int] = 59


@dataclass(frozen=True)
class Months(_FieldMatcher):
    time_field: ClassVar[str] = "month_of_year"
    keyword: ClassVar[str] = "months"
    minimum: ClassVar[int] = 1
    maximum: ClassVar[int] = 12


LEAF_TYPES = (Weeks, DaysOfWeek, Hours, Minutes, Months)


# ---------------------------------------------------------------------------
# Identities and combinators
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Always(Schedule):
    """Matches every time point. Identity of intersection."""


@dataclass(frozen=True)
class Never(Schedule):
    """Matches no time point. Identity of union."""


@dataclass(frozen=True)
class Union(Schedule):
    left: Schedule
    right: Schedule

    def __post_init__(self):
        _check_schedule(self.left, "left")
        _check_schedule(self.right, "right")


@dataclass(frozen=True)
class Intersection(Schedule):
    left: Schedule
    right: Schedule

    def __post_init__(self):
        _check_schedule(self.left, "left")
        _check_schedule(self.right, "right")


@dataclass(frozen=True)
class Negate(Schedule):
    inner: Schedule

    def __post_init__(self):
        _check_schedule(self.inner, "inner")


@dataclass(frozen=True)
class Times(Schedule):
    """`inner`, but only on its first `n` matching occurrences."""
    inner: Schedule
    n: int

    def __post_init__(self):
        _check_schedule(self.inner, "inner")
        if isinstance(self.n, bool) or not isinstance(self.n, int):
            raise ScheduleValueError(f"times count must be an integer, got {self.n!r}", field="n", value=self.n)
        if self.n < 0:
            raise ScheduleValueError(f"times count must be >= 0, got {self.n}", field="n", value=self.n)


# ---------------------------------------------------------------------------
# Evaluation
# ---------------------------------------------------------------------------

# Called for every Times node visited: (node, time, inner_matched) -> matched
TimesHook = Callable[[Times, Time, bool], bool]


def evaluate(schedule: Schedule, time: Time, on_times: TimesHook) -> bool:
    """
    Evaluate a schedule tree against a time point.

    Both children of Union / Intersection are always evaluated so that
    every Times node is visited exactly once per node per call, whatever
    its siblings return.

    Walks the tree with an explicit stack (post-order, left before right),
    so depth is limited by memory rather than the interpreter's recursion
    limit.
    """
    results: List[bool] = []
    # (node, children_done)
    stack: List[Tuple[Schedule, bool]] = [(schedule, False)]

    while stack:
        node, children_done = stack.pop()

        if isinstance(node, _FieldMatcher):
            results.append(node.accepts(time))
        elif isinstance(node, Always):
            results.append(True)
        elif isinstance(node, Never):
            results.append(False)
        elif not children_done:
            if isinstance(node, (Union, Intersection)):
                stack.append((node, True))
                stack.append((node.right, False))
                stack.append((node.left, False))
            elif isinstance(node, (Negate, Times)):
                stack.append((node, True))
                stack.append((node.inner, False))
            else:
                raise TypeError(f"Unknown schedule node: {type(node).__name__}")
        elif isinstance(node, Union):
            right, left = results.pop(), results.pop()
            results.append(left or right)
        elif isinstance(node, Intersection):
            right, left = results.pop(), results.pop()
            results.append(left and right)
        elif isinstance(node, Negate):
            results.append(not results.pop())
        else:
            results.append(on_times(node, time, results.pop()))

    return results.pop()


def _first_occurrence(node: Times, time: Time, inner: bool) -> bool:
    # A fresh context has seen nothing, so this is occurrence number one.
    return inner and node.n >= 1


def matches(schedule: Schedule, time: Time) -> bool:
    """
    Decide whether `schedule` fires at `time`.

    Pure: Times nodes are evaluated as if by a fresh EvaluationContext.
    Use EvaluationContext.matches() to count occurrences across calls.
    """
    return evaluate(schedule, time, _first_occurrence)


# ---------------------------------------------------------------------------
# Constructors
# ---------------------------------------------------------------------------

def weeks(*values: int) -> Schedule:
    """Fire on the given weeks of the month (1..5)."""
    return Weeks(frozenset(values))


def days_of_the_week(*values) -> Schedule:
    """Fire on the given days; accepts DayOfWeek, 0..6 (Sunday=0) or names."""
    return DaysOfWeek(frozenset(values))


def hours_of_the_day(*values: int) -> Schedule:
    """Fire on the given hours (0..23)."""
    return Hours(frozenset(values))


def minutes_of_the_hour(*values: int) -> Schedule:
    """Fire on the given minutes (0..59)."""
    return Minutes(frozenset(values))


def months_of_the_year(*values: int) -> Schedule:
    """Fire in the given months (1..12)."""
    return Months(frozenset(values))


def always() -> Schedule:
    return Always()


def never() -> Schedule:
    return Never()


def union(a: Schedule, b: Schedule) -> Schedule:
    return Union(a, b)


def intersection(a: Schedule, b: Schedule) -> Schedule:
    return Intersection(a, b)


def negate(a: Schedule) -> Schedule:
    return Negate(a)


def times(schedule: Schedule, n: int) -> Schedule:
    return Times(schedule, n)
