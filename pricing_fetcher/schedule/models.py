"""
Pricing Fetcher - Time Point Model

The point in time a schedule is evaluated against.
"""
from dataclasses import dataclass
from datetime import datetime
from enum import IntEnum
from typing import Union


class DayOfWeek(IntEnum):
    """Day of week, Sunday first."""
    SUNDAY = 0
    MONDAY = 1
    TUESDAY = 2
    WEDNESDAY = 3
    THURSDAY = 4
    FRIDAY = 5
    SATURDAY = 6

    @property
    def short_name(self) -> str:
        """Three-letter lowercase name (sun, mon, ...)."""
        return self.name[:3].lower()

    @classmethod
    def from_name(cls, name: str) -> "DayOfWeek":
        """
        Look up a day by full or three-letter name, case-insensitive.

        Raises:
            ValueError: If the name is not a day of week.
        """
        key = name.strip().lower()
        for day in cls:
            if key in (day.name.lower(), day.short_name):
                return day
        raise ValueError(f"Unknown day of week: {name!r}")

    @classmethod
    def from_datetime(cls, dt: datetime) -> "DayOfWeek":
        # isoweekday(): Monday=1 .. Sunday=7
        return cls(dt.isoweekday() % 7)


@dataclass(frozen=True)
class Time:
    """
    A fully specified calendar point at minute resolution.

    Callers are responsible for supplying valid values; no calendar
    validation happens here.
    """
    minute_of_hour: int
    hour_of_day: int
    day_of_week: DayOfWeek
    week_of_month: int
    month_of_year: int

    @classmethod
    def from_datetime(cls, dt: datetime) -> "Time":
        """
        Build a time point from a datetime.

        Week of month counts 7-day blocks from the 1st: days 1-7 are
        week 1, days 29-31 are week 5.
        """
        return cls(
            minute_of_hour=dt.minute,
            hour_of_day=dt.hour,
            day_of_week=DayOfWeek.from_datetime(dt),
            week_of_month=(dt.day - 1) // 7 + 1,
            month_of_year=dt.month,
        )

    @classmethod
    def of(
        cls,
        minute: int,
        hour: int,
        day: Union[DayOfWeek, int, str],
        week: int = 1,
        month: int = 1,
    ) -> "Time":
        """Shorthand constructor; day may be a DayOfWeek, an int or a name."""
        if isinstance(day, str):
            day = DayOfWeek.from_name(day)
        return cls(
            minute_of_hour=minute,
            hour_of_day=hour,
            day_of_week=DayOfWeek(day),
            week_of_month=week,
            month_of_year=month,
        )
