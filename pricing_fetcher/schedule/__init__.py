"""
Pricing Fetcher - Schedule Algebra

Decides whether a fetch should happen at a given time.
"""
from .models import DayOfWeek, Time
from .errors import ScheduleError, ScheduleValueError, ScheduleParseError
from .algebra import (
    Schedule,
    Weeks,
    DaysOfWeek,
    Hours,
    Minutes,
    Months,
    Always,
    Never,
    Union,
    Intersection,
    Negate,
    Times,
    evaluate,
    matches,
    weeks,
    days_of_the_week,
    hours_of_the_day,
    minutes_of_the_hour,
    months_of_the_year,
    always,
    never,
    union,
    intersection,
    negate,
    times,
)
from .context import EvaluationContext
from .parser import parse_schedule, format_schedule

__all__ = [
    "DayOfWeek", "Time",
    "ScheduleError", "ScheduleValueError", "ScheduleParseError",
    "Schedule", "Weeks", "DaysOfWeek", "Hours", "Minutes", "Months",
    "Always", "Never", "Union", "Intersection", "Negate", "Times",
    "evaluate", "matches",
    "weeks", "days_of_the_week", "hours_of_the_day", "minutes_of_the_hour",
    "months_of_the_year", "always", "never",
    "union", "intersection", "negate", "times",
    "EvaluationContext",
    "parse_schedule", "format_schedule",
]
