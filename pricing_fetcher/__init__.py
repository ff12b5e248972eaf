"""
Pricing Fetcher

Schedule algebra for deciding when to fetch price data, and a scheduled
downloader built on it.
"""
from .schedule import (
    DayOfWeek,
    Time,
    Schedule,
    EvaluationContext,
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
    parse_schedule,
)
from .fetcher import PriceFetcher, FetchResult, fetch

__version__ = "0.1.0"

__all__ = [
    "DayOfWeek", "Time", "Schedule", "EvaluationContext", "matches",
    "weeks", "days_of_the_week", "hours_of_the_day", "minutes_of_the_hour",
    "months_of_the_year", "always", "never",
    "union", "intersection", "negate", "times",
    "parse_schedule",
    "PriceFetcher", "FetchResult", "fetch",
]
