"""
Shared pytest fixtures for the pricing fetcher test suite.

Random schedules and time points are drawn from seeded generators so the
property checks are reproducible.
"""
import random

import pytest

from pricing_fetcher.schedule import (
    DayOfWeek,
    Time,
    always,
    days_of_the_week,
    hours_of_the_day,
    intersection,
    minutes_of_the_hour,
    months_of_the_year,
    negate,
    never,
    union,
    weeks,
)


def _random_leaf(rng: random.Random):
    kind = rng.choice(["weeks", "days", "hours", "minutes", "months", "always", "never"])
    if kind == "weeks":
        return weeks(*rng.sample(range(1, 6), rng.randint(0, 3)))
    if kind == "days":
        return days_of_the_week(*rng.sample(range(7), rng.randint(0, 4)))
    if kind == "hours":
        return hours_of_the_day(*rng.sample(range(24), rng.randint(0, 14)))
    if kind == "minutes":
        return minutes_of_the_hour(*rng.sample(range(60), rng.randint(0, 35)))
    if kind == "months":
        return months_of_the_year(*rng.sample(range(1, 13), rng.randint(0, 7)))
    if kind == "always":
        return always()
    return never()


def make_random_schedule(rng: random.Random, depth: int = 3):
    """Random schedule tree (no Times nodes) of at most `depth` levels."""
    if depth == 0 or rng.random() < 0.3:
        return _random_leaf(rng)
    op = rng.choice(["union", "intersection", "negate"])
    if op == "negate":
        return negate(make_random_schedule(rng, depth - 1))
    left = make_random_schedule(rng, depth - 1)
    right = make_random_schedule(rng, depth - 1)
    return union(left, right) if op == "union" else intersection(left, right)


def make_random_time(rng: random.Random) -> Time:
    return Time(
        minute_of_hour=rng.randint(0, 59),
        hour_of_day=rng.randint(0, 23),
        day_of_week=DayOfWeek(rng.randint(0, 6)),
        week_of_month=rng.randint(1, 5),
        month_of_year=rng.randint(1, 12),
    )


@pytest.fixture
def rng():
    """Seeded random generator."""
    return random.Random(20261017)


@pytest.fixture
def schedule_pairs(rng):
    """150 pairs of random schedules."""
    return [(make_random_schedule(rng), make_random_schedule(rng)) for _ in range(150)]


@pytest.fixture
def sample_times(rng):
    """40 random time points."""
    return [make_random_time(rng) for _ in range(40)]
