"""
Pricing Fetcher - Schedule Errors
"""
from typing import Optional


class ScheduleError(ValueError):
    """Base exception for schedule construction and parsing errors."""
    pass


class ScheduleValueError(ScheduleError):
    """A leaf or Times node was built with an out-of-range value."""

    def __init__(self, message: str, field: Optional[str] = None, value=None):
        super().__init__(message)
        self.field = field
        self.value = value


class ScheduleParseError(ScheduleError):
    """A schedule expression could not be parsed."""

    def __init__(self, message: str, position: Optional[int] = None):
        if position is not None:
            message = f"{message} (at position {position})"
        super().__init__(message)
        self.position = position
