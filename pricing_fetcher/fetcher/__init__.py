"""
Pricing Fetcher - Scheduled Downloads
"""
from .models import FetchResult
from .fetcher import PriceFetcher
from .background import (
    TICK_JOB_ID,
    get_scheduler,
    start_scheduler,
    stop_scheduler,
    run_tick,
    fetch,
)

__all__ = [
    "FetchResult",
    "PriceFetcher",
    "TICK_JOB_ID",
    "get_scheduler",
    "start_scheduler",
    "stop_scheduler",
    "run_tick",
    "fetch",
]
