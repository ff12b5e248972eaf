"""
Background Scheduler using APScheduler

Drives a PriceFetcher once a minute:
- start_scheduler() / stop_scheduler(): background thread, for embedding
- fetch(): blocking entry point, for the command line
"""

import logging
from pathlib import Path
from typing import Optional, Union

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.cron import CronTrigger

from ..config.logging import log_error
from ..config.settings import FetcherSettings
from ..schedule import Schedule
from .fetcher import PriceFetcher

logger = logging.getLogger(__name__)

TICK_JOB_ID = "pricing_fetch_tick"

# Global scheduler instance
_scheduler: Optional[BackgroundScheduler] = None


def _every_minute() -> CronTrigger:
    return CronTrigger(minute="*", second=0)


def run_tick(fetcher: PriceFetcher) -> None:
    """
    Scheduler job body. Called every minute.

    Errors are logged, never raised, so one bad tick does not kill the job.
    """
    try:
        result = fetcher.tick()
    except Exception as e:
        log_error(logger, e, context="tick", url=fetcher.url)
        return

    if result is not None and not result.success:
        logger.warning(f"Scheduled fetch of {fetcher.url} failed: {result.error}")


def _add_tick_job(scheduler, fetcher: PriceFetcher) -> None:
    scheduler.add_job(
        run_tick,
        _every_minute(),
        args=[fetcher],
        id=TICK_JOB_ID,
        replace_existing=True,
        max_instances=1,
        coalesce=True,
        misfire_grace_time=30,
    )


def get_scheduler() -> BackgroundScheduler:
    """Get or create the global scheduler instance."""
    global _scheduler
    if _scheduler is None:
        _scheduler = BackgroundScheduler()
    return _scheduler


def start_scheduler(fetcher: PriceFetcher) -> BackgroundScheduler:
    """Start the background scheduler with a per-minute tick for `fetcher`."""
    scheduler = get_scheduler()
    _add_tick_job(scheduler, fetcher)
    if not scheduler.running:
        scheduler.start()
        logger.info("Background scheduler started")

    next_run = fetcher.next_fetch_time()
    logger.info(f"Fetching {fetcher.url} on '{fetcher.schedule}', next at {next_run}")
    return scheduler


def stop_scheduler() -> None:
    """Stop the background scheduler."""
    global _scheduler
    if _scheduler and _scheduler.running:
        _scheduler.shutdown(wait=False)
        logger.info("Background scheduler stopped")
    _scheduler = None


def fetch(
    directory: Union[str, Path],
    url: str,
    schedule: Schedule,
    settings: Optional[FetcherSettings] = None,
) -> None:
    """
    Download `url` into `directory` whenever `schedule` fires.

    Blocks until the process is interrupted.
    """
    fetcher = PriceFetcher(directory, url, schedule, settings=settings)
    scheduler = BlockingScheduler()
    _add_tick_job(scheduler, fetcher)

    logger.info(f"Fetching {url} into {directory} on '{schedule}', next at {fetcher.next_fetch_time()}")
    try:
        scheduler.start()
    except (KeyboardInterrupt, SystemExit):
        logger.info("Fetcher interrupted, shutting down")
    finally:
        fetcher.close()
