"""
Tests for the APScheduler driver

Run with: pytest -q
"""
from unittest.mock import MagicMock, patch

import pytest

from pricing_fetcher.fetcher import (
    TICK_JOB_ID,
    FetchResult,
    PriceFetcher,
    fetch,
    get_scheduler,
    run_tick,
    start_scheduler,
    stop_scheduler,
)
from pricing_fetcher.schedule import always, hours_of_the_day


@pytest.fixture
def fetcher(tmp_path):
    return PriceFetcher(tmp_path, "https://prices.example.com/prices.csv", always(),
                        session=MagicMock())


@pytest.fixture
def scheduler_cleanup():
    yield
    stop_scheduler()


class TestBackgroundScheduler:

    def test_get_scheduler_is_singleton(self, scheduler_cleanup):
        assert get_scheduler() is get_scheduler()

    def test_start_registers_minute_job(self, fetcher, scheduler_cleanup):
        scheduler = start_scheduler(fetcher)

        assert scheduler.running is True
        job = scheduler.get_job(TICK_JOB_ID)
        assert job is not None
        assert job.args == (fetcher,)
        assert job.max_instances == 1
        assert job.coalesce is True

    def test_restart_replaces_job(self, fetcher, tmp_path, scheduler_cleanup):
        start_scheduler(fetcher)
        other = PriceFetcher(tmp_path, "https://prices.example.com/other.csv", always(),
                             session=MagicMock())
        scheduler = start_scheduler(other)

        jobs = scheduler.get_jobs()
        assert len(jobs) == 1
        assert jobs[0].args == (other,)

    def test_stop_resets_global(self, fetcher):
        first = start_scheduler(fetcher)
        stop_scheduler()

        assert first.running is False
        assert get_scheduler() is not first
        stop_scheduler()


class TestRunTick:

    def test_exceptions_are_contained(self):
        fetcher = MagicMock()
        fetcher.tick.side_effect = RuntimeError("unexpected")

        run_tick(fetcher)

        fetcher.tick.assert_called_once_with()

    def test_failed_result_logged(self, caplog):
        fetcher = MagicMock()
        fetcher.url = "https://prices.example.com/prices.csv"
        fetcher.tick.return_value = FetchResult.fail("HTTP 503", url=fetcher.url)

        with caplog.at_level("WARNING"):
            run_tick(fetcher)

        assert "HTTP 503" in caplog.text


class TestFetchEntryPoint:

    def test_fetch_runs_blocking_scheduler(self, tmp_path):
        with patch("pricing_fetcher.fetcher.background.BlockingScheduler") as scheduler_cls:
            scheduler = scheduler_cls.return_value
            scheduler.start.side_effect = KeyboardInterrupt

            fetch(tmp_path, "https://prices.example.com/prices.csv", hours_of_the_day(6))

        scheduler.add_job.assert_called_once()
        _, kwargs = scheduler.add_job.call_args
        assert kwargs["id"] == TICK_JOB_ID
        assert isinstance(kwargs["args"][0], PriceFetcher)
        scheduler.start.assert_called_once_with()
