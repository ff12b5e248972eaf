"""
Pricing Fetcher - Price Fetcher

Downloads a URL into a directory whenever a schedule says so.

Flow per tick (once a minute):
    now -> Time.from_datetime(now) -> EvaluationContext.matches(schedule)
        -> download(): GET url (with retries) -> write <stem>-YYYYmmddTHHMM<suffix>
"""
import os
import time
from datetime import datetime, timedelta
from pathlib import Path
from typing import Callable, Optional, Union
from urllib.parse import urlparse

import requests

from ..config.logging import get_logger, log_error, log_fetch
from ..config.settings import FetcherSettings
from ..schedule import EvaluationContext, Schedule, Time
from .models import FetchResult

# One month of minutes: every leaf pattern recurs within this window.
DEFAULT_HORIZON_MINUTES = 31 * 24 * 60


class PriceFetcher:
    """
    Schedule-driven downloader.

    Args:
        directory: Where downloaded files are written
        url: What to download
        schedule: When to download
        session: requests.Session (created lazily if None)
        settings: Timeouts and retry policy
        context: Occurrence counters for Times nodes
        sleep: Delay function between retries
    """

    def __init__(
        self,
        directory: Union[str, Path],
        url: str,
        schedule: Schedule,
        session: Optional[requests.Session] = None,
        settings: Optional[FetcherSettings] = None,
        context: Optional[EvaluationContext] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.directory = Path(directory)
        self.url = url
        self.schedule = schedule
        self.settings = settings or FetcherSettings(url=url, directory=self.directory)
        self.context = context or EvaluationContext()
        self._session = session
        self._sleep = sleep
        self._log = get_logger("fetcher", url=url, directory=str(self.directory))

    @property
    def session(self) -> requests.Session:
        """Get HTTP session (lazy init)."""
        if self._session is None:
            self._session = requests.Session()
            self._session.headers.update({"User-Agent": self.settings.user_agent})
        return self._session

    # ==================== SCHEDULING ====================

    def should_fetch(self, now: datetime) -> bool:
        """Ask the schedule whether `now` is a fetch minute."""
        return self.context.matches(self.schedule, Time.from_datetime(now))

    def tick(self, now: Optional[datetime] = None) -> Optional[FetchResult]:
        """
        Run one scheduling step.

        Returns:
            FetchResult if a download was attempted, None if not due.
        """
        now = now or datetime.now()
        if not self.should_fetch(now):
            self._log.debug(f"Not due at {now:%Y-%m-%d %H:%M}")
            return None
        return self.download(now)

    def next_fetch_time(
        self,
        after: Optional[datetime] = None,
        horizon_minutes: int = DEFAULT_HORIZON_MINUTES,
    ) -> Optional[datetime]:
        """
        Find the next minute strictly after `after` at which the schedule fires.

        Looks ahead on a copy of the evaluation context, so live counters are not
        advanced. Returns None if nothing fires within the horizon.
        """
        after = after or datetime.now()
        lookahead = self.context.copy()
        candidate = after.replace(second=0, microsecond=0) + timedelta(minutes=1)
        for _ in range(horizon_minutes):
            if lookahead.matches(self.schedule, Time.from_datetime(candidate)):
                return candidate
            candidate += timedelta(minutes=1)
        return None

    # ==================== DOWNLOAD ====================

    def target_path(self, now: datetime) -> Path:
        """File name for a download made at `now`."""
        name = Path(urlparse(self.url).path).name or "prices"
        stem, suffix = os.path.splitext(name)
        return self.directory / f"{stem or 'prices'}-{now:%Y%m%dT%H%M}{suffix}"

    def download(self, now: Optional[datetime] = None) -> FetchResult:
        """
        Download the URL into the directory.

        Connection errors, timeouts and 5xx responses are retried up to
        settings.max_retries times. 4xx responses and file errors are not.
        Never raises for I/O failures; returns FetchResult.fail instead.
        """
        now = now or datetime.now()
        target = self.target_path(now)
        max_attempts = self.settings.max_retries + 1
        status_code = None
        error = None

        for attempt in range(1, max_attempts + 1):
            started = time.monotonic()
            try:
                response = self.session.get(self.url, timeout=self.settings.timeout_seconds)
                status_code = response.status_code
                response.raise_for_status()
                size = self._write(target, response.content)
            except requests.HTTPError as e:
                error = f"HTTP {status_code}: {e}"
                if status_code is not None and status_code < 500:
                    self._log.warning(f"Fetch rejected with {status_code}, not retrying")
                    return FetchResult.fail(error, url=self.url, status_code=status_code,
                                            attempts=attempt, fetched_at=now)
            except requests.RequestException as e:
                error = f"{type(e).__name__}: {e}"
            except OSError as e:
                log_error(self._log, e, context="write", path=str(target))
                return FetchResult.fail(f"Write failed: {e}", url=self.url, status_code=status_code,
                                        attempts=attempt, fetched_at=now)
            else:
                duration_ms = (time.monotonic() - started) * 1000
                log_fetch(self._log, self.url, status_code, size, duration_ms,
                          path=str(target), attempt=attempt)
                return FetchResult.ok(self.url, target, status_code, size,
                                      attempts=attempt, fetched_at=now)

            if attempt < max_attempts:
                self._log.warning(f"Fetch attempt {attempt}/{max_attempts} failed: {error}")
                self._sleep(self.settings.retry_delay_seconds)

        self._log.error(f"Fetch failed after {max_attempts} attempts: {error}")
        return FetchResult.fail(error, url=self.url, status_code=status_code,
                                attempts=max_attempts, fetched_at=now)

    def _write(self, target: Path, content: bytes) -> int:
        """Write atomically: temp file in the same directory, then replace."""
        target.parent.mkdir(parents=True, exist_ok=True)
        tmp = target.with_name(f".{target.name}.part")
        try:
            tmp.write_bytes(content)
            os.replace(tmp, target)
        finally:
            if tmp.exists():
                tmp.unlink()
        return len(content)

    def close(self) -> None:
        if self._session is not None:
            self._session.close()
