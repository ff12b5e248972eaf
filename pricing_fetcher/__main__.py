"""
Pricing Fetcher runner

Reads PRICING_FETCHER_* settings (and .env), then downloads the configured
URL on the configured schedule until stopped.
"""
import logging
import signal
import sys

from dotenv import load_dotenv

from .config import ConfigError, Settings, setup_logging
from .fetcher import fetch
from .schedule import ScheduleError, parse_schedule

logger = logging.getLogger("pricing_fetcher.runner")


def signal_handler(signum, frame):
    """Exit cleanly on termination signals."""
    logger.info("Received signal %s, shutting down...", signum)
    sys.exit(0)


def main() -> int:
    load_dotenv()

    try:
        settings = Settings.from_env()
        setup_logging(
            log_level=settings.logging.level,
            json_logs=settings.logging.json_logs,
            log_file=settings.logging.file,
        )
        url = settings.require_url()
        schedule = parse_schedule(settings.fetcher.schedule)
    except (ConfigError, ScheduleError) as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    signal.signal(signal.SIGTERM, signal_handler)

    logger.info("Starting pricing fetcher")
    logger.info("URL: %s", url)
    logger.info("Directory: %s", settings.fetcher.directory)
    logger.info("Schedule: %s", schedule)

    fetch(settings.fetcher.directory, url, schedule, settings=settings.fetcher)
    return 0


if __name__ == "__main__":
    sys.exit(main())
