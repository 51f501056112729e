"""APScheduler-based one-shot timers for the client store.

Debounced refetches and undo windows are both "run this once after a delay,
unless something replaces or cancels it first". Each timer is a DateTrigger
job keyed by id; scheduling an id that already exists replaces it. A replacement
still fires while an earlier run of the same id is in progress.
"""

import logging
from collections.abc import Callable
from datetime import datetime, timedelta
from typing import Any

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.date import DateTrigger

logger = logging.getLogger(__name__)

# APScheduler counts running instances per job id, and a replaced job keeps the id
MAX_OVERLAPPING_RUNS = 16


class TimerScheduler:
    def __init__(self) -> None:
        self._scheduler: AsyncIOScheduler | None = None

    @property
    def running(self) -> bool:
        return self._scheduler is not None and self._scheduler.running

    def start(self) -> None:
        """Start on the running event loop."""
        self._scheduler = AsyncIOScheduler()
        self._scheduler.start()
        logger.info("Timer scheduler started")

    def stop(self) -> None:
        if self.running:
            self._scheduler.shutdown(wait=False)
        self._scheduler = None

    def schedule(self, job_id: str, delay_seconds: float, func: Callable, *args: Any) -> None:
        """Run ``func(*args)`` once after the delay, replacing any job with the same id."""
        if self._scheduler is None:
            raise RuntimeError("TimerScheduler is not started")
        self._scheduler.add_job(
            func,
            trigger=DateTrigger(run_date=datetime.now() + timedelta(seconds=delay_seconds)),
            args=list(args),
            id=job_id,
            replace_existing=True,
            max_instances=MAX_OVERLAPPING_RUNS,
            misfire_grace_time=None,
        )

    def cancel(self, job_id: str) -> bool:
        """Drop a pending job. False if it already ran or never existed."""
        if self._scheduler is None:
            return False
        try:
            self._scheduler.remove_job(job_id)
        except JobLookupError:
            return False
        return True

    def pending(self, job_id: str) -> bool:
        return self._scheduler is not None and self._scheduler.get_job(job_id) is not None
