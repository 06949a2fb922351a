"""
Poll loop: every POLL_INTERVAL_SECONDS re-fetch the viewed week's table and the full roster and
replace the local copies (no diffing). This is how a client sees other clients' writes.

Switching weeks bumps a generation counter; a response fetched for an older generation is discarded
so a slow poll can never overwrite the newly viewed week.
"""
import copy
import logging
import threading
from typing import Callable

from apscheduler.schedulers.background import BackgroundScheduler

from whentomeet.client.api_client import AvailabilityClient
from whentomeet.config import settings
from whentomeet.core.constants import SYNC_JOB_ID
from whentomeet.core.errors import WhenToMeetError
from whentomeet.services.types import Profile, SlotTable

logger = logging.getLogger(__name__)


class SyncLoop:
    def __init__(
        self,
        client: AvailabilityClient,
        week_key: str,
        *,
        interval_seconds: float | None = None,
        scheduler: BackgroundScheduler | None = None,
    ) -> None:
        self._client = client
        self._interval = interval_seconds or settings.poll_interval_seconds
        self._scheduler = scheduler or BackgroundScheduler()
        # Only a scheduler created here is shut down by stop(); a shared one just loses the poll job
        self._owns_scheduler = scheduler is None
        self._lock = threading.Lock()
        self._week_key = week_key
        self._generation = 0
        self._table: SlotTable = {}
        self._roster: list[Profile] = []
        self._listeners: list[Callable[["SyncLoop"], None]] = []

    # --- Cached state ---

    @property
    def week_key(self) -> str:
        with self._lock:
            return self._week_key

    @property
    def table(self) -> SlotTable:
        with self._lock:
            return copy.deepcopy(self._table)

    @property
    def roster(self) -> list[Profile]:
        with self._lock:
            return list(self._roster)

    @property
    def scheduler(self) -> BackgroundScheduler:
        return self._scheduler

    def subscribe(self, listener: Callable[["SyncLoop"], None]) -> None:
        """Called after every applied refresh (e.g. to redraw)."""
        self._listeners.append(listener)

    # --- Fetching ---

    def refresh_now(self) -> bool:
        """
        Fetch the viewed week and the roster and replace the cache. Returns False when the result was
        discarded because the viewed week changed meanwhile. Raises on fetch failure.
        """
        with self._lock:
            generation = self._generation
            week_key = self._week_key
        table = self._client.get_week(week_key)
        roster = self._client.list_users()
        with self._lock:
            if generation != self._generation:
                logger.warning("Discarding stale poll for week %s (now viewing %s)", week_key, self._week_key)
                return False
            self._table = table
            self._roster = roster
        for listener in list(self._listeners):
            listener(self)
        return True

    def tick(self) -> None:
        """One scheduled poll. Failures are logged; the cache keeps its last good copy."""
        try:
            self.refresh_now()
            logger.debug("Polled week %s", self.week_key)
        except WhenToMeetError as e:
            logger.warning("Poll failed: %s", e)

    def view_week(self, week_key: str) -> None:
        """Switch the viewed week; in-flight polls for the previous week are discarded."""
        with self._lock:
            if week_key == self._week_key:
                return
            self._generation += 1
            self._week_key = week_key
            self._table = {}
        self.tick()

    # --- Lifecycle ---

    def start(self) -> None:
        self._scheduler.add_job(
            self.tick,
            "interval",
            seconds=self._interval,
            id=SYNC_JOB_ID,
            max_instances=1,
            coalesce=True,
            replace_existing=True,
        )
        if not self._scheduler.running:
            self._scheduler.start()
        logger.info("Sync loop started for week %s (every %ss)", self.week_key, self._interval)
        self.tick()

    def stop(self) -> None:
        if self._scheduler.get_job(SYNC_JOB_ID) is not None:
            self._scheduler.remove_job(SYNC_JOB_ID)
        if self._owns_scheduler and self._scheduler.running:
            self._scheduler.shutdown(wait=False)
        logger.info("Sync loop stopped")
