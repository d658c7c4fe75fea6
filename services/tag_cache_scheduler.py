"""
Tag Cache Scheduler

Keeps the tag cache views fresh in the background.

Architecture:
  - A daemon thread wakes up whenever a view is due (per-view interval) or
    someone requests a reload (events.cache_events or the reload endpoint).
  - Each wake-up runs the due loaders one after another on the scheduler
    thread. Loaders never raise, so one failing view does not stop the loop.
  - A failed load is not retried early; the view is simply due again after
    its normal interval.
"""

import threading
import time
from typing import Callable, Dict, Iterable, Optional

import config
from core.tag_cache import ALL_TAGS, ICON_TAGS, NEW_TAGS, LoadResult, TagCache
from events.cache_events import (
    register_cache_invalidation_callback,
    unregister_cache_invalidation_callback,
)
from utils.logging_config import get_logger

logger = get_logger('Scheduler')

# Upper bound on a single wait so stop() is noticed promptly
_MAX_WAIT = 5.0


def default_intervals() -> Dict[str, float]:
    return {
        NEW_TAGS: config.NEW_TAGS_RELOAD_INTERVAL,
        ICON_TAGS: config.ICON_TAGS_RELOAD_INTERVAL,
        ALL_TAGS: config.ALL_TAGS_RELOAD_INTERVAL,
    }


class TagCacheScheduler:
    """Runs the tag cache loaders on intervals and on demand."""

    def __init__(self, tag_cache: TagCache, intervals: Optional[Dict[str, float]] = None,
                 clock: Callable[[], float] = time.monotonic, run_immediately: bool = True):
        self.tag_cache = tag_cache
        self.intervals = intervals or default_intervals()
        self._clock = clock
        self._loaders = {
            NEW_TAGS: tag_cache.load_new_tags,
            ICON_TAGS: tag_cache.load_icon_tags,
            ALL_TAGS: tag_cache.load_all_tags,
        }

        self._lock = threading.Lock()
        self._wake = threading.Event()
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

        # Everything is due on the first pass unless the caller already loaded
        now = self._clock()
        self._next_run = {
            name: 0.0 if run_immediately else now + self.intervals[name]
            for name in self._loaders
        }
        self._requested = set()
        self._last_results: Dict[str, LoadResult] = {}
        self._last_run_at: Dict[str, float] = {}

    # ------------------------------------------------------------------
    # Triggers
    # ------------------------------------------------------------------

    def request_reload(self, collections: Optional[Iterable[str]] = None):
        """Ask the scheduler thread to reload the given views (all by default)."""
        names = set(collections) if collections else set(self._loaders)
        unknown = names - set(self._loaders)
        if unknown:
            raise ValueError(f"Unknown tag cache collections: {sorted(unknown)}")

        with self._lock:
            self._requested.update(names)
        self._wake.set()

    def due_collections(self):
        now = self._clock()
        with self._lock:
            due = {name for name, at in self._next_run.items() if at <= now}
            due |= self._requested
        # Keep the loader order stable: new, icon, all
        return [name for name in self._loaders if name in due]

    def run_pending(self) -> Dict[str, LoadResult]:
        """Run every due loader once. Returns the results of this pass."""
        results = {}
        for name in self.due_collections():
            with self._lock:
                self._requested.discard(name)

            result = self._loaders[name]()
            results[name] = result

            now = self._clock()
            with self._lock:
                self._next_run[name] = now + self.intervals[name]
                self._last_results[name] = result
                self._last_run_at[name] = time.time()

            if not result.ok:
                logger.warning(f"Reload of {name} finished with status {result.status.value}: {result.error}")

        return results

    # ------------------------------------------------------------------
    # Thread lifecycle
    # ------------------------------------------------------------------

    def start(self) -> bool:
        """Start the background thread. Returns False if it is already running."""
        if self.is_running():
            return False

        self._stop.clear()
        register_cache_invalidation_callback(self.request_reload)
        self._thread = threading.Thread(target=self._loop, daemon=True, name="tag-cache-scheduler")
        self._thread.start()
        logger.info("Tag cache scheduler started")
        return True

    def stop(self, timeout: float = 10.0):
        unregister_cache_invalidation_callback(self.request_reload)
        self._stop.set()
        self._wake.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
        logger.info("Tag cache scheduler stopped")

    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def _seconds_until_due(self) -> float:
        now = self._clock()
        with self._lock:
            if self._requested:
                return 0.0
            soonest = min(self._next_run.values())
        return min(max(soonest - now, 0.0), _MAX_WAIT)

    def _loop(self):
        while not self._stop.is_set():
            self._wake.wait(timeout=self._seconds_until_due())
            self._wake.clear()
            if self._stop.is_set():
                break

            try:
                self.run_pending()
            except Exception:
                # Loaders do not raise; this guards the bookkeeping around them
                logger.error("Tag cache scheduler pass failed", exc_info=True)
                self._stop.wait(1.0)  # Back off on error

    def get_status(self) -> dict:
        with self._lock:
            return {
                "running": self.is_running(),
                "intervals": dict(self.intervals),
                "pending": sorted(self._requested),
                "last_run_at": dict(self._last_run_at),
                "last_results": {name: result.to_dict() for name, result in self._last_results.items()},
            }


# --- Shared scheduler instance ---
_scheduler: Optional[TagCacheScheduler] = None
_scheduler_lock = threading.Lock()


def start_scheduler(tag_cache: TagCache, run_immediately: bool = True) -> bool:
    """Start the shared scheduler for tag_cache. Returns False if already running."""
    global _scheduler
    with _scheduler_lock:
        if _scheduler is not None and _scheduler.is_running():
            return False
        _scheduler = TagCacheScheduler(tag_cache, run_immediately=run_immediately)
        return _scheduler.start()


def stop_scheduler():
    global _scheduler
    with _scheduler_lock:
        if _scheduler is not None:
            _scheduler.stop()
            _scheduler = None


def get_scheduler() -> Optional[TagCacheScheduler]:
    return _scheduler
