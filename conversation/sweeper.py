"""Recurring idle sweep for a ConversationStore.

The store only knows how to evict; this module decides when. Hosts with
their own scheduler (e.g. the uagents adapter) call run_once directly.
"""

import logging
import threading
from datetime import datetime, timedelta

from conversation.store import IDLE_THRESHOLD, ConversationStore

logger = logging.getLogger(__name__)

SWEEP_INTERVAL_SECONDS = 60 * 60


class IdleSweeper:
    def __init__(
        self,
        store: ConversationStore,
        interval_seconds: float = SWEEP_INTERVAL_SECONDS,
        idle_threshold: timedelta = IDLE_THRESHOLD,
    ) -> None:
        self._store = store
        self._interval = interval_seconds
        self._threshold = idle_threshold
        self._timer: threading.Timer | None = None
        self._running = False
        self._lock = threading.Lock()

    @property
    def running(self) -> bool:
        return self._running

    def run_once(self, now: datetime | None = None) -> int:
        removed = self._store.sweep_idle(now, self._threshold)
        if removed:
            logger.info(
                "Cleaned up idle conversations: removed=%d remaining=%d",
                removed,
                self._store.active_count(),
            )
        return removed

    def start(self) -> None:
        with self._lock:
            if self._running:
                return
            self._running = True
            self._schedule()
        logger.info("Idle sweep scheduled every %.0fs", self._interval)

    def stop(self) -> None:
        with self._lock:
            self._running = False
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

    def _schedule(self) -> None:
        self._timer = threading.Timer(self._interval, self._tick)
        self._timer.daemon = True
        self._timer.start()

    def _tick(self) -> None:
        try:
            self.run_once()
        except Exception:
            logger.exception("Idle sweep failed")
        with self._lock:
            if self._running:
                self._schedule()
