# Overview: Background refresh of live data (chats, messages, clients, billing, users) on a fixed interval.

from __future__ import annotations

import logging
import threading
from typing import Optional, Protocol

logger = logging.getLogger(__name__)


POLL_INTERVAL_SECONDS = 5.0


class ScheduledTask(Protocol):
    def start(self) -> None: ...

    def stop(self) -> None: ...

    def tick(self) -> None: ...


class Poller:
    """
    Calls store.refresh_live_data() every `interval` seconds on a daemon thread.

    start() is idempotent: a running poller is left alone, so at most one
    polling thread exists per Poller. stop() on an idle poller does nothing.
    """

    def __init__(self, store, interval: float = POLL_INTERVAL_SECONDS):
        self._store = store
        self._interval = interval
        self._lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        thread = self._thread
        return thread is not None and thread.is_alive()

    def start(self) -> None:
        with self._lock:
            if self.running:
                return
            self._stop_event.clear()
            self._thread = threading.Thread(target=self._run, name="sentra-poller", daemon=True)
            self._thread.start()
        logger.info("Polling every %.1fs", self._interval)

    def stop(self) -> None:
        with self._lock:
            thread = self._thread
            self._thread = None
            self._stop_event.set()
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=self._interval + 1)
            logger.info("Polling stopped")

    def tick(self) -> None:
        """One refresh pass; failures are logged and the next tick runs as usual."""
        try:
            self._store.refresh_live_data()
        except Exception:
            logger.exception("Live data refresh failed")

    def _run(self) -> None:
        self.tick()
        while not self._stop_event.wait(self._interval):
            self.tick()
