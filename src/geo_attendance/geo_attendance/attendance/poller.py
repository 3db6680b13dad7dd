from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

from ..core.constants import DEFAULT_POLL_INTERVAL_SECONDS
from ..core.exceptions import StoreUnavailable

logger = logging.getLogger(__name__)


class AttendancePoller:
    """Re-run `refresh` on a fixed interval in a daemon thread.

    A poll that comes due while the previous one is still running is skipped,
    not queued. Store failures are logged and the next tick tries again.
    """

    def __init__(
        self,
        refresh: Callable[[], object],
        *,
        interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS,
        name: str = "attendance-poller",
    ):
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self._refresh = refresh
        self._interval = float(interval_seconds)
        self._name = name
        self._busy = threading.Lock()
        self._stopped = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def poll_once(self) -> bool:
        """Run one refresh unless one is in flight. Returns whether it ran."""

        if not self._busy.acquire(blocking=False):
            logger.debug("%s: previous poll still running, skipping", self._name)
            return False
        try:
            self._refresh()
        except StoreUnavailable as e:
            logger.warning("%s: refresh failed: %s", self._name, e)
        finally:
            self._busy.release()
        return True

    def _run(self) -> None:
        while not self._stopped.wait(self._interval):
            self.poll_once()

    def start(self) -> "AttendancePoller":
        if self.running:
            return self
        self._stopped.clear()
        self._thread = threading.Thread(target=self._run, name=self._name, daemon=True)
        self._thread.start()
        logger.info("%s started (every %.1fs)", self._name, self._interval)
        return self

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stopped.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
        self._thread = None

    def __enter__(self) -> "AttendancePoller":
        return self.start()

    def __exit__(self, *exc) -> None:
        self.stop()
