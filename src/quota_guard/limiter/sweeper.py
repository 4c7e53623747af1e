from __future__ import annotations

import threading
from collections.abc import Callable

import structlog

logger = structlog.get_logger()


class ExpirySweeper:
    """Runs a sweep callback on a fixed period from a daemon thread.

    Missing a cycle only delays memory reclamation, so a failing sweep is
    logged and the loop keeps going.
    """

    def __init__(self, sweep: Callable[[], int], interval_seconds: float = 60.0) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self._sweep = sweep
        self._interval = interval_seconds
        self._stopped = threading.Event()
        self._thread: threading.Thread | None = None
        self._lock = threading.Lock()

    @property
    def interval_seconds(self) -> float:
        return self._interval

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        with self._lock:
            if self._thread is not None:
                return
            self._thread = threading.Thread(
                target=self._run, name="rate-limit-sweeper", daemon=True
            )
            self._thread.start()
        logger.debug("rate_limit_sweeper_started", interval_seconds=self._interval)

    def stop(self, timeout: float | None = 5.0) -> None:
        """Signal the loop to exit and wait for it. Safe to call more than once."""
        self._stopped.set()
        with self._lock:
            thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
            logger.debug("rate_limit_sweeper_stopped")

    def run_once(self) -> int:
        try:
            return self._sweep()
        except Exception:
            logger.exception("rate_limit_sweep_failed")
            return 0

    def _run(self) -> None:
        while not self._stopped.wait(self._interval):
            self.run_once()
