"""
Clock Driver - The one-second tick source.

Architecture Decision: Observer Pattern (Qt Signals)
The driver only emits `tick`; it holds no timing state of its own. Everything
that advances time listens to it, so there is exactly one place where a
second passes.
"""

import logging
from typing import Optional
from PySide6.QtCore import QObject, QTimer, Signal

logger = logging.getLogger(__name__)

TICK_INTERVAL_MS = 1000


class ClockDriver(QObject):
    """
    Wraps a repeating QTimer. Start and stop are idempotent.
    """

    tick = Signal()

    def __init__(self, interval_ms: int = TICK_INTERVAL_MS):
        super().__init__()
        self._running = False
        self.timer = QTimer(self)
        self.timer.setInterval(interval_ms)
        self.timer.timeout.connect(self._on_timeout)

    def start(self):
        """Begin emitting ticks. Does nothing if already running."""
        if self._running:
            return
        self._running = True
        self.timer.start()
        logger.debug("Clock driver started")

    def stop(self):
        """Halt tick emission. Does nothing if already stopped."""
        if not self._running:
            return
        self._running = False
        self.timer.stop()
        logger.debug("Clock driver stopped")

    def is_running(self) -> bool:
        return self._running

    def _on_timeout(self):
        # A timeout queued before stop() must not reach listeners
        if not self._running:
            return
        self.tick.emit()


# Global driver instance
_driver: Optional[ClockDriver] = None


def get_clock_driver() -> ClockDriver:
    """Get the process-wide clock driver"""
    global _driver
    if _driver is None:
        _driver = ClockDriver()
    return _driver
