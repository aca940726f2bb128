"""
Stopwatch Service - Session time and per-task time.

Architecture Decision: Observer Pattern (Qt Signals)
The engine owns the counters and emits signals when the active task changes,
keeping it decoupled from whatever shows the time. It does not own a timer:
the tracker session calls `advance()` once per clock tick.
"""

from typing import Dict, Optional
from PySide6.QtCore import QObject, Signal


def format_time(seconds: int) -> str:
    """Format seconds as HH:MM:SS"""
    hours, remainder = divmod(seconds, 3600)
    minutes, secs = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def format_task_time(seconds: int) -> str:
    """Compact per-task duration: '1h 5m', '4m 3s' or '12s'"""
    hours, remainder = divmod(seconds, 3600)
    minutes, secs = divmod(remainder, 60)
    if hours > 0:
        return f"{hours}h {minutes}m"
    if minutes > 0:
        return f"{minutes}m {secs}s"
    return f"{secs}s"


class StopwatchEngine(QObject):
    """
    Tracks elapsed seconds for the current session and, independently,
    accumulated seconds per task. At most one task is active at a time.
    """

    # Signals (ids are Python ints that may exceed 32 bits)
    task_started = Signal(object)  # task_id
    task_stopped = Signal(object, int)  # task_id, task_seconds

    def __init__(self):
        super().__init__()
        self.is_running: bool = False
        self.session_seconds: int = 0
        self.active_task_id: Optional[int] = None
        self.task_seconds: Dict[int, int] = {}

    def toggle_session(self) -> bool:
        """Flip running state. Session time is kept."""
        self.is_running = not self.is_running
        return self.is_running

    def start_task(self, task_id: int):
        """
        Make `task_id` the active task and start the session.

        A previously active task is stopped first. Signals are emitted only
        after the whole switch is applied.
        """
        previous = self.active_task_id
        self.active_task_id = task_id
        self.is_running = True
        self.task_seconds.setdefault(task_id, 0)

        if previous is not None and previous != task_id:
            self.task_stopped.emit(previous, self.task_time(previous))
        self.task_started.emit(task_id)

    def stop_task(self, task_id: int) -> bool:
        """Stop `task_id` if it is the active task. Returns True if it was."""
        if task_id is None or task_id != self.active_task_id:
            return False
        self.active_task_id = None
        self.is_running = False
        self.task_stopped.emit(task_id, self.task_time(task_id))
        return True

    def advance(self) -> bool:
        """
        Apply one tick. Session and active-task seconds move together.

        Returns:
            True if the tick was counted
        """
        if not self.is_running:
            return False
        self.session_seconds += 1
        if self.active_task_id is not None:
            self.task_seconds[self.active_task_id] = self.task_seconds.get(self.active_task_id, 0) + 1
        return True

    def reset_session(self):
        self.session_seconds = 0

    def forget_task(self, task_id: int):
        """Drop a deleted task's time; stops the session if it was active."""
        self.task_seconds.pop(task_id, None)
        if self.active_task_id == task_id:
            self.active_task_id = None
            self.is_running = False

    def task_time(self, task_id: int) -> int:
        return self.task_seconds.get(task_id, 0)

    def restore(self, is_running: bool, session_seconds: int,
                active_task_id: Optional[int], task_seconds: Dict[int, int]):
        """Replace all counters, e.g. after loading a snapshot"""
        self.is_running = is_running
        self.session_seconds = session_seconds
        self.active_task_id = active_task_id
        self.task_seconds = dict(task_seconds)
