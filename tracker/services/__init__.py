"""Services layer - Business logic"""

from .clock_driver import ClockDriver, get_clock_driver
from .stopwatch_service import StopwatchEngine
from .pomodoro_service import PomodoroStateMachine
from .ledger_service import LedgerService
from .tracker_service import TrackerService

__all__ = [
    "ClockDriver", "get_clock_driver", "StopwatchEngine",
    "PomodoroStateMachine", "LedgerService", "TrackerService",
]
