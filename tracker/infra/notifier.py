"""
Phase-completion cues.

Architecture Decision: Factory Pattern
`create_notifier` picks an implementation from the preferences. Every
implementation is called through `notify_safely`, which never lets a failure
reach the timer logic.
"""

import logging
import sys
from abc import ABC, abstractmethod
from typing import TextIO, Optional

from tracker.domain.models import PomodoroPhase

logger = logging.getLogger(__name__)


class Notifier(ABC):
    """
    Abstract base class for the cue played when a Pomodoro phase ends.
    """

    @abstractmethod
    def play(self, finished: PomodoroPhase, next_phase: PomodoroPhase):
        """Produce the cue. May raise; callers go through notify_safely."""
        raise NotImplementedError("Subclasses must implement play")

    def notify_safely(self, finished: PomodoroPhase, next_phase: PomodoroPhase) -> bool:
        """
        Play the cue, logging instead of raising on failure.

        Returns:
            True if the cue was produced
        """
        try:
            self.play(finished, next_phase)
            return True
        except Exception as e:
            logger.warning(f"Could not play notification sound: {e}")
            return False


class TerminalBellNotifier(Notifier):
    """Rings the terminal bell"""

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream

    def play(self, finished: PomodoroPhase, next_phase: PomodoroPhase):
        stream = self.stream or sys.stdout
        stream.write("\a")
        stream.flush()


class SilentNotifier(Notifier):
    """Used when sound is disabled in the preferences"""

    def play(self, finished: PomodoroPhase, next_phase: PomodoroPhase):
        logger.debug(f"Phase {finished.value} finished, next: {next_phase.value}")


def create_notifier(sound_enabled: bool = True) -> Notifier:
    """
    Create the notifier matching the user's sound preference.

    Returns:
        Notifier instance
    """
    if sound_enabled:
        return TerminalBellNotifier()
    return SilentNotifier()
