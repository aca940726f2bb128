"""
Pomodoro Service - Work / short break / long break cycling.

The machine only decides phases. Stopping the session, resetting session
time and playing the cue on a transition are done by the tracker session so
that the whole transition happens inside a single tick.
"""

from typing import Optional

from tracker.domain.models import PomodoroPhase, PHASE_DURATIONS, LONG_BREAK_INTERVAL


PHASE_LABELS = {
    PomodoroPhase.WORK: "Focus Time",
    PomodoroPhase.SHORT_BREAK: "Short Break",
    PomodoroPhase.LONG_BREAK: "Long Break",
}


class PomodoroStateMachine:
    """
    Phase state for Pomodoro mode.

    Attributes:
        enabled: Whether Pomodoro semantics apply to the session timer
        phase: Current phase
        completed_sessions: Work phases finished since the last long break (0-3)
    """

    def __init__(self):
        self.enabled: bool = False
        self.phase: PomodoroPhase = PomodoroPhase.WORK
        self.completed_sessions: int = 0

    def set_enabled(self, enabled: bool) -> bool:
        """
        Switch Pomodoro mode.

        Returns:
            True when the mode was switched on from off, i.e. the caller must
            reset the session time.
        """
        switched_on = enabled and not self.enabled
        self.enabled = enabled
        if switched_on:
            self.phase = PomodoroPhase.WORK
        return switched_on

    def toggle(self) -> bool:
        return self.set_enabled(not self.enabled)

    def duration(self, phase: Optional[PomodoroPhase] = None) -> int:
        return PHASE_DURATIONS[phase or self.phase]

    def check(self, session_seconds: int) -> Optional[PomodoroPhase]:
        """
        Advance the phase if the current one is over.

        Args:
            session_seconds: Elapsed time in the current phase

        Returns:
            The new phase, or None if no transition happened
        """
        if not self.enabled or session_seconds < self.duration():
            return None

        if self.phase == PomodoroPhase.WORK:
            self.completed_sessions += 1
            if self.completed_sessions >= LONG_BREAK_INTERVAL:
                self.phase = PomodoroPhase.LONG_BREAK
                self.completed_sessions = 0
            else:
                self.phase = PomodoroPhase.SHORT_BREAK
        else:
            self.phase = PomodoroPhase.WORK
        return self.phase

    def progress(self, session_seconds: int) -> float:
        """Fraction of the phase elapsed. Not clamped."""
        return session_seconds / self.duration()

    def remaining(self, session_seconds: int) -> int:
        return self.duration() - session_seconds

    def phase_label(self) -> str:
        return PHASE_LABELS[self.phase]

    def session_number(self) -> int:
        """1-based number of the work session in the current cycle"""
        return self.completed_sessions + 1

    def restore(self, enabled: bool, phase: PomodoroPhase, completed_sessions: int):
        self.enabled = enabled
        self.phase = phase
        self.completed_sessions = completed_sessions
