"""
Tracker Service - One tracking session for the application.

Architecture Decision: Observer Pattern (Qt Signals)
The service owns the ledger, the stopwatch and the Pomodoro machine, routes
clock ticks to them and emits signals when things change. It knows nothing
about how the state is shown.

Every change marks the state dirty and schedules a single snapshot write on
the next event-loop turn, so no operation waits on the disk. A failed write
is logged and reported through `storage_failed`; the in-memory change stands.
"""

import logging
from pathlib import Path
from typing import List, Optional

from PySide6.QtCore import QObject, QTimer, Signal

from tracker.domain.exceptions import StorageError
from tracker.domain.models import (
    Project, Task, Snapshot, DeletePreview, UserPreferences,
)
from tracker.infra.notifier import Notifier, create_notifier
from tracker.infra.repository import SnapshotRepository
from tracker.infra.snapshot_codec import default_snapshot, SNAPSHOT_VERSION
from tracker.services.clock_driver import ClockDriver, get_clock_driver
from tracker.services.ledger_service import LedgerService
from tracker.services.pomodoro_service import PomodoroStateMachine
from tracker.services.stopwatch_service import StopwatchEngine, format_time

logger = logging.getLogger(__name__)


class TrackerService(QObject):
    """
    Coordinates time tracking, Pomodoro phases and the task ledger.
    """

    # Signals
    tick = Signal(str, int)  # (formatted_time, session_seconds)
    state_changed = Signal()
    phase_completed = Signal(str, str)  # finished phase, next phase
    storage_failed = Signal(str)  # error message

    def __init__(self, repository: SnapshotRepository,
                 clock: Optional[ClockDriver] = None,
                 notifier: Optional[Notifier] = None,
                 ledger: Optional[LedgerService] = None,
                 preferences: Optional[UserPreferences] = None):
        super().__init__()
        self.preferences = preferences or UserPreferences()
        self.repository = repository
        self.clock = clock or get_clock_driver()
        self.notifier = notifier or create_notifier(self.preferences.sound_enabled)
        self.ledger = ledger or LedgerService(default_priority=self.preferences.default_priority)
        self.stopwatch = StopwatchEngine()
        self.pomodoro = PomodoroStateMachine()
        self.is_dark_mode: bool = self.preferences.dark_mode

        self._dirty = False
        self._save_pending = False

        self.clock.tick.connect(self.on_tick)

    # ---- State in and out ----------------------------------------------

    def load(self) -> Snapshot:
        """Replace the in-memory state with the stored snapshot"""
        if not self.repository.exists():
            logger.info("No stored data found, starting fresh")
            snapshot = default_snapshot()
        else:
            snapshot = self.repository.load()
        # Nothing stored for the flag: first run or unreadable storage
        if "is_dark_mode" not in snapshot.model_fields_set:
            snapshot.is_dark_mode = self.preferences.dark_mode
        self._apply(snapshot)
        return snapshot

    def _apply(self, snapshot: Snapshot):
        self.ledger.restore(snapshot.projects, snapshot.tasks)
        self.stopwatch.restore(
            is_running=snapshot.is_timer_running,
            session_seconds=snapshot.timer_seconds,
            active_task_id=snapshot.active_task_id,
            task_seconds=snapshot.task_timers,
        )
        self.pomodoro.restore(
            enabled=snapshot.pomodoro_mode,
            phase=snapshot.pomodoro_phase,
            completed_sessions=snapshot.pomodoro_count,
        )
        self.is_dark_mode = snapshot.is_dark_mode
        self._sync_clock()

    def snapshot(self) -> Snapshot:
        """The complete current state"""
        stats = self.ledger.stats()
        stats.total_time_today = self.stopwatch.session_seconds // 60
        return Snapshot(
            stats=stats,
            projects=self.ledger.projects(),
            tasks=self.ledger.tasks(),
            is_timer_running=self.stopwatch.is_running,
            timer_seconds=self.stopwatch.session_seconds,
            is_dark_mode=self.is_dark_mode,
            pomodoro_mode=self.pomodoro.enabled,
            pomodoro_phase=self.pomodoro.phase,
            pomodoro_count=self.pomodoro.completed_sessions,
            active_task_id=self.stopwatch.active_task_id,
            task_timers=dict(self.stopwatch.task_seconds),
            version=SNAPSHOT_VERSION,
        )

    def _changed(self):
        self._dirty = True
        self.state_changed.emit()
        if not self._save_pending:
            self._save_pending = True
            QTimer.singleShot(0, self.flush)

    def flush(self) -> bool:
        """
        Write the snapshot now if anything changed.

        Returns:
            False if the write failed
        """
        self._save_pending = False
        if not self._dirty:
            return True
        try:
            self.repository.save(self.snapshot())
        except StorageError as e:
            logger.warning(f"Auto-save failed: {e}")
            self.storage_failed.emit(str(e))
            return False
        self._dirty = False
        return True

    def close(self):
        """Stop the clock and write pending changes"""
        self.clock.stop()
        self.clock.tick.disconnect(self.on_tick)
        self.flush()

    # ---- Clock ----------------------------------------------------------

    def _sync_clock(self):
        # The clock runs exactly while the stopwatch does
        if self.stopwatch.is_running:
            self.clock.start()
        else:
            self.clock.stop()

    def on_tick(self):
        """Called every second by the clock driver"""
        if not self.stopwatch.advance():
            self._sync_clock()
            return

        finished = self.pomodoro.phase
        next_phase = self.pomodoro.check(self.stopwatch.session_seconds)
        if next_phase is not None:
            self.stopwatch.is_running = False
            self.stopwatch.reset_session()
            self._sync_clock()
            logger.info(f"Pomodoro phase {finished.value} complete, next: {next_phase.value}")
            self.notifier.notify_safely(finished, next_phase)
            self.phase_completed.emit(finished.value, next_phase.value)

        self.tick.emit(self.format_session(), self.stopwatch.session_seconds)
        self._changed()

    def format_session(self) -> str:
        time_str = format_time(self.stopwatch.session_seconds)
        task = self.active_task()
        if task:
            return f"{task.title}: {time_str}"
        return time_str

    # ---- Stopwatch ------------------------------------------------------

    def toggle_session(self) -> bool:
        """Start or pause the session timer. Returns the new running state."""
        running = self.stopwatch.toggle_session()
        self._sync_clock()
        self._changed()
        return running

    def start_task(self, task_id: int) -> bool:
        """Track time on a task, stopping any other active task"""
        if self.ledger.find_task(task_id) is None:
            return False
        self.stopwatch.start_task(task_id)
        self.ledger.mark_in_progress(task_id)
        self._sync_clock()
        self._changed()
        return True

    def stop_task(self, task_id: int) -> bool:
        if not self.stopwatch.stop_task(task_id):
            return False
        self._sync_clock()
        self._changed()
        return True

    def active_task(self) -> Optional[Task]:
        if self.stopwatch.active_task_id is None:
            return None
        return self.ledger.find_task(self.stopwatch.active_task_id)

    def task_time(self, task_id: int) -> int:
        return self.stopwatch.task_time(task_id)

    # ---- Pomodoro -------------------------------------------------------

    def toggle_pomodoro(self) -> bool:
        """Switch Pomodoro mode. Returns True if it is now enabled."""
        if self.pomodoro.toggle():
            self.stopwatch.reset_session()
        self._changed()
        return self.pomodoro.enabled

    def progress(self) -> float:
        """Pomodoro phase progress in [0, 1]; 0 when Pomodoro is off"""
        if not self.pomodoro.enabled:
            return 0.0
        return min(1.0, max(0.0, self.pomodoro.progress(self.stopwatch.session_seconds)))

    # ---- Preferences ----------------------------------------------------

    def set_dark_mode(self, enabled: bool):
        self.is_dark_mode = enabled
        self._changed()

    def toggle_dark_mode(self) -> bool:
        self.set_dark_mode(not self.is_dark_mode)
        return self.is_dark_mode

    # ---- Ledger ---------------------------------------------------------

    def add_project(self, name: str) -> Optional[Project]:
        project = self.ledger.add_project(name)
        if project is not None:
            self._changed()
        return project

    def preview_delete_project(self, project_id: int) -> Optional[DeletePreview]:
        return self.ledger.preview_delete_project(project_id)

    def delete_project(self, project_id: int) -> Optional[List[int]]:
        """Delete a project, its tasks and their timers"""
        removed = self.ledger.delete_project(project_id)
        if removed is None:
            return None
        for task_id in removed:
            self.stopwatch.forget_task(task_id)
        self._sync_clock()
        self._changed()
        return removed

    def toggle_project_completion(self, project_id: int) -> Optional[Project]:
        project = self.ledger.toggle_project_completion(project_id)
        if project is not None:
            self._changed()
        return project

    def rename_project(self, project_id: int, name: str) -> Optional[Project]:
        project = self.ledger.rename_project(project_id, name)
        if project is not None:
            self._changed()
        return project

    def add_task(self, title: str, project_name: str = "") -> Optional[Task]:
        task = self.ledger.add_task(title, project_name)
        if task is not None:
            self._changed()
        return task

    def complete_task(self, task_id: int) -> Optional[Task]:
        task = self.ledger.complete_task(task_id)
        if task is not None:
            self._changed()
        return task

    def delete_task(self, task_id: int) -> Optional[Task]:
        task = self.ledger.delete_task(task_id)
        if task is None:
            return None
        self.stopwatch.forget_task(task_id)
        self._sync_clock()
        self._changed()
        return task

    # ---- Import / export ------------------------------------------------

    def export_data(self, directory: Optional[Path] = None) -> Optional[Path]:
        """
        Write the current state to a dated export file.

        Returns:
            Path to the export file, or None if it could not be written
        """
        directory = Path(directory) if directory else Path.home()
        try:
            return self.repository.export_to(self.snapshot(), directory)
        except StorageError as e:
            logger.warning(f"Export failed: {e}")
            self.storage_failed.emit(str(e))
            return None

    def import_data(self, path: Path) -> Snapshot:
        """
        Replace all state with the contents of an export file.

        Raises:
            FormatError: If the file is not a valid snapshot; nothing changes
        """
        snapshot = self.repository.read_import(path)
        self._apply(snapshot)
        self._changed()
        logger.info(f"Data imported from {path}")
        return snapshot

    def reset_data(self):
        """Clear all projects, tasks and timers. Dark mode is kept."""
        try:
            self.repository.clear()
        except StorageError as e:
            logger.warning(f"Could not clear stored data: {e}")
            self.storage_failed.emit(str(e))
        dark_mode = self.is_dark_mode
        self._apply(default_snapshot())
        self.is_dark_mode = dark_mode
        self._changed()
