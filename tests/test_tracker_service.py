"""
Tests for the tracker session: tick routing, Pomodoro transitions,
ledger/stopwatch consistency, persistence and import.
"""

import logging

import pytest

from conftest import run_ticks
from tracker.domain.exceptions import FormatError, StorageError
from tracker.domain.models import PomodoroPhase, TaskStatus, UserPreferences
from tracker.infra.notifier import Notifier
from tracker.infra.repository import SnapshotRepository
from tracker.services.tracker_service import TrackerService


class FailingNotifier(Notifier):
    def play(self, finished, next_phase):
        raise RuntimeError("no audio device")


class FailingRepository(SnapshotRepository):
    def save(self, snapshot):
        raise StorageError("disk full")


def complete_phase(service: TrackerService):
    """Resume the session if needed and tick through the current phase"""
    if not service.stopwatch.is_running:
        service.toggle_session()
    run_ticks(service, service.pomodoro.duration())


def comparable(snapshot):
    return snapshot.model_dump(exclude={"last_updated"})


class TestTicks:

    def test_session_and_task_advance_together(self, service):
        task = service.add_task("Draft outline")
        service.start_task(task.id)
        run_ticks(service, 90)
        assert service.stopwatch.session_seconds == 90
        assert service.task_time(task.id) == 90

    def test_switching_tasks_counts_every_tick_once(self, service):
        a = service.add_task("A")
        b = service.add_task("B")
        service.start_task(a.id)
        run_ticks(service, 4)
        service.start_task(b.id)
        run_ticks(service, 6)
        assert service.task_time(a.id) == 4
        assert service.task_time(b.id) == 6
        assert service.stopwatch.session_seconds == 10
        assert service.stopwatch.active_task_id == b.id

    def test_ticks_while_stopped_change_nothing(self, service):
        run_ticks(service, 5)
        assert service.stopwatch.session_seconds == 0

    def test_tick_signal_carries_task_title(self, service):
        received = []
        service.tick.connect(lambda text, secs: received.append((text, secs)))
        task = service.add_task("Draft outline")
        service.start_task(task.id)
        run_ticks(service, 61)
        assert received[-1] == ("Draft outline: 00:01:01", 61)

    def test_clock_runs_only_while_stopwatch_runs(self, service):
        task = service.add_task("A")
        service.start_task(task.id)
        assert service.clock.is_running()
        service.stop_task(task.id)
        assert not service.clock.is_running()
        service.toggle_session()
        assert service.clock.is_running()
        service.toggle_session()
        assert not service.clock.is_running()

    def test_clock_ticks_reach_the_service(self, service):
        service.toggle_session()
        service.clock._on_timeout()
        assert service.stopwatch.session_seconds == 1

    def test_starting_unknown_task_is_ignored(self, service):
        assert service.start_task(404) is False
        assert service.stopwatch.active_task_id is None
        assert not service.stopwatch.is_running

    def test_starting_task_marks_it_in_progress(self, service):
        task = service.add_task("A")
        service.start_task(task.id)
        assert service.ledger.find_task(task.id).status == TaskStatus.IN_PROGRESS
        assert service.snapshot().stats.active_tasks == 1


class TestPomodoro:

    def test_no_transition_when_disabled(self, service):
        service.toggle_session()
        run_ticks(service, 1500)
        assert service.stopwatch.session_seconds == 1500
        assert service.pomodoro.phase == PomodoroPhase.WORK
        assert service.stopwatch.is_running

    def test_enabling_resets_session(self, service):
        service.toggle_session()
        run_ticks(service, 30)
        service.pomodoro.phase = PomodoroPhase.SHORT_BREAK
        assert service.toggle_pomodoro() is True
        assert service.stopwatch.session_seconds == 0
        assert service.pomodoro.phase == PomodoroPhase.WORK

    def test_disabling_keeps_session_time(self, service):
        service.toggle_pomodoro()
        service.toggle_session()
        run_ticks(service, 30)
        assert service.toggle_pomodoro() is False
        assert service.stopwatch.session_seconds == 30

    def test_work_phase_completion(self, service, notifier):
        phases = []
        service.phase_completed.connect(lambda done, nxt: phases.append((done, nxt)))
        service.toggle_pomodoro()
        complete_phase(service)

        assert service.pomodoro.phase == PomodoroPhase.SHORT_BREAK
        assert service.pomodoro.completed_sessions == 1
        assert service.stopwatch.session_seconds == 0
        assert not service.stopwatch.is_running
        assert not service.clock.is_running()
        assert notifier.calls == [(PomodoroPhase.WORK, PomodoroPhase.SHORT_BREAK)]
        assert phases == [("work", "shortBreak")]

    def test_four_work_phases_then_long_break(self, service):
        service.toggle_pomodoro()
        for _ in range(3):
            complete_phase(service)  # work
            complete_phase(service)  # short break
        complete_phase(service)

        assert service.pomodoro.phase == PomodoroPhase.LONG_BREAK
        assert service.pomodoro.completed_sessions == 0

        complete_phase(service)
        complete_phase(service)
        assert service.pomodoro.phase == PomodoroPhase.SHORT_BREAK
        assert service.pomodoro.completed_sessions == 1

    def test_active_task_counts_through_transition(self, service):
        task = service.add_task("Focus")
        service.toggle_pomodoro()
        service.start_task(task.id)
        run_ticks(service, 1500)
        assert service.task_time(task.id) == 1500
        assert service.stopwatch.active_task_id == task.id

    def test_notifier_failure_is_logged_not_raised(self, repository, clock, ledger, caplog):
        service = TrackerService(repository, clock=clock, notifier=FailingNotifier(), ledger=ledger)
        service.toggle_pomodoro()
        with caplog.at_level(logging.WARNING):
            complete_phase(service)
        assert service.pomodoro.phase == PomodoroPhase.SHORT_BREAK
        assert "Could not play notification sound" in caplog.text

    def test_progress_is_clamped(self, service):
        assert service.progress() == 0.0
        service.toggle_pomodoro()
        service.toggle_session()
        run_ticks(service, 750)
        assert service.progress() == pytest.approx(0.5)


class TestLedgerConsistency:

    def test_deleting_active_task_stops_timer(self, service):
        task = service.add_task("A")
        service.start_task(task.id)
        run_ticks(service, 3)
        service.delete_task(task.id)
        assert service.stopwatch.active_task_id is None
        assert not service.stopwatch.is_running
        assert service.task_time(task.id) == 0
        assert not service.clock.is_running()

    def test_deleting_project_forgets_its_task_timers(self, service):
        project = service.add_project("Launch")
        other = service.add_task("Other", "Elsewhere")
        task = service.add_task("A", "Launch")
        service.start_task(other.id)
        run_ticks(service, 2)
        service.start_task(task.id)
        run_ticks(service, 2)

        removed = service.delete_project(project.id)

        assert removed == [task.id]
        assert task.id not in service.stopwatch.task_seconds
        assert service.task_time(other.id) == 2
        assert service.snapshot().stats.total_projects == 0
        assert service.snapshot().stats.active_tasks == 1

    def test_blank_input_does_not_mark_dirty(self, service):
        changes = []
        service.state_changed.connect(lambda: changes.append(1))
        service.add_project("  ")
        service.add_task("")
        service.complete_task(1)
        assert changes == []


class TestPersistence:

    def test_flush_writes_and_reload_restores(self, service, repository, clock, notifier, ledger):
        project = service.add_project("Launch")
        task = service.add_task("Draft outline", "Launch")
        service.start_task(task.id)
        run_ticks(service, 12)
        service.toggle_dark_mode()
        assert service.flush() is True
        before = service.snapshot()

        reloaded = TrackerService(repository, clock=clock, notifier=notifier)
        reloaded.load()

        assert comparable(reloaded.snapshot()) == comparable(before)
        assert reloaded.ledger.find_project(project.id).tasks == 1
        assert reloaded.stopwatch.active_task_id == task.id

    def test_reload_keeps_detached_tasks_detached(self, service, repository, clock, notifier):
        task = service.add_task("Draft outline", "Elsewhere")
        project = service.add_project("Elsewhere")
        assert service.flush() is True

        reloaded = TrackerService(repository, clock=clock, notifier=notifier)
        reloaded.load()

        assert reloaded.ledger.find_project(project.id).tasks == 0
        assert reloaded.ledger.find_task(task.id).project_id is None
        assert reloaded.delete_project(project.id) == []
        assert reloaded.ledger.find_task(task.id) is not None

    def test_corrupt_storage_applies_dark_mode_preference(self, repository, clock, notifier):
        repository.data_path.parent.mkdir(parents=True, exist_ok=True)
        repository.data_path.write_text("{corrupt", encoding="utf-8")

        service = TrackerService(repository, clock=clock, notifier=notifier,
                                 preferences=UserPreferences(dark_mode=True))
        service.load()

        assert service.is_dark_mode is True
        assert service.snapshot().projects == []

    def test_flush_without_changes_is_noop(self, service, repository):
        assert service.flush() is True
        assert not repository.exists()

    def test_storage_failure_is_not_fatal(self, tmp_path, clock, notifier, ledger):
        failures = []
        service = TrackerService(FailingRepository(tmp_path / "data.json"),
                                 clock=clock, notifier=notifier, ledger=ledger)
        service.storage_failed.connect(failures.append)

        project = service.add_project("Launch")

        assert service.flush() is False
        assert failures == ["disk full"]
        assert service.ledger.find_project(project.id) is not None

    def test_close_flushes_and_stops_clock(self, service, repository):
        service.toggle_session()
        service.close()
        assert not service.clock.is_running()
        assert repository.exists()


class TestImportExport:

    def test_export_then_import_restores_state(self, service, tmp_path):
        service.add_project("Launch")
        service.add_task("Draft outline", "Launch")
        path = service.export_data(tmp_path / "exports")
        exported = service.snapshot()

        service.reset_data()
        assert service.snapshot().projects == []

        service.import_data(path)
        assert comparable(service.snapshot()) == comparable(exported)

    def test_malformed_import_leaves_state_untouched(self, service, tmp_path):
        service.add_project("Launch")
        task = service.add_task("Draft outline", "Launch")
        service.start_task(task.id)
        run_ticks(service, 5)
        before = comparable(service.snapshot())

        bad = tmp_path / "bad.json"
        bad.write_text('{"projects": [{"name": 1}]}', encoding="utf-8")
        with pytest.raises(FormatError):
            service.import_data(bad)

        assert comparable(service.snapshot()) == before

    def test_import_with_duplicate_ids_is_rejected(self, service, tmp_path):
        service.add_project("Launch")
        before = comparable(service.snapshot())

        duplicated = tmp_path / "duplicated.json"
        duplicated.write_text(
            '{"tasks": [{"id": 1, "title": "A"}, {"id": 1, "title": "B"}]}', encoding="utf-8")
        with pytest.raises(FormatError):
            service.import_data(duplicated)

        assert comparable(service.snapshot()) == before

    def test_export_failure_returns_none(self, service, tmp_path):
        failures = []
        service.storage_failed.connect(failures.append)
        blocker = tmp_path / "blocker"
        blocker.write_text("file")
        assert service.export_data(blocker / "exports") is None
        assert len(failures) == 1

    def test_reset_keeps_dark_mode(self, service):
        service.set_dark_mode(True)
        service.add_project("Launch")
        service.toggle_pomodoro()
        service.reset_data()
        snapshot = service.snapshot()
        assert snapshot.projects == []
        assert snapshot.pomodoro_mode is False
        assert snapshot.is_dark_mode is True
