"""
Command-line front end.

Usage:
    python main.py status
    python main.py add-project NAME
    python main.py delete-project ID [--yes]
    python main.py toggle-project ID
    python main.py rename-project ID NAME
    python main.py add-task TITLE [--project NAME]
    python main.py complete ID
    python main.py delete-task ID
    python main.py pomodoro
    python main.py dark-mode
    python main.py export [--dir DIR]
    python main.py import FILE
    python main.py reset [--yes]
    python main.py run [--task ID] [--pomodoro]
"""

from __future__ import annotations

import argparse
import signal
import sys
from typing import List, Optional

from PySide6.QtCore import QCoreApplication

from tracker.domain.exceptions import FormatError
from tracker.domain.models import Task
from tracker.infra.config import Settings, get_settings
from tracker.infra.repository import SnapshotRepository
from tracker.logger import setup_logger
from tracker.services.pomodoro_service import PHASE_LABELS
from tracker.services.stopwatch_service import format_time, format_task_time
from tracker.services.tracker_service import TrackerService


def build_service(settings: Settings) -> TrackerService:
    """Create a tracker session on the configured data file and load it"""
    repository = SnapshotRepository(settings.get_data_path())
    service = TrackerService(repository, preferences=settings.preferences)
    service.load()
    return service


def confirm(prompt: str) -> bool:
    answer = input(f"{prompt} [y/N] ")
    return answer.strip().lower() in ("y", "yes")


def format_task_line(service: TrackerService, task: Task) -> str:
    marker = "*" if service.stopwatch.active_task_id == task.id else " "
    return (
        f"{marker} [{task.id}] {task.status.value:<11} {task.priority.value:<6} "
        f"{task.title} ({task.project}) {format_task_time(service.task_time(task.id))}"
    )


def cmd_status(service: TrackerService) -> int:
    """Print stats, timer state, projects and tasks"""
    snapshot = service.snapshot()
    stats = snapshot.stats
    print(f"Projects: {stats.total_projects}  Active tasks: {stats.active_tasks}  "
          f"Completed tasks: {stats.completed_tasks}")

    state = "running" if snapshot.is_timer_running else "stopped"
    if snapshot.pomodoro_mode:
        print(f"Pomodoro: {PHASE_LABELS[snapshot.pomodoro_phase]} - Session {service.pomodoro.session_number()} "
              f"{format_time(snapshot.timer_seconds)} ({service.progress():.0%}) [{state}]")
    else:
        print(f"Timer: {format_time(snapshot.timer_seconds)} [{state}]")

    if snapshot.projects:
        print("\nProjects:")
        for project in snapshot.projects:
            print(f"  [{project.id}] {project.name} {project.color} {project.status.value} "
                  f"{project.completed}/{project.tasks}")
    if snapshot.tasks:
        print("\nTasks:")
        for task in snapshot.tasks:
            print(f"  {format_task_line(service, task)}")
    return 0


def cmd_add_project(service: TrackerService, name: str) -> int:
    project = service.add_project(name)
    if project is None:
        print("Error: project name is required.", file=sys.stderr)
        return 1
    print(f"Created project [{project.id}] {project.name}")
    return 0


def cmd_delete_project(service: TrackerService, project_id: int, assume_yes: bool) -> int:
    preview = service.preview_delete_project(project_id)
    if preview is None:
        print(f"Error: project {project_id} not found.", file=sys.stderr)
        return 1
    if not assume_yes:
        prompt = (f"Delete project '{preview.project_name}' and its {preview.total_tasks} task(s) "
                  f"({preview.active_tasks} active, {preview.completed_tasks} completed)?")
        if not confirm(prompt):
            print("Cancelled.")
            return 0
    removed = service.delete_project(project_id)
    print(f"Deleted project {preview.project_name} and {len(removed)} task(s)")
    return 0


def cmd_toggle_project(service: TrackerService, project_id: int) -> int:
    project = service.toggle_project_completion(project_id)
    if project is None:
        print(f"Error: project {project_id} not found.", file=sys.stderr)
        return 1
    print(f"Project {project.name} is now {project.status.value}")
    return 0


def cmd_rename_project(service: TrackerService, project_id: int, name: str) -> int:
    project = service.rename_project(project_id, name)
    if project is None:
        print(f"Error: project {project_id} not found or name empty.", file=sys.stderr)
        return 1
    print(f"Renamed project [{project.id}] to {project.name}")
    return 0


def cmd_add_task(service: TrackerService, title: str, project: str) -> int:
    task = service.add_task(title, project)
    if task is None:
        print("Error: task title is required.", file=sys.stderr)
        return 1
    print(f"Created task [{task.id}] {task.title} in {task.project} ({task.priority.value})")
    return 0


def cmd_complete(service: TrackerService, task_id: int) -> int:
    task = service.complete_task(task_id)
    if task is None:
        print(f"Error: task {task_id} not found.", file=sys.stderr)
        return 1
    print(f"Completed task [{task.id}] {task.title}")
    return 0


def cmd_delete_task(service: TrackerService, task_id: int) -> int:
    task = service.delete_task(task_id)
    if task is None:
        print(f"Error: task {task_id} not found.", file=sys.stderr)
        return 1
    print(f"Deleted task [{task.id}] {task.title}")
    return 0


def cmd_pomodoro(service: TrackerService) -> int:
    enabled = service.toggle_pomodoro()
    print(f"Pomodoro mode {'enabled' if enabled else 'disabled'}")
    return 0


def cmd_dark_mode(service: TrackerService) -> int:
    enabled = service.toggle_dark_mode()
    print(f"Dark mode {'on' if enabled else 'off'}")
    return 0


def cmd_export(service: TrackerService, settings: Settings, directory: Optional[str]) -> int:
    path = service.export_data(directory or settings.get_export_dir())
    if path is None:
        print("Error: export failed, see log for details.", file=sys.stderr)
        return 1
    print(f"Exported to {path}")
    return 0


def cmd_import(service: TrackerService, path: str) -> int:
    try:
        service.import_data(path)
    except FormatError as e:
        print(f"Failed to import data: {e}", file=sys.stderr)
        return 1
    print("Data imported successfully!")
    return 0


def cmd_reset(service: TrackerService, assume_yes: bool) -> int:
    if not assume_yes and not confirm("Reset all data? This action cannot be undone."):
        print("Cancelled.")
        return 0
    service.reset_data()
    print("All data has been reset.")
    return 0


def cmd_run(app: QCoreApplication, service: TrackerService, task_id: Optional[int], pomodoro: bool) -> int:
    """Run the timer in the foreground until interrupted or a phase ends"""
    if pomodoro and not service.pomodoro.enabled:
        service.toggle_pomodoro()
    if task_id is not None:
        if not service.start_task(task_id):
            print(f"Error: task {task_id} not found.", file=sys.stderr)
            return 1
    elif not service.stopwatch.is_running:
        service.toggle_session()

    def on_tick(text: str, seconds: int):
        sys.stdout.write(f"\r{text}   ")
        sys.stdout.flush()

    def on_phase_completed(finished: str, next_phase: str):
        print(f"\nPhase complete. Next up: {next_phase}")
        app.quit()

    service.tick.connect(on_tick)
    service.phase_completed.connect(on_phase_completed)
    service.storage_failed.connect(lambda message: print(f"\nWarning: {message}", file=sys.stderr))

    # Python handlers run between clock ticks
    signal.signal(signal.SIGINT, lambda *_: app.quit())
    app.exec()

    if service.stopwatch.is_running:
        service.toggle_session()
    print()
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="tracker", description="Track projects, tasks and time")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("status", help="Show stats, timer, projects and tasks")

    p = sub.add_parser("add-project", help="Create a project")
    p.add_argument("name")

    p = sub.add_parser("delete-project", help="Delete a project and its tasks")
    p.add_argument("id", type=int)
    p.add_argument("--yes", action="store_true", help="Do not ask for confirmation")

    p = sub.add_parser("toggle-project", help="Toggle a project between active and completed")
    p.add_argument("id", type=int)

    p = sub.add_parser("rename-project", help="Rename a project")
    p.add_argument("id", type=int)
    p.add_argument("name")

    p = sub.add_parser("add-task", help="Create a task")
    p.add_argument("title")
    p.add_argument("--project", default="", help="Project name (default: first project)")

    p = sub.add_parser("complete", help="Complete a task")
    p.add_argument("id", type=int)

    p = sub.add_parser("delete-task", help="Delete a task")
    p.add_argument("id", type=int)

    sub.add_parser("pomodoro", help="Toggle Pomodoro mode")
    sub.add_parser("dark-mode", help="Toggle dark mode")

    p = sub.add_parser("export", help="Export all data to a dated JSON file")
    p.add_argument("--dir", default=None, help="Target directory")

    p = sub.add_parser("import", help="Replace all data with an exported file")
    p.add_argument("file")

    p = sub.add_parser("reset", help="Delete all data")
    p.add_argument("--yes", action="store_true", help="Do not ask for confirmation")

    p = sub.add_parser("run", help="Run the timer in the foreground")
    p.add_argument("--task", type=int, default=None, help="Task to track")
    p.add_argument("--pomodoro", action="store_true", help="Enable Pomodoro mode first")

    return parser


def main(argv: Optional[List[str]] = None, settings: Optional[Settings] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = settings or get_settings()
    setup_logger(settings.log_level, settings.get_log_path())

    app = QCoreApplication.instance() or QCoreApplication(sys.argv[:1])
    service = build_service(settings)
    try:
        if args.command == "status":
            return cmd_status(service)
        if args.command == "add-project":
            return cmd_add_project(service, args.name)
        if args.command == "delete-project":
            return cmd_delete_project(service, args.id, args.yes)
        if args.command == "toggle-project":
            return cmd_toggle_project(service, args.id)
        if args.command == "rename-project":
            return cmd_rename_project(service, args.id, args.name)
        if args.command == "add-task":
            return cmd_add_task(service, args.title, args.project)
        if args.command == "complete":
            return cmd_complete(service, args.id)
        if args.command == "delete-task":
            return cmd_delete_task(service, args.id)
        if args.command == "pomodoro":
            return cmd_pomodoro(service)
        if args.command == "dark-mode":
            return cmd_dark_mode(service)
        if args.command == "export":
            return cmd_export(service, settings, args.dir)
        if args.command == "import":
            return cmd_import(service, args.file)
        if args.command == "reset":
            return cmd_reset(service, args.yes)
        if args.command == "run":
            return cmd_run(app, service, args.task, args.pomodoro)
        return 1
    finally:
        service.close()
