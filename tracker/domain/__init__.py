"""Domain layer - Pure business entities and logic"""

from .exceptions import TrackerError, StorageError, FormatError
from .models import (
    Project, Task, Stats, Snapshot, DeletePreview, UserPreferences,
    ProjectStatus, TaskStatus, Priority, PomodoroPhase,
)

__all__ = [
    "Project", "Task", "Stats", "Snapshot", "DeletePreview", "UserPreferences",
    "ProjectStatus", "TaskStatus", "Priority", "PomodoroPhase",
    "TrackerError", "StorageError", "FormatError",
]
