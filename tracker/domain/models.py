"""
Domain Models using Pydantic for validation.

Architecture Decision: Why Pydantic?
The whole tracked state round-trips through a single JSON snapshot. Pydantic
validates that snapshot on load/import and gives us camelCase aliases for the
wire format while the Python side keeps snake_case attribute names.
"""

from datetime import datetime
from enum import Enum
from typing import Optional, List, Dict
from pydantic import BaseModel, Field, ConfigDict, NonNegativeInt, field_validator, model_validator


class ProjectStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"


class TaskStatus(str, Enum):
    TODO = "todo"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class PomodoroPhase(str, Enum):
    WORK = "work"
    SHORT_BREAK = "shortBreak"
    LONG_BREAK = "longBreak"


# Pomodoro phase lengths in seconds
PHASE_DURATIONS: Dict[PomodoroPhase, int] = {
    PomodoroPhase.WORK: 25 * 60,
    PomodoroPhase.SHORT_BREAK: 5 * 60,
    PomodoroPhase.LONG_BREAK: 15 * 60,
}

# Every 4th completed work phase is followed by a long break
LONG_BREAK_INTERVAL = 4

PROJECT_COLORS = ["#3B82F6", "#10B981", "#F59E0B", "#EF4444", "#8B5CF6", "#EC4899"]

# Bucket used for tasks created while no project exists
GENERAL_PROJECT = "General"


class WireModel(BaseModel):
    """Base for models that are persisted with camelCase keys."""
    model_config = ConfigDict(populate_by_name=True)


class Project(WireModel):
    """
    A named group of tasks.

    `tasks` and `completed` are caches of the ledger's task collection.
    The ledger recomputes them on every read; loaded values are ignored.
    """
    id: int
    name: str = Field(..., min_length=1)
    color: str = PROJECT_COLORS[0]
    status: ProjectStatus = ProjectStatus.ACTIVE
    tasks: int = Field(default=0, ge=0)
    completed: int = Field(default=0, ge=0)
    created_at: datetime = Field(default_factory=datetime.now, alias="createdAt")


class Task(WireModel):
    """
    A unit of work belonging to a project.

    Ownership is tracked by `project_id`; `project` is the display name kept
    for snapshot compatibility and for the synthetic "General" bucket.
    """
    id: int
    title: str = Field(..., min_length=1)
    project: str = GENERAL_PROJECT
    project_id: Optional[int] = Field(default=None, alias="projectId")
    priority: Priority = Priority.MEDIUM
    status: TaskStatus = TaskStatus.TODO
    created_at: datetime = Field(default_factory=datetime.now, alias="createdAt")


class Stats(WireModel):
    """Aggregate counters. Always derived from the ledger collections."""
    total_projects: int = Field(default=0, ge=0, alias="totalProjects")
    active_tasks: int = Field(default=0, ge=0, alias="activeTasks")
    completed_tasks: int = Field(default=0, ge=0, alias="completedTasks")
    total_time_today: int = Field(default=0, ge=0, alias="totalTimeToday")
    current_session: Optional[str] = Field(default=None, alias="currentSession")


class DeletePreview(BaseModel):
    """What `delete_project` would remove; shown before confirming."""
    project_id: int
    project_name: str
    active_tasks: int = 0
    completed_tasks: int = 0

    @property
    def total_tasks(self) -> int:
        return self.active_tasks + self.completed_tasks


class UserPreferences(BaseModel):
    """
    User configuration and preferences.

    This allows users to customize behavior without touching code.
    """
    model_config = ConfigDict(from_attributes=True)

    # UI settings
    dark_mode: bool = Field(default=False, description="Start in dark mode on first run")
    sound_enabled: bool = Field(default=True, description="Play a cue when a Pomodoro phase ends")

    # Task defaults
    default_priority: str = Field(
        default="random",
        description="Priority for new tasks: 'random', 'low', 'medium' or 'high'"
    )

    # Export settings
    export_directory: Optional[str] = Field(default=None, description="Directory for exported backups")

    @field_validator("default_priority")
    @classmethod
    def check_priority(cls, value: str) -> str:
        allowed = ["random"] + [p.value for p in Priority]
        if value not in allowed:
            raise ValueError(f"default_priority must be one of {allowed}")
        return value


class Snapshot(WireModel):
    """
    The complete persisted state.

    Every field has a default so that partial documents load; `version` and
    `last_updated` are stamped by the codec on write.
    """
    stats: Stats = Field(default_factory=Stats)
    projects: List[Project] = Field(default_factory=list)
    tasks: List[Task] = Field(default_factory=list)
    is_timer_running: bool = Field(default=False, alias="isTimerRunning")
    timer_seconds: int = Field(default=0, ge=0, alias="timerSeconds")
    is_dark_mode: bool = Field(default=False, alias="isDarkMode")
    pomodoro_mode: bool = Field(default=False, alias="pomodoroMode")
    pomodoro_phase: PomodoroPhase = Field(default=PomodoroPhase.WORK, alias="pomodoroPhase")
    pomodoro_count: int = Field(default=0, ge=0, lt=LONG_BREAK_INTERVAL, alias="pomodoroCount")
    active_task_id: Optional[int] = Field(default=None, alias="activeTaskId")
    task_timers: Dict[int, NonNegativeInt] = Field(default_factory=dict, alias="taskTimers")
    last_updated: Optional[datetime] = Field(default=None, alias="lastUpdated")
    version: str = "1.0.0"

    @model_validator(mode="after")
    def check_unique_ids(self):
        for kind, items in (("project", self.projects), ("task", self.tasks)):
            seen, duplicates = set(), set()
            for item in items:
                if item.id in seen:
                    duplicates.add(item.id)
                seen.add(item.id)
            if duplicates:
                raise ValueError(f"Duplicate {kind} ids: {sorted(duplicates)}")
        return self

    @model_validator(mode="after")
    def drop_dangling_active_task(self):
        # activeTaskId is a weak reference into the task list
        if self.active_task_id is not None and not any(t.id == self.active_task_id for t in self.tasks):
            self.active_task_id = None
        return self
