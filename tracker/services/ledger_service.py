"""
Ledger Service - Project and task bookkeeping.

Architecture Decision: Derived counters
Project task counts and the global stats are never incremented or decremented
by call sites. They are computed from the task collection whenever they are
read, so they cannot drift from it.

Empty or unknown input is ignored (methods return None/False) rather than
raising; callers validate before asking.
"""

import logging
import random
import time
from datetime import datetime
from typing import Dict, List, Optional

from tracker.domain.models import (
    Project, Task, Stats, DeletePreview,
    ProjectStatus, TaskStatus, Priority,
    PROJECT_COLORS, GENERAL_PROJECT,
)

logger = logging.getLogger(__name__)

RANDOM_PRIORITY = "random"


class LedgerService:
    """
    Holds the project and task collections and all mutations on them.
    """

    def __init__(self, default_priority: str = RANDOM_PRIORITY, rng: Optional[random.Random] = None):
        """
        Args:
            default_priority: 'random' or a Priority value used for new tasks
            rng: Random source for the 'random' policy (injectable for tests)
        """
        self.default_priority = default_priority
        self.rng = rng or random.Random()
        self._projects: List[Project] = []
        self._tasks: List[Task] = []
        self._last_id: int = 0

    def _next_id(self) -> int:
        """Millisecond timestamp, bumped if needed to stay unique and increasing"""
        candidate = int(time.time() * 1000)
        if candidate <= self._last_id:
            candidate = self._last_id + 1
        self._last_id = candidate
        return candidate

    def _pick_priority(self) -> Priority:
        if self.default_priority == RANDOM_PRIORITY:
            return self.rng.choice(list(Priority))
        return Priority(self.default_priority)

    # ---- Reads ----------------------------------------------------------

    def _with_counts(self, project: Project) -> Project:
        owned = self.tasks_for_project(project.id)
        completed = sum(1 for t in owned if t.status == TaskStatus.COMPLETED)
        return project.model_copy(update={"tasks": len(owned), "completed": completed})

    def projects(self) -> List[Project]:
        """All projects with task counts computed from the task list"""
        return [self._with_counts(p) for p in self._projects]

    def tasks(self) -> List[Task]:
        """All tasks, with display names resolved from their project"""
        return [t.model_copy(update={"project": self.project_name(t)}) for t in self._tasks]

    def find_project(self, project_id: int) -> Optional[Project]:
        for project in self._projects:
            if project.id == project_id:
                return self._with_counts(project)
        return None

    def find_project_by_name(self, name: str) -> Optional[Project]:
        name = name.strip()
        for project in self._projects:
            if project.name == name:
                return self._with_counts(project)
        return None

    def find_task(self, task_id: int) -> Optional[Task]:
        for task in self._tasks:
            if task.id == task_id:
                return task
        return None

    def tasks_for_project(self, project_id: int) -> List[Task]:
        return [t for t in self._tasks if t.project_id == project_id]

    def project_name(self, task: Task) -> str:
        """Current name of the task's project, falling back to the stored name"""
        if task.project_id is not None:
            for project in self._projects:
                if project.id == task.project_id:
                    return project.name
        return task.project

    def stats(self) -> Stats:
        completed = sum(1 for t in self._tasks if t.status == TaskStatus.COMPLETED)
        return Stats(
            total_projects=len(self._projects),
            active_tasks=len(self._tasks) - completed,
            completed_tasks=completed,
        )

    # ---- Projects -------------------------------------------------------

    def add_project(self, name: str) -> Optional[Project]:
        """Create a project. Blank names are ignored."""
        name = (name or "").strip()
        if not name:
            return None

        project = Project(
            id=self._next_id(),
            name=name,
            color=PROJECT_COLORS[len(self._projects) % len(PROJECT_COLORS)],
            status=ProjectStatus.ACTIVE,
            created_at=datetime.now(),
        )
        self._projects.append(project)
        logger.info(f"Project created: {project.name} ({project.id})")
        return self._with_counts(project)

    def preview_delete_project(self, project_id: int) -> Optional[DeletePreview]:
        """Counts of what `delete_project` would remove, for confirmation"""
        project = self.find_project(project_id)
        if project is None:
            return None
        return DeletePreview(
            project_id=project.id,
            project_name=project.name,
            active_tasks=project.tasks - project.completed,
            completed_tasks=project.completed,
        )

    def delete_project(self, project_id: int) -> Optional[List[int]]:
        """
        Delete a project and every task that belongs to it.

        Returns:
            Ids of the deleted tasks, or None if the project does not exist
        """
        if self.find_project(project_id) is None:
            return None

        removed = [t.id for t in self._tasks if t.project_id == project_id]
        self._tasks = [t for t in self._tasks if t.project_id != project_id]
        self._projects = [p for p in self._projects if p.id != project_id]
        logger.info(f"Project {project_id} deleted with {len(removed)} tasks")
        return removed

    def toggle_project_completion(self, project_id: int) -> Optional[Project]:
        for project in self._projects:
            if project.id == project_id:
                project.status = (
                    ProjectStatus.ACTIVE if project.status == ProjectStatus.COMPLETED
                    else ProjectStatus.COMPLETED
                )
                return self._with_counts(project)
        return None

    def rename_project(self, project_id: int, name: str) -> Optional[Project]:
        """Rename a project. Its tasks follow because they hold the id."""
        name = (name or "").strip()
        if not name:
            return None
        for project in self._projects:
            if project.id == project_id:
                project.name = name
                return self._with_counts(project)
        return None

    # ---- Tasks ----------------------------------------------------------

    def add_task(self, title: str, project_name: str = "") -> Optional[Task]:
        """
        Create a task.

        The target is the named project, else the first project, else the
        "General" bucket. A name that matches no project is kept as a
        detached bucket name. Blank titles are ignored.
        """
        title = (title or "").strip()
        if not title:
            return None

        project_name = (project_name or "").strip()
        target: Optional[Project] = None
        if project_name:
            target = self.find_project_by_name(project_name)
        elif self._projects:
            target = self._projects[0]

        task = Task(
            id=self._next_id(),
            title=title,
            project=target.name if target else (project_name or GENERAL_PROJECT),
            project_id=target.id if target else None,
            priority=self._pick_priority(),
            status=TaskStatus.TODO,
            created_at=datetime.now(),
        )
        self._tasks.append(task)
        return task

    def mark_in_progress(self, task_id: int) -> Optional[Task]:
        """Move a todo task to in_progress (when its timer starts)"""
        task = self.find_task(task_id)
        if task is None:
            return None
        if task.status == TaskStatus.TODO:
            task.status = TaskStatus.IN_PROGRESS
        return task

    def complete_task(self, task_id: int) -> Optional[Task]:
        """Mark a task completed. Completing twice changes nothing."""
        task = self.find_task(task_id)
        if task is None:
            return None
        task.status = TaskStatus.COMPLETED
        return task

    def delete_task(self, task_id: int) -> Optional[Task]:
        task = self.find_task(task_id)
        if task is None:
            return None
        self._tasks = [t for t in self._tasks if t.id != task_id]
        return task

    # ---- Bulk -----------------------------------------------------------

    def reset(self):
        self._projects = []
        self._tasks = []

    def restore(self, projects: List[Project], tasks: List[Task]):
        """
        Replace both collections, e.g. from a loaded snapshot.

        Tasks written before projects were referenced by id carry no
        project id at all and are re-attached by their stored project name,
        as are tasks pointing at a project that no longer exists. An explicit
        null id is a detached or "General" task and stays that way.
        """
        self._projects = [p.model_copy() for p in projects]
        by_name: Dict[str, int] = {}
        for project in self._projects:
            by_name.setdefault(project.name, project.id)
        known_ids = {p.id for p in self._projects}

        self._tasks = []
        for task in tasks:
            legacy = "project_id" not in task.model_fields_set
            dangling = task.project_id is not None and task.project_id not in known_ids
            task = task.model_copy()
            if legacy or dangling:
                task.project_id = by_name.get(task.project)
            self._tasks.append(task)

        ids = [p.id for p in self._projects] + [t.id for t in self._tasks]
        self._last_id = max(ids, default=0)
