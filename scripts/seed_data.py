"""
Data Seeder for Productivity Tracker.
Populates the snapshot with realistic projects, tasks and tracked time for
testing and demo purposes.
"""

import random
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from PySide6.QtCore import QCoreApplication

from tracker.infra.config import get_settings
from tracker.infra.repository import SnapshotRepository
from tracker.services.tracker_service import TrackerService


def reset_snapshot(repository: SnapshotRepository):
    """Delete the existing snapshot to ensure a fresh seed"""
    if repository.exists():
        print(f"Removing existing data at: {repository.data_path}")
        repository.clear()
        print("Data removed.")
    else:
        print(f"No existing data found at: {repository.data_path}")


def seed():
    app = QCoreApplication.instance() or QCoreApplication(sys.argv[:1])
    settings = get_settings()
    repository = SnapshotRepository(settings.get_data_path())
    reset_snapshot(repository)
    print("Starting data seeding...")

    service = TrackerService(repository, preferences=settings.preferences)
    service.load()

    # 1. Create Projects and Tasks
    plan = {
        "Website Relaunch": ["Wireframes", "Landing page copy", "Deploy pipeline"],
        "Mobile App": ["Login screen", "Push notifications"],
        "Admin": ["Expense report", "Quarterly planning"],
    }
    task_ids = []
    for project_name, titles in plan.items():
        print(f"Creating project: {project_name}")
        service.add_project(project_name)
        for title in titles:
            task = service.add_task(title, project_name)
            task_ids.append(task.id)

    # 2. Simulate tracked time: each task gets between 10 and 90 minutes
    for task_id in task_ids:
        service.start_task(task_id)
        for _ in range(random.randint(10, 90) * 60):
            service.on_tick()
        service.stop_task(task_id)

    # 3. Complete roughly a third of the tasks
    for task_id in random.sample(task_ids, k=len(task_ids) // 3):
        service.complete_task(task_id)

    service.close()
    stats = service.snapshot().stats
    print(f"Seeding complete: {stats.total_projects} projects, "
          f"{stats.active_tasks} active and {stats.completed_tasks} completed tasks.")
    app.quit()


if __name__ == "__main__":
    seed()
