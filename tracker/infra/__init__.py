"""Infrastructure layer - Persistence, configuration and side effects"""

from .repository import SnapshotRepository
from .notifier import Notifier, create_notifier

__all__ = ["SnapshotRepository", "Notifier", "create_notifier"]
