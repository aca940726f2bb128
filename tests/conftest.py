"""
Pytest configuration and fixtures.
"""

import random
import sys
from pathlib import Path
import pytest
from PySide6.QtCore import QCoreApplication

# Add project root
sys.path.insert(0, str(Path(__file__).parent.parent))

from tracker.domain.models import PomodoroPhase
from tracker.infra.notifier import Notifier
from tracker.infra.repository import SnapshotRepository
from tracker.services.clock_driver import ClockDriver
from tracker.services.ledger_service import LedgerService
from tracker.services.tracker_service import TrackerService


class RecordingNotifier(Notifier):
    """Remembers every cue instead of producing one"""

    def __init__(self):
        self.calls = []

    def play(self, finished: PomodoroPhase, next_phase: PomodoroPhase):
        self.calls.append((finished, next_phase))


@pytest.fixture(scope="session", autouse=True)
def qapp():
    """QTimer needs a core application instance"""
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def ledger(rng):
    return LedgerService(rng=rng)


@pytest.fixture
def repository(tmp_path):
    return SnapshotRepository(tmp_path / "data" / "productivity-tracker-data.json")


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def clock():
    driver = ClockDriver()
    yield driver
    driver.stop()


@pytest.fixture
def service(repository, clock, notifier, ledger):
    """A tracker session on a temporary data file with a private clock"""
    tracker = TrackerService(repository, clock=clock, notifier=notifier, ledger=ledger)
    tracker.load()
    yield tracker
    clock.stop()


def run_ticks(tracker: TrackerService, count: int):
    """Deliver `count` clock ticks"""
    for _ in range(count):
        tracker.on_tick()
