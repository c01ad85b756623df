import os
import pathlib
import sys

import pytest

# Ensure project root is in sys.path
repo_root = pathlib.Path(__file__).parent.parent
sys.path.insert(0, str(repo_root))

# Run Qt headless unless a platform is chosen explicitly
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

try:
    from PySide6.QtWidgets import QApplication
except ImportError:
    QApplication = None


@pytest.fixture(scope="session")
def qapp():
    """
    Ensure QApplication is instantiated only once.
    """
    if QApplication is None:
        yield None
        return

    app = QApplication.instance()
    if app is None:
        app = QApplication([])
    yield app


@pytest.fixture
def store(qtbot):
    """
    Provides a fresh in-memory grant store for each test.
    """
    from src.services.grant_store import InMemoryGrantStore

    return InMemoryGrantStore()


@pytest.fixture
def sample_grants():
    """
    Three grants on board "b1": two editable by "alice", one read-only.
    """
    from src.core.dates import utc_date
    from src.core.grants import Grant

    return [
        Grant(
            id="A",
            name="Alpha",
            start_date=utc_date(2026, 1, 1),
            end_date=utc_date(2026, 3, 1),
            progress_date=utc_date(2026, 1, 1),
            assigned_users=frozenset({"alice"}),
            board_id="b1",
        ),
        Grant(
            id="B",
            name="Beta",
            start_date=utc_date(2026, 2, 1),
            end_date=utc_date(2026, 6, 1),
            progress_date=utc_date(2026, 3, 15),
            assigned_users=frozenset({"alice", "bob"}),
            board_id="b1",
        ),
        Grant(
            id="C",
            name="Gamma",
            start_date=utc_date(2026, 4, 1),
            end_date=utc_date(2026, 9, 30),
            progress_date=utc_date(2026, 5, 1),
            assigned_users=frozenset({"carol"}),
            board_id="b1",
        ),
    ]


class MockQSettings:
    """
    In-memory mock for QSettings to prevent tests from overwriting real config.
    """

    _storage = {}  # Class-level storage to persist across instances if needed

    def __init__(self, *args, **kwargs):
        self.organization = args[0] if len(args) > 0 else "MockOrg"
        self.application = args[1] if len(args) > 1 else "MockApp"

    def setValue(self, key, value):
        full_key = f"{self.organization}/{self.application}/{key}"
        self._storage[full_key] = value

    def value(self, key, default=None, type=None):
        full_key = f"{self.organization}/{self.application}/{key}"
        val = self._storage.get(full_key, default)
        if type is not None and val is not None:
            try:
                return type(val)
            except (ValueError, TypeError):
                return default
        return val

    def remove(self, key):
        full_key = f"{self.organization}/{self.application}/{key}"
        self._storage.pop(full_key, None)

    def contains(self, key):
        full_key = f"{self.organization}/{self.application}/{key}"
        return full_key in self._storage

    def clear(self):
        prefix = f"{self.organization}/{self.application}/"
        for key in [k for k in self._storage if k.startswith(prefix)]:
            del self._storage[key]

    def sync(self):
        pass


@pytest.fixture
def mock_settings(monkeypatch):
    """
    Replaces QSettings where the app imported it, with empty storage.
    """
    MockQSettings._storage = {}
    monkeypatch.setattr("src.app.main_window.QSettings", MockQSettings)
    yield MockQSettings
    MockQSettings._storage = {}
