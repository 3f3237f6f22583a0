"""
Test configuration - puts the repo root on sys.path and provides a
throwaway data root per test.

Every fixture builds its stores on tmp_path, so no test touches
~/.daybook. DAYBOOK_HOME is redirected too, for code paths that fall back
to paths.data_dir().
"""

import sys
from pathlib import Path

import pytest

REPO_ROOT = Path(__file__).parent.parent
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from daybook.timeline import BlockManager, CurrentBlockStore, DayStore  # noqa: E402


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    monkeypatch.setenv("DAYBOOK_HOME", str(tmp_path / "home"))


@pytest.fixture
def data_root(tmp_path) -> Path:
    root = tmp_path / "data"
    root.mkdir()
    return root


@pytest.fixture
def store(data_root) -> DayStore:
    return DayStore(data_root)


@pytest.fixture
def current_store(data_root) -> CurrentBlockStore:
    return CurrentBlockStore(data_root)


@pytest.fixture
def manager(store, current_store) -> BlockManager:
    return BlockManager(store, current_store)
