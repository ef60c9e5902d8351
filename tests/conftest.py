from __future__ import annotations

from pathlib import Path
import sys


import pytest


# Ensure the repository root (parent of ./tests) is importable during pytest collection.
# This avoids ModuleNotFoundError for imports like `import persistence...` under pytest import modes
# that don't automatically prepend the cwd/rootdir to sys.path.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "data" / "db.json"


@pytest.fixture
def store(db_path: Path):
    from persistence.disk_store import DurableStore

    return DurableStore(db_path)


@pytest.fixture
def sandbox_cwd(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    """
    Run from a temp working directory with a fresh process-wide store, so tests
    never touch a real ./data/db.json.
    """
    from persistence.repositories import set_default_store

    monkeypatch.chdir(tmp_path)
    for name in ("KAZRPG_DB_PATH", "PERSIST_TO_DISK", "LOG_LEVEL", "CORS_ALLOW_ORIGINS"):
        monkeypatch.delenv(name, raising=False)
    set_default_store(None)
    yield tmp_path
    set_default_store(None)
