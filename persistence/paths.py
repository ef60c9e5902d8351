from __future__ import annotations

from pathlib import Path


def working_root() -> Path:
    # The store lives under the process working directory, not the package.
    return Path.cwd()


def data_dir() -> Path:
    return working_root() / "data"


def default_db_path() -> Path:
    return data_dir() / "db.json"


def ensure_dir(path: Path) -> Path:
    path.mkdir(parents=True, exist_ok=True)
    return path
