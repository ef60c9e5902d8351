from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_list(name: str, default: list[str]) -> list[str]:
    raw = os.getenv(name)
    if raw is None:
        return default
    return [part.strip() for part in raw.split(",") if part.strip()]


@dataclass(frozen=True)
class Settings:
    # Storage
    db_path: Path
    persist_to_disk: bool

    # Logging
    log_level: str

    # HTTP
    cors_allow_origins: list[str]


def get_settings() -> Settings:
    # Relative paths resolve against the working directory, like the node server did.
    raw_path = os.getenv("KAZRPG_DB_PATH", "").strip()
    db_path = Path(raw_path) if raw_path else Path("data") / "db.json"
    if not db_path.is_absolute():
        db_path = Path.cwd() / db_path

    persist_to_disk = _env_bool("PERSIST_TO_DISK", True)

    log_level = os.getenv("LOG_LEVEL", "INFO").strip().upper() or "INFO"

    cors_allow_origins = _env_list("CORS_ALLOW_ORIGINS", ["*"])

    return Settings(
        db_path=db_path,
        persist_to_disk=persist_to_disk,
        log_level=log_level,
        cors_allow_origins=cors_allow_origins,
    )
