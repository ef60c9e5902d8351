from __future__ import annotations

from persistence.locks import PathLockRegistry
from settings import get_settings

def test_defaults(sandbox_cwd):
    s = get_settings()

    assert s.db_path == sandbox_cwd / "data" / "db.json"
    assert s.persist_to_disk is True
    assert s.log_level == "INFO"
    assert s.cors_allow_origins == ["*"]

def test_env_overrides(sandbox_cwd, monkeypatch, tmp_path):
    absolute = tmp_path / "elsewhere" / "kaz.json"
    monkeypatch.setenv("KAZRPG_DB_PATH", str(absolute))
    monkeypatch.setenv("PERSIST_TO_DISK", "off")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.setenv("CORS_ALLOW_ORIGINS", "http://localhost:3000, https://kazrpg.example")

    s = get_settings()

    assert s.db_path == absolute
    assert s.persist_to_disk is False
    assert s.log_level == "DEBUG"
    assert s.cors_allow_origins == ["http://localhost:3000", "https://kazrpg.example"]

def test_path_locks_are_shared_per_resolved_path(tmp_path):
    registry = PathLockRegistry()

    a = registry.lock_for(tmp_path / "data" / "db.json")
    b = registry.lock_for(tmp_path / "data" / ".." / "data" / "db.json")
    c = registry.lock_for(tmp_path / "other.json")

    assert a is b
    assert a is not c
    # re-entrant
    with a:
        with b:
            pass
