# tests/test_config.py

import logging

from backend.config import Settings
from backend.logging_setup import setup_logging


def test_defaults_when_environment_is_empty(monkeypatch) -> None:
    for name in ("DATABASE_URL", "SECRET_KEY", "ACCESS_TOKEN_EXPIRE_MINUTES", "CORS_ORIGINS", "PORT"):
        monkeypatch.delenv(f"TASKTRACKER_{name}", raising=False)

    s = Settings.from_env()

    assert s.database_url == "sqlite:///./tasktracker.db"
    assert s.jwt_algorithm == "HS256"
    assert s.access_token_expire_minutes == 1440
    assert s.cors_origins == ["http://localhost:5173"]
    assert s.port == 8000


def test_environment_overrides(monkeypatch) -> None:
    monkeypatch.setenv("TASKTRACKER_DATABASE_URL", "sqlite://")
    monkeypatch.setenv("TASKTRACKER_SECRET_KEY", "s3cret")
    monkeypatch.setenv("TASKTRACKER_ACCESS_TOKEN_EXPIRE_MINUTES", "15")
    monkeypatch.setenv("TASKTRACKER_CORS_ORIGINS", "http://a.example, http://b.example")
    monkeypatch.setenv("TASKTRACKER_LOG_LEVEL", "debug")

    s = Settings.from_env()

    assert s.database_url == "sqlite://"
    assert s.secret_key == "s3cret"
    assert s.access_token_expire_minutes == 15
    assert s.cors_origins == ["http://a.example", "http://b.example"]
    assert s.log_level == "DEBUG"


def test_malformed_integer_falls_back_to_default(monkeypatch) -> None:
    monkeypatch.setenv("TASKTRACKER_PORT", "eighty")
    assert Settings.from_env().port == 8000


def test_setup_logging_installs_a_single_handler() -> None:
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    try:
        setup_logging("warning")
        setup_logging("warning")

        assert len(root.handlers) == 1
        assert root.level == logging.WARNING
        assert logging.getLogger("sqlalchemy").level == logging.WARNING
    finally:
        for h in list(root.handlers):
            root.removeHandler(h)
        for h in saved_handlers:
            root.addHandler(h)
        root.setLevel(saved_level)
