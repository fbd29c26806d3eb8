"""
Settings for the Task Tracker API

All values come from environment variables (prefix TASKTRACKER_), with an
optional .env file loaded first. Nothing here is required at import time;
every variable has a development default.
"""
import os
from dataclasses import dataclass
from functools import lru_cache
from typing import List

from dotenv import load_dotenv

ENV_PREFIX = "TASKTRACKER"

load_dotenv(override=False)


def _k(suffix: str) -> str:
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None or v.strip() == "" else v.strip()


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_list(name: str, default: List[str]) -> List[str]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return list(default)
    return [p.strip() for p in raw.replace(",", " ").split() if p.strip()]


@dataclass(frozen=True)
class Settings:
    app_name: str
    log_level: str

    database_url: str

    secret_key: str
    jwt_algorithm: str
    access_token_expire_minutes: int

    cors_origins: List[str]

    host: str
    port: int

    @staticmethod
    def from_env() -> "Settings":
        return Settings(
            app_name=_env(_k("APP_NAME"), "Task Tracker API"),
            log_level=_env(_k("LOG_LEVEL"), "INFO").upper(),
            database_url=_env(_k("DATABASE_URL"), "sqlite:///./tasktracker.db"),
            secret_key=_env(_k("SECRET_KEY"), "dev-secret-key-change-me"),
            jwt_algorithm=_env(_k("JWT_ALGORITHM"), "HS256"),
            access_token_expire_minutes=_env_int(_k("ACCESS_TOKEN_EXPIRE_MINUTES"), 60 * 24),
            cors_origins=_env_list(_k("CORS_ORIGINS"), ["http://localhost:5173"]),
            host=_env(_k("HOST"), "0.0.0.0"),
            port=_env_int(_k("PORT"), 8000),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_env()
