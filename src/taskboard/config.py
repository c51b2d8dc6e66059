# src/taskboard/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- No secrets required at import time.

Environment variables (prefix TASKBOARD_):
- APP_NAME                  display name (default: taskboard)
- LOG_LEVEL                 console log level (default: INFO)
- BASE_URL                  public base URL for share links (fallback: PUBLIC_URL)
- DATA_DIR                  local data directory (default: .local/taskboard)
- DB_PATH                   document store SQLite path (default: <data_dir>/documents.sqlite3)
- DATE_FORMAT               strftime format for task dates (default: %d/%m/%Y)
- STATS_REVALIDATE_SECONDS  home stats cache lifetime (default: 120)
- ENFORCE_OWNERSHIP         store-side owner/author checks (default: true)
- CONSOLE_ENABLED           run the console front-end (default: true)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "TASKBOARD"

load_dotenv(override=False)


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _first_env(*names: str, default: str | None = None) -> str | None:
    for n in names:
        v = os.getenv(n)
        if v is not None and v.strip() != "":
            return v
    return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Public URLs ----
    base_url: str

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    db_path: Path

    # ---- Presentation ----
    date_format: str
    stats_revalidate_seconds: int

    # ---- Access control ----
    enforce_ownership: bool

    # ---- Connector flags ----
    console_enabled: bool

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "taskboard") or "taskboard"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        base_url = (
            _first_env(_k("BASE_URL"), "PUBLIC_URL", default="http://localhost:3000")
            or "http://localhost:3000"
        ).strip()

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/taskboard"))
        db_path = _env_path(_k("DB_PATH"), data_dir / "documents.sqlite3")

        date_format = _env(_k("DATE_FORMAT"), "%d/%m/%Y") or "%d/%m/%Y"
        stats_revalidate_seconds = max(0, _env_int(_k("STATS_REVALIDATE_SECONDS"), 120))

        enforce_ownership = _env_bool(_k("ENFORCE_OWNERSHIP"), True)
        console_enabled = _env_bool(_k("CONSOLE_ENABLED"), True)

        return Settings(
            app_name=app_name,
            log_level=log_level,
            base_url=base_url,
            data_dir=data_dir,
            db_path=db_path,
            date_format=date_format,
            stats_revalidate_seconds=stats_revalidate_seconds,
            enforce_ownership=enforce_ownership,
            console_enabled=console_enabled,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
