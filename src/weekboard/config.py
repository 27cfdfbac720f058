# src/weekboard/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app (normal "settings layer").
- Nothing required at import time; every value has a local default.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "WEEKBOARD"

DEFAULT_TYPE_SUGGESTIONS = ["Work", "Personal", "Errand", "Meeting", "Study"]

load_dotenv(override=False)


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_list(name: str, default: list[str]) -> list[str]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return list(default)
    return [p.strip() for p in raw.split(",") if p.strip()]


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


def parse_visible_days(raw: str) -> frozenset[int] | None:
    """
    "all" -> None (every day shown), "weekdays" -> Mon..Fri,
    otherwise a comma list of weekday numbers, Monday = 0 (e.g. "0,1,2,3,4,5").
    """
    value = raw.strip().lower()
    if value in ("", "all"):
        return None
    if value in ("weekdays", "workdays"):
        return frozenset(range(5))
    try:
        days = frozenset(int(p) for p in value.split(",") if p.strip())
    except ValueError:
        raise ValueError(f"invalid visible days: {raw!r}") from None
    if not days or any(d < 0 or d > 6 for d in days):
        raise ValueError(f"invalid visible days: {raw!r}")
    return days


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str
    # Console level for the store and the snapshot watcher (they log on every tick).
    background_log_level: str

    # ---- Board ----
    owner_id: str
    visible_weekdays: frozenset[int] | None
    type_suggestions: list[str]

    # ---- Snapshot watcher ----
    watch_enabled: bool
    watch_interval_seconds: float

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    tasks_db_path: Path

    @staticmethod
    def from_env() -> Settings:
        app_name = _env(_k("APP_NAME"), "weekboard") or "weekboard"
        log_level = _env(_k("LOG_LEVEL"), "INFO")
        background_log_level = _env(_k("BACKGROUND_LOG_LEVEL"), "WARNING")

        owner_id = (_env(_k("OWNER_ID"), "") or _env("USER", "") or "local").strip()
        visible_weekdays = parse_visible_days(_env(_k("VISIBLE_DAYS"), "all"))
        type_suggestions = _env_list(_k("TYPE_SUGGESTIONS"), DEFAULT_TYPE_SUGGESTIONS)

        watch_enabled = _env_bool(_k("WATCH_ENABLED"), True)
        watch_interval_seconds = _env_float(_k("WATCH_INTERVAL_SECONDS"), 2.0)

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/weekboard"))
        tasks_db_path = _env_path(_k("TASKS_DB_PATH"), data_dir / "tasks.sqlite3")

        return Settings(
            app_name=app_name,
            log_level=log_level,
            background_log_level=background_log_level,
            owner_id=owner_id,
            visible_weekdays=visible_weekdays,
            type_suggestions=type_suggestions,
            watch_enabled=watch_enabled,
            watch_interval_seconds=watch_interval_seconds,
            data_dir=data_dir,
            tasks_db_path=tasks_db_path,
        )


_SETTINGS: Settings | None = None


def get_settings() -> Settings:
    global _SETTINGS
    if _SETTINGS is None:
        _SETTINGS = Settings.from_env()
    return _SETTINGS
