# src/threaded_exec/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole process.
- Nothing is required at import time; every knob has a default.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "THREADED_EXEC"

load_dotenv(override=False)


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_int(name: str, default: int, *, minimum: int | None = None) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    if minimum is not None and value < minimum:
        return minimum
    return value


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- Logging ----
    log_level: str
    log_dir: Path

    # ---- Runner ----
    chunk_size: int
    encoding: str
    decode_errors: str
    shell: str | None

    # ---- Scheduling ----
    max_workers: int

    @staticmethod
    def from_env() -> "Settings":
        shell = _env(_k("SHELL"), "").strip() or None

        return Settings(
            log_level=_env(_k("LOG_LEVEL"), "INFO"),
            log_dir=_env_path(_k("LOG_DIR"), Path(".local/threaded-exec")),
            chunk_size=_env_int(_k("CHUNK_SIZE"), 4096, minimum=1),
            encoding=_env(_k("ENCODING"), "utf-8"),
            decode_errors=_env(_k("DECODE_ERRORS"), "replace"),
            shell=shell,
            max_workers=_env_int(_k("MAX_WORKERS"), 8, minimum=1),
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
