"""
Environment helpers.

Developers often keep local overrides (`FLUENTREST_CONFIG_PATH`, `FLUENTREST_LOG_LEVEL`)
in a `.env` file next to their project. `load_dotenv_if_present()` loads it once,
never overriding variables already set in the process environment.
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv


def _iter_parents(start: Path) -> list[Path]:
    start = start.resolve()
    return [start, *list(start.parents)]


def find_env_file(start: Path | None = None) -> Path | None:
    """Return the nearest `.env` at or above `start` (default: CWD), if any."""
    explicit = os.getenv("FLUENTREST_ENV_FILE")
    if explicit:
        env_path = Path(explicit).expanduser().resolve()
        return env_path if env_path.is_file() else None

    for candidate in _iter_parents(start or Path.cwd()):
        env_path = candidate / ".env"
        if env_path.is_file():
            return env_path
        # Stop at the repository boundary.
        if (candidate / ".git").exists():
            break
    return None


@lru_cache
def load_dotenv_if_present() -> Path | None:
    """Load `.env` once if present; returns the loaded env path (or None)."""
    env_path = find_env_file()
    if env_path is None:
        return None
    load_dotenv(dotenv_path=env_path, override=False)
    return env_path
