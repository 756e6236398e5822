from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from pathlib import Path

DB_FILENAME = "orders.db"


def _get_env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError as e:
        raise ValueError(f"Environment variable {name} must be an int, got: {raw!r}") from e
    return value


def _get_env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError as e:
        raise ValueError(f"Environment variable {name} must be a number, got: {raw!r}") from e
    return value


def _get_env_str(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw


def default_db_path() -> Path:
    """
    Places orders.db beside the running program so the store travels with it.

    Frozen executables use their own directory; a script run uses the
    script's directory. Falls back to the current working directory.
    """
    if getattr(sys, "frozen", False):
        return Path(sys.executable).resolve().parent / DB_FILENAME

    argv0 = sys.argv[0] if sys.argv else ""
    if argv0 and argv0 != "-c":
        script = Path(argv0).resolve()
        if script.parent.is_dir():
            return script.parent / DB_FILENAME

    return Path.cwd() / DB_FILENAME


@dataclass(frozen=True)
class Settings:
    # Database
    db_path: Path
    db_timeout_s: float

    # Listing
    default_page_size: int
    max_page_size: int

    # Server (used by orderstore.main when starting uvicorn programmatically)
    host: str
    port: int
    log_level: str


def load_settings() -> Settings:
    """
    Loads settings from env vars with sane defaults.

    Env vars:
      - ORDERSTORE_DB_PATH (default: orders.db beside the program)
      - ORDERSTORE_DB_TIMEOUT_S (default: 5.0)
      - ORDERSTORE_DEFAULT_PAGE_SIZE (default: 50)
      - ORDERSTORE_MAX_PAGE_SIZE (default: 1000)
      - ORDERSTORE_HOST (default: 127.0.0.1)
      - ORDERSTORE_PORT (default: 8000)
      - ORDERSTORE_LOG_LEVEL (default: info)
    """
    raw_path = os.getenv("ORDERSTORE_DB_PATH")
    if raw_path is None or raw_path.strip() == "":
        db_path = default_db_path()
    else:
        db_path = Path(raw_path).expanduser()

    db_timeout_s = _get_env_float("ORDERSTORE_DB_TIMEOUT_S", 5.0)
    if db_timeout_s < 0:
        raise ValueError("ORDERSTORE_DB_TIMEOUT_S must be >= 0")

    max_page_size = _get_env_int("ORDERSTORE_MAX_PAGE_SIZE", 1000)
    if max_page_size <= 0:
        raise ValueError("ORDERSTORE_MAX_PAGE_SIZE must be > 0")

    default_page_size = _get_env_int("ORDERSTORE_DEFAULT_PAGE_SIZE", 50)
    if not (1 <= default_page_size <= max_page_size):
        raise ValueError("ORDERSTORE_DEFAULT_PAGE_SIZE must be between 1 and ORDERSTORE_MAX_PAGE_SIZE")

    host = _get_env_str("ORDERSTORE_HOST", "127.0.0.1")
    port = _get_env_int("ORDERSTORE_PORT", 8000)
    if not (1 <= port <= 65535):
        raise ValueError("ORDERSTORE_PORT must be between 1 and 65535")

    log_level = _get_env_str("ORDERSTORE_LOG_LEVEL", "info").lower()

    return Settings(
        db_path=db_path,
        db_timeout_s=db_timeout_s,
        default_page_size=default_page_size,
        max_page_size=max_page_size,
        host=host,
        port=port,
        log_level=log_level,
    )
