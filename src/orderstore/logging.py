from __future__ import annotations

import logging
import sys
from typing import Optional

# Statement tracing goes to its own logger so "debug" stays readable.
SQL_LOGGER_NAME = "orderstore.sql"


def configure_logging(log_level: str = "info") -> None:
    """
    Configures root logging for the order store.

    - logs to stdout with one consistent format
    - avoids double handlers when the app module is reloaded
    - "trace" additionally echoes every SQL statement (see SQLiteDB.connect)
    """
    normalized = log_level.lower().strip()
    level = _parse_level(normalized)

    root = logging.getLogger()
    root.setLevel(level)

    for h in list(root.handlers):
        if isinstance(h, logging.StreamHandler):
            root.removeHandler(h)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s %(levelname)s %(name)s - %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S%z",
        )
    )
    root.addHandler(handler)

    sql_level = logging.DEBUG if normalized == "trace" else max(level, logging.INFO)
    logging.getLogger(SQL_LOGGER_NAME).setLevel(sql_level)
    logging.getLogger("uvicorn.access").setLevel(max(level, logging.INFO))
    logging.getLogger("uvicorn.error").setLevel(level)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    return logging.getLogger(name if name else "orderstore")


def sql_trace_enabled() -> bool:
    return logging.getLogger(SQL_LOGGER_NAME).isEnabledFor(logging.DEBUG)


def _parse_level(log_level: str) -> int:
    mapping = {
        "critical": logging.CRITICAL,
        "error": logging.ERROR,
        "warning": logging.WARNING,
        "warn": logging.WARNING,
        "info": logging.INFO,
        "debug": logging.DEBUG,
        "trace": logging.DEBUG,
    }
    return mapping.get(log_level, logging.INFO)
