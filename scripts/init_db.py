#!/usr/bin/env python3
from __future__ import annotations

import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
SRC_ROOT = REPO_ROOT / "src"
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))

from orderstore.config import load_settings
from orderstore.domain.errors import StorageError
from orderstore.logging import configure_logging, get_logger
from orderstore.storage import SQLiteDB, ensure_schema, schema_version


def main() -> int:
    settings = load_settings()
    configure_logging(settings.log_level)
    log = get_logger(__name__)

    db = SQLiteDB(settings.db_path, timeout_s=settings.db_timeout_s)
    try:
        with db.connection() as conn:
            applied = ensure_schema(conn)
            version = schema_version(conn)
    except StorageError as e:
        log.error("Schema initialization failed: %s", e)
        return 1

    log.info(
        "DB initialized at %s (schema version %d, %d step(s) applied)",
        settings.db_path,
        version,
        len(applied),
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
