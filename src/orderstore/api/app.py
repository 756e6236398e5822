# src/orderstore/api/app.py
from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from orderstore.config import load_settings
from orderstore.logging import configure_logging, get_logger
from orderstore.storage import SQLiteDB, ensure_schema

from .routes import router

_LOG = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Lifespan handler.

    Responsible for:
    - loading settings
    - configuring logging
    - bringing the schema up to date (fatal on failure)
    """
    settings = load_settings()
    configure_logging(settings.log_level)

    db = SQLiteDB(settings.db_path, timeout_s=settings.db_timeout_s)

    # Runs once per process start; idempotent.
    with db.connection() as conn:
        ensure_schema(conn)

    # Store on app.state for DI
    app.state.settings = settings
    app.state.db = db

    _LOG.info("Startup complete. Order store at %s", settings.db_path)

    try:
        yield
    finally:
        _LOG.info("Shutdown complete.")


app = FastAPI(
    title="Order Store",
    version="0.1.0",
    lifespan=lifespan,
)
app.include_router(router)
