from __future__ import annotations

from orderstore.config import load_settings
from orderstore.logging import configure_logging, get_logger


def main() -> int:
    """
    Programmatic entrypoint.

    Recommended dev command:
      uvicorn orderstore.api.app:app --reload

    This entrypoint exists so you can also do:
      python -m orderstore.main
    """
    settings = load_settings()
    configure_logging(settings.log_level)
    log = get_logger(__name__)

    log.info("Starting order store with DB path: %s", settings.db_path)

    # Import here so config/logging are set before app import side-effects.
    try:
        from orderstore.api.app import app  # noqa: F401
    except Exception:
        log.exception("Failed to import FastAPI app (orderstore.api.app:app).")
        return 1

    import uvicorn

    uvicorn.run(
        "orderstore.api.app:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level,
        reload=False,  # prefer `uvicorn ... --reload` in dev
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
