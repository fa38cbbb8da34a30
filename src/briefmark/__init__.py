"""Briefmark - annotation pipeline for newsletter stories.

Normalises raw story markup into display-ready HTML, captures text
selections as character offsets, and re-projects stored highlights onto
the normalised content at render time.
"""

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path

__version__ = "0.1.0"


def _setup_logging(log_dir: Path | None = None) -> None:
    """Configure logging to both console and rotating file."""
    log_dir = log_dir or Path("logs")
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / f"briefmark.{os.getpid()}.log"

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    # File handler - detailed logging with rotation (10MB, keep 5 backups)
    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=10 * 1024 * 1024,
        backupCount=5,
        encoding="utf-8",
    )
    file_handler.setLevel(logging.DEBUG)
    file_formatter = logging.Formatter(
        "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    file_handler.setFormatter(file_formatter)

    # Console handler - less verbose
    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))

    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)

    logging.info("Logging configured. Log file: %s", log_file.absolute())


def main() -> None:
    """Entry point for the Briefmark reading application."""
    from nicegui import app, ui

    from briefmark.config import get_settings

    settings = get_settings()
    _setup_logging(settings.app.log_dir)

    import briefmark.pages  # noqa: F401 - registers routes

    if settings.database.url:
        from briefmark.db import close_db, create_schema, init_db

        @app.on_startup
        async def startup() -> None:
            await init_db()
            await create_schema()
            print("Database connected")

        @app.on_shutdown
        async def shutdown() -> None:
            await close_db()

    port = settings.app.port
    print(f"Briefmark v{__version__}")
    print(f"Starting application on http://0.0.0.0:{port}")

    reload = os.environ.get("BRIEFMARK_RELOAD", "1") != "0"
    ui.run(
        host="0.0.0.0",  # nosec B104
        port=port,
        reload=reload,
        storage_secret=settings.app.storage_secret.get_secret_value(),
    )


if __name__ in {"__main__", "__mp_main__"}:
    main()
