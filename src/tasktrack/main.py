"""Entry point: initializes the database and serves the API."""

import asyncio
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

import uvicorn

from config.settings import settings

BASE_DIR = Path(__file__).resolve().parent.parent.parent

# ── Logging ────────────────────────────────────────────────


def setup_logging() -> None:
    log_dir = BASE_DIR / "logs"
    log_dir.mkdir(exist_ok=True)

    formatter = logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    level = logging.getLevelName(settings.log_level.upper())

    # File handler
    fh = RotatingFileHandler(
        log_dir / "tasktrack.log",
        maxBytes=5 * 1024 * 1024,  # 5 MB
        backupCount=3,
        encoding="utf-8",
    )
    fh.setFormatter(formatter)
    fh.setLevel(level)

    # Console handler
    ch = logging.StreamHandler()
    ch.setFormatter(formatter)
    ch.setLevel(level)

    root = logging.getLogger()
    root.setLevel(level)
    root.addHandler(fh)
    root.addHandler(ch)

    # Quiet noisy loggers
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("apscheduler").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)


# ── Main ───────────────────────────────────────────────────


async def main() -> None:
    setup_logging()
    logger = logging.getLogger(__name__)
    logger.info("Starting tasktrack...")

    from tasktrack.models.database import init_db

    await init_db()
    logger.info("Database initialized")

    from tasktrack.web.app import create_app

    config = uvicorn.Config(
        create_app(),
        host=settings.host,
        port=settings.port,
        log_config=None,
    )
    server = uvicorn.Server(config)

    # uvicorn installs its own SIGINT/SIGTERM handlers and returns on shutdown
    logger.info("Serving on http://%s:%d", settings.host, settings.port)
    await server.serve()
    logger.info("Goodbye!")


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
