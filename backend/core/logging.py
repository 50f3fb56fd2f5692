from __future__ import annotations

import logging
import logging.handlers
from pathlib import Path

from core.config import BACKEND_DIR


_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def _level_for(environment: str) -> int:
    env = (environment or "development").lower().strip()
    if env == "production":
        return logging.INFO
    if env == "test":
        return logging.WARNING
    return logging.DEBUG


def setup_logging(*, environment: str, log_dir: Path | None = None) -> None:
    """Configure application logging once per process.

    Development logs to the console at DEBUG. Production adds a rotating
    ``school.log`` under ``backend/logs`` and logs at INFO. Repeated calls are
    no-ops so the app factory can be invoked from tests.
    """

    root = logging.getLogger()
    if root.handlers:
        return

    level = _level_for(environment)
    formatter = logging.Formatter(fmt=_LOG_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S%z")

    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(formatter)
    handlers: list[logging.Handler] = [console]

    if (environment or "").lower().strip() == "production":
        logs_dir = Path(log_dir or BACKEND_DIR / "logs")
        logs_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            logs_dir / "school.log",
            maxBytes=10 * 1024 * 1024,
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    logging.basicConfig(level=level, handlers=handlers)

    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        logging.getLogger(name).setLevel(level)
    # SQL echo is far too chatty below WARNING outside of explicit debugging.
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
