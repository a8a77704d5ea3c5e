from __future__ import annotations

import logging.config
import sys
from pathlib import Path
from typing import Any

from vmpckit.infra.paths import PACKAGE_NAME

LOG_FILENAME = f"{PACKAGE_NAME}.log"


def setup_logging(log_level: str = "INFO", log_dir: str | Path | None = None) -> None:
    """Configure the ``vmpckit`` logger.

    Console output goes to stderr, since stdout may carry cipher output.

    Args:
        log_level: Level name such as ``"DEBUG"`` or ``"INFO"``.
        log_dir: When set, also log to a rotating file in this directory.

    Raises:
        ValueError: If ``log_level`` is not a known level name.
    """
    level = log_level.upper()
    if level not in logging.getLevelNamesMapping():
        raise ValueError(f"Unknown log level: {log_level}")

    handlers: dict[str, dict[str, Any]] = {
        "console": {
            "class": "logging.StreamHandler",
            "level": level,
            "formatter": "console",
            "stream": sys.stderr,
        },
    }

    if log_dir:
        log_path = Path(log_dir).expanduser().resolve()
        log_path.mkdir(parents=True, exist_ok=True)
        handlers["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "level": level,
            "formatter": "file",
            "filename": str(log_path / LOG_FILENAME),
            "maxBytes": 1024 * 1024,
            "backupCount": 3,
            "encoding": "utf-8",
        }

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "console": {"format": "%(levelname)s: %(message)s"},
                "file": {
                    "format": "%(asctime)s %(levelname)s %(name)s: %(message)s",
                    "datefmt": "%Y-%m-%d %H:%M:%S",
                },
            },
            "handlers": handlers,
            "loggers": {
                PACKAGE_NAME: {
                    "level": level,
                    "handlers": list(handlers),
                    "propagate": False,
                },
            },
        }
    )
