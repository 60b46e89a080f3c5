"""
Logging Configuration
====================

structlog on top of stdlib logging. Console output is human readable outside
production; production writes JSON lines to the console and to a rotating
file under ``{storage_path}/logs``.
"""

import logging
import logging.config
import sys
from pathlib import Path
from typing import Dict, Any, TYPE_CHECKING
import structlog
from structlog.types import Processor

from .settings import get_settings

if TYPE_CHECKING:
    from .settings import Settings

LOG_FILE_NAME = "htmlshot.log"

# Libraries whose own loggers are noisier than the application's
LIBRARY_LOG_LEVELS = {
    "uvicorn.access": "WARNING",
    "aiohttp.client": "WARNING",
    "PIL": "INFO",
}


def log_file_path(settings: "Settings") -> Path:
    return settings.storage_path / "logs" / LOG_FILE_NAME


def build_processors(settings: "Settings") -> list[Processor]:
    """structlog processor chain for the current environment."""
    processors: list[Processor] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if settings.environment == "production":
        processors.insert(0, structlog.processors.TimeStamper(fmt="iso"))
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=settings.environment != "testing"))

    return processors


def get_logging_config(settings: "Settings") -> Dict[str, Any]:
    """Get logging configuration dictionary."""
    formatter = "json" if settings.environment == "production" else "plain"

    handlers: Dict[str, Any] = {
        "console": {
            "class": "logging.StreamHandler",
            "level": settings.log_level,
            "formatter": formatter,
            "stream": sys.stdout,
        },
    }
    # Tests keep everything on the console
    if settings.environment != "testing":
        handlers["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "level": settings.log_level,
            "formatter": formatter,
            "filename": str(log_file_path(settings)),
            "maxBytes": 10485760,  # 10MB
            "backupCount": 5,
            "delay": True,
        }

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "plain": {
                "format": "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
            "json": {
                "()": "pythonjsonlogger.json.JsonFormatter",
                "format": "%(asctime)s %(name)s %(levelname)s %(message)s",
            },
        },
        "handlers": handlers,
        "root": {"level": settings.log_level, "handlers": list(handlers)},
        "loggers": {name: {"level": level} for name, level in LIBRARY_LOG_LEVELS.items()},
    }


def setup_logging() -> None:
    """Configure structlog and the stdlib handlers from settings."""
    settings = get_settings()
    log_file_path(settings).parent.mkdir(parents=True, exist_ok=True)

    structlog.configure(
        processors=build_processors(settings),
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    logging.config.dictConfig(get_logging_config(settings))


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)


# Initialize logging on import
setup_logging()
