"""
============================================================================
FILE: logging_config.py
LOCATION: isim_api/logging_config.py
============================================================================

PURPOSE:
    Logger setup for the names service: JSON lines when LOG_JSON=true,
    short console lines otherwise, plus one access line per request.

ROLE IN PROJECT:
    create_app() calls setup_logging() once with Settings.log_level and
    Settings.log_json. Every module logs through get_logger("<area>"), a
    child of the "isim" logger, so a single handler serves the whole app.

KEY COMPONENTS:
    - StructuredFormatter: One JSON object per record (request fields included)
    - DevelopmentFormatter: "HH:MM:SS [LEVEL] isim.area: message"
    - setup_logging(): Attach the chosen formatter to the "isim" logger
    - get_logger(): Child logger for a module
    - log_request(): Access line with method, path, status and duration

DEPENDENCIES:
    - External: None
    - Internal: None

USAGE:
    from isim_api.logging_config import get_logger
    logger = get_logger("catalogue")
    logger.info(f"Created {count} name(s)")
============================================================================
"""
import json
import logging
import sys
from datetime import datetime, timezone
from typing import Optional

ROOT_LOGGER_NAME = "isim"
SERVICE_NAME = "isim-atlasi-api"

# Attributes log_request() attaches to its records
REQUEST_FIELDS = ("method", "path", "status", "duration_ms", "client")


class StructuredFormatter(logging.Formatter):
    """Render a record as one JSON line for log collectors."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "service": SERVICE_NAME,
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for field in REQUEST_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                entry[field] = value
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        # Turkish names stay readable in the output
        return json.dumps(entry, ensure_ascii=False)


class DevelopmentFormatter(logging.Formatter):
    FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

    def __init__(self):
        super().__init__(self.FORMAT, datefmt="%H:%M:%S")


def setup_logging(level: str = "INFO", production: bool = False) -> logging.Logger:
    """
    Configure the "isim" logger.

    Safe to call repeatedly (each test app does): existing handlers are
    replaced, never stacked.

    Args:
        level: DEBUG, INFO, WARNING, ERROR or CRITICAL
        production: JSON lines if True, console format if False

    Returns:
        The configured "isim" logger
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(StructuredFormatter() if production else DevelopmentFormatter())
    logger.addHandler(handler)
    logger.propagate = False
    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Child of the "isim" logger, e.g. get_logger("cache") -> "isim.cache"."""
    root = logging.getLogger(ROOT_LOGGER_NAME)
    return root.getChild(name) if name else root


def log_request(
    method: str,
    path: str,
    status: int,
    duration_ms: float,
    client: Optional[str] = None,
) -> None:
    """Emit the access line for one finished request."""
    level = logging.WARNING if status >= 500 else logging.INFO
    get_logger("access").log(
        level,
        f"{method} {path} -> {status} ({duration_ms:.1f} ms)",
        extra={
            "method": method,
            "path": path,
            "status": status,
            "duration_ms": round(duration_ms, 1),
            "client": client,
        },
    )
