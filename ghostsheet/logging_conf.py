"""structlog wiring: JSON lines to stderr and, when a log directory is known, a rotating file."""

from __future__ import annotations

import logging.config
from pathlib import Path
from typing import Any

import structlog

LOGGER_NAME = "ghostsheet"
LOG_FILE_NAME = "ghostsheet.log"
JSON_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

_configured = False


def build_logging_config(level: str, log_file: Path | None = None) -> dict[str, Any]:
    handlers: dict[str, dict[str, Any]] = {
        "stderr": {
            "class": "logging.StreamHandler",
            "formatter": "json",
            "stream": "ext://sys.stderr",
        }
    }
    if log_file is not None:
        handlers["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "formatter": "json",
            "filename": str(log_file),
            "maxBytes": 5 * 1024 * 1024,
            "backupCount": 3,
            "encoding": "utf-8",
        }
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {"()": "pythonjsonlogger.jsonlogger.JsonFormatter", "fmt": JSON_FORMAT},
        },
        "handlers": handlers,
        "loggers": {
            LOGGER_NAME: {"handlers": list(handlers), "level": level, "propagate": False},
        },
    }


def configure_logging(verbose: bool = False, log_dir: Path | None = None) -> structlog.BoundLogger:
    """Route structlog events through stdlib logging once per process.

    Cache, fetch and engine events are emitted on ``ghostsheet.*`` loggers and
    end up as JSON lines. ``verbose`` lowers the threshold to DEBUG, which is
    where cache hits and staleness decisions are reported.
    """

    global _configured
    if not _configured:
        log_file = None
        if log_dir is not None:
            log_dir.mkdir(parents=True, exist_ok=True)
            log_file = log_dir / LOG_FILE_NAME
        logging.config.dictConfig(build_logging_config("DEBUG" if verbose else "INFO", log_file))
        structlog.configure(
            processors=[
                structlog.contextvars.merge_contextvars,
                structlog.stdlib.add_logger_name,
                structlog.stdlib.add_log_level,
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.processors.format_exc_info,
                structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
            ],
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        )
        _configured = True
    return structlog.get_logger(LOGGER_NAME)


__all__ = ["build_logging_config", "configure_logging"]
