"""Logging setup for the billing engine and its CLI.

Reconciliation runs are followed through their log lines, so the JSON
format carries the LogContext fields (invoice_id, job_id,
correlation_id) as top-level keys next to the message.
"""

import json
import logging
import logging.handlers
import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from trucking_billing.utils.logging_utils import ContextFilter

LEVELS = ("CRITICAL", "DEBUG", "ERROR", "INFO", "WARNING")
FORMATS = ("json", "standard")
DEFAULT_MAX_BYTES = 10 * 1024 * 1024

STANDARD_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"
STANDARD_DATEFMT = "%Y-%m-%d %H:%M:%S"

# Attributes every LogRecord has; anything else came from LogContext or extra=
_RECORD_ATTRS = frozenset(
    logging.LogRecord("", logging.INFO, "", 0, "", None, None).__dict__
) | {"message", "asctime"}


class JSONFormatter(logging.Formatter):
    """One JSON object per line.

    Context and ``extra={}`` fields become top-level keys; values json
    cannot encode (Decimal amounts, datetimes) are written as strings.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        entry.update(
            (key, value)
            for key, value in record.__dict__.items()
            if key not in _RECORD_ATTRS and not key.startswith("_")
        )
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class LoggingConfig:
    """Where log lines go and how they look.

    Attributes:
        log_level: Root level name, case-insensitive
        log_format: ``standard`` text or ``json`` lines
        log_file: Target of the rotating file handler
        enable_console: Log to stderr
        enable_file: Log to ``log_file``
        max_file_size: Bytes before the log file rotates
        backup_count: Rotated files kept

    Raises:
        ValueError: On an unknown level or format, or file logging
            without a file
    """

    log_level: str = "INFO"
    log_format: str = "standard"
    log_file: Optional[str] = None
    enable_console: bool = True
    enable_file: bool = False
    max_file_size: int = DEFAULT_MAX_BYTES
    backup_count: int = 5

    def __post_init__(self):
        self.log_level = self.log_level.upper()
        if self.log_level not in LEVELS:
            raise ValueError(
                f"Invalid log level: {self.log_level}. Must be one of {', '.join(LEVELS)}"
            )
        if self.log_format not in FORMATS:
            raise ValueError(
                f"Invalid log format: {self.log_format}. Must be one of {', '.join(FORMATS)}"
            )
        if self.enable_file and not self.log_file:
            raise ValueError("log_file must be specified when enable_file is True")

    @classmethod
    def from_env(cls, default_level: str = "INFO") -> "LoggingConfig":
        """Read LOG_LEVEL, LOG_FORMAT, LOG_FILE, LOG_CONSOLE,
        LOG_FILE_ENABLED, LOG_MAX_FILE_SIZE and LOG_BACKUP_COUNT.

        ``default_level`` applies when LOG_LEVEL is unset; the CLI passes
        WARNING so normal runs only print command output.
        """
        return cls(
            log_level=os.getenv("LOG_LEVEL", default_level),
            log_format=os.getenv("LOG_FORMAT", "standard"),
            log_file=os.getenv("LOG_FILE"),
            enable_console=_env_flag("LOG_CONSOLE", True),
            enable_file=_env_flag("LOG_FILE_ENABLED", False),
            max_file_size=int(os.getenv("LOG_MAX_FILE_SIZE", DEFAULT_MAX_BYTES)),
            backup_count=int(os.getenv("LOG_BACKUP_COUNT", 5)),
        )

    def build_formatter(self) -> logging.Formatter:
        if self.log_format == "json":
            return JSONFormatter()
        return logging.Formatter(fmt=STANDARD_FORMAT, datefmt=STANDARD_DATEFMT)

    def build_handlers(self) -> List[logging.Handler]:
        handlers: List[logging.Handler] = []
        if self.enable_console:
            handlers.append(logging.StreamHandler())
        if self.enable_file and self.log_file:
            Path(self.log_file).parent.mkdir(parents=True, exist_ok=True)
            handlers.append(
                logging.handlers.RotatingFileHandler(
                    self.log_file,
                    maxBytes=self.max_file_size,
                    backupCount=self.backup_count,
                )
            )
        return handlers


def configure_logging(config: LoggingConfig) -> None:
    """Install ``config``'s handlers on the root logger.

    Previous root handlers are closed first, so calling this again (each
    CLI invocation does) replaces the setup instead of adding to it.
    """
    reset_logging()
    root = logging.getLogger()
    level = logging.getLevelName(config.log_level)
    root.setLevel(level)

    formatter = config.build_formatter()
    context_filter = ContextFilter()
    for handler in config.build_handlers():
        handler.setLevel(level)
        handler.setFormatter(formatter)
        handler.addFilter(context_filter)
        root.addHandler(handler)


def reset_logging() -> None:
    """Close every root handler and put the root level back to WARNING."""
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    root.setLevel(logging.WARNING)
