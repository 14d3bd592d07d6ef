"""
Logging Configuration

Console output goes to stderr so that JSON written to stdout by the CLI
stays machine-readable.  Log calls may attach patient-row context through
``extra``; the formatter appends any of CONTEXT_FIELDS that are present:

    logger.warning("mjoa fell back to 18", extra={"row": 4, "field": "mjoa"})
    → [2026-...] WARNING  [dcm_support.core.ingestion...] mjoa fell back to 18 | row=4 field=mjoa
"""
import logging
import sys
from datetime import datetime, timezone
from typing import Optional

from .exceptions import ConfigurationError

# Order in which context keys are rendered
CONTEXT_FIELDS = ("row", "field", "rule", "policy", "workers")

LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class StructuredFormatter(logging.Formatter):
    """One line per record: timestamp, level, logger, message, then row context."""

    COLORS = {
        'DEBUG': '\033[36m',
        'INFO': '\033[32m',
        'WARNING': '\033[33m',
        'ERROR': '\033[31m',
        'CRITICAL': '\033[35m',
    }
    RESET = '\033[0m'

    def __init__(self, use_color: bool = False):
        super().__init__()
        self.use_color = use_color

    @staticmethod
    def context(record: logging.LogRecord) -> str:
        pairs = [
            f"{key}={getattr(record, key)}"
            for key in CONTEXT_FIELDS
            if getattr(record, key, None) is not None
        ]
        return " ".join(pairs)

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created, timezone.utc).isoformat()
        line = f"[{timestamp}] {record.levelname:8} [{record.name}] {record.getMessage()}"

        context = self.context(record)
        if context:
            line += f" | {context}"

        if self.use_color:
            line = f"{self.COLORS.get(record.levelname, '')}{line}{self.RESET}"

        if record.exc_info:
            line += f"\n{self.formatException(record.exc_info)}"
        return line


def setup_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """
    Configure the root logger for the CLI.

    Args:
        level: one of LEVELS (case-insensitive)
        log_file: optional path; receives the same lines without colour

    Raises:
        ConfigurationError: unknown level name or unwritable log file
    """
    name = str(level).strip().upper()
    if name not in LEVELS:
        raise ConfigurationError(
            f"Unknown log level {level!r}; expected one of {', '.join(LEVELS)}",
            path="log_level",
        )

    root_logger = logging.getLogger()
    root_logger.setLevel(name)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(StructuredFormatter(use_color=sys.stderr.isatty()))
    root_logger.addHandler(console_handler)

    if log_file:
        try:
            file_handler = logging.FileHandler(log_file, encoding="utf-8")
        except OSError as e:
            raise ConfigurationError(f"Cannot open log file: {e}", path=str(log_file))
        file_handler.setFormatter(StructuredFormatter(use_color=False))
        root_logger.addHandler(file_handler)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
