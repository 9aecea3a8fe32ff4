#!/usr/bin/env python3
"""
Unified logging configuration for the ACME challenge updater.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime

LOG_FORMAT_STANDARD = "[%(asctime)s] [%(levelname)s] %(name)s: %(message)s"

# Attributes every LogRecord carries; anything else was passed via ``extra``
_RESERVED_RECORD_ATTRS = frozenset(
    {
        "name",
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "exc_info",
        "exc_text",
        "stack_info",
        "taskName",
        "message",
        "asctime",
    }
)


class StructuredFormatter(logging.Formatter):
    """Render log records as single-line JSON documents."""

    def format(self, record):
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RESERVED_RECORD_ATTRS:
                log_entry[key] = value

        return json.dumps(log_entry, ensure_ascii=False, default=str)


def get_log_level_from_env(default_level: int = logging.INFO) -> int:
    """
    Get logging level from the LOG_LEVEL environment variable.

    Args:
        default_level: Level used when LOG_LEVEL is unset or unknown

    Returns:
        Logging level constant
    """
    log_level_str = os.environ.get("LOG_LEVEL", "").upper()

    level_mapping = {
        "QUIET": logging.ERROR,  # QUIET = only errors and above
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "WARNING": logging.WARNING,
        "ERROR": logging.ERROR,
        "CRITICAL": logging.CRITICAL,
    }

    return level_mapping.get(log_level_str, default_level)


def use_json_from_env() -> bool:
    """Return True when LOG_FORMAT=json is set."""
    return os.environ.get("LOG_FORMAT", "").strip().lower() == "json"


def setup_logger(
    name: str,
    log_file: str | None = None,
    level: int | None = None,
    use_json: bool | None = None,
) -> logging.Logger:
    """
    Set up a logger with consistent formatting.

    Args:
        name: Logger name
        log_file: Optional log file path (if None, LOG_FILE decides)
        level: Logging level (if None, will be determined from environment)
        use_json: Whether to use JSON formatting (if None, LOG_FORMAT decides)

    Returns:
        Configured logger instance
    """
    if level is None:
        level = get_log_level_from_env(logging.INFO)
    if use_json is None:
        use_json = use_json_from_env()
    if log_file is None:
        log_file = os.environ.get("LOG_FILE") or None

    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.handlers.clear()

    if use_json:
        formatter: logging.Formatter = StructuredFormatter()
    else:
        formatter = logging.Formatter(LOG_FORMAT_STANDARD, datefmt="%Y-%m-%d %H:%M:%S")

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def configure_logger(module_logger: logging.Logger, main_logger: logging.Logger | None = None) -> None:
    """Make a library module logger follow the main logger's level and handlers."""
    if main_logger is None:
        return
    module_logger.setLevel(main_logger.level)
    for handler in main_logger.handlers:
        if handler not in module_logger.handlers:
            module_logger.addHandler(handler)
    # Avoid duplicate output through the root logger
    module_logger.propagate = False


def log_dns_operation(logger: logging.Logger, operation: str, domain: str, status: str) -> None:
    """Log DNS operation."""
    logger.info(f"DNS {operation} for {domain}: {status}")


def log_component_error(logger: logging.Logger, component: str, message: str) -> None:
    """Log error with component identification."""
    logger.error(f"[{component}] {message}")
