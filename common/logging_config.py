# -*- coding: utf-8 -*-
"""
Centralized logging configuration for the KRaft provisioner.

Console output is human-readable with a status symbol per level; an optional
log file receives one JSON object per record so provisioning runs can be
audited afterwards.
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Dict, Optional

from settings.config_models import SYMBOLS_DEFAULT

SIMPLE_LOG_FORMAT_NO_PREFIX = (
    "%(asctime)s - %(levelname)s - %(symbol)s %(name)s - %(message)s"
)
SIMPLE_LOG_FORMAT_WITH_PREFIX_PLACEHOLDER = (
    "{log_prefix} " + SIMPLE_LOG_FORMAT_NO_PREFIX
)


class SymbolFormatter(logging.Formatter):
    """
    A custom formatter that adds symbols to log messages based on the log level.
    """

    def __init__(
        self, fmt=None, datefmt=None, style="%", validate=True, symbols=None
    ):
        super().__init__(fmt, datefmt, style, validate)
        self.symbols = symbols or SYMBOLS_DEFAULT

    def format(self, record):
        if record.levelno == logging.DEBUG:
            record.symbol = self.symbols.get("debug", "🐛")
        elif record.levelno == logging.INFO:
            record.symbol = self.symbols.get("info", "ℹ️")
        elif record.levelno == logging.WARNING:
            record.symbol = self.symbols.get("warning", "⚠️")
        elif record.levelno == logging.ERROR:
            record.symbol = self.symbols.get("error", "❌")
        elif record.levelno == logging.CRITICAL:
            record.symbol = self.symbols.get("critical", "🔥")
        else:
            record.symbol = ""

        return super().format(record)


class JSONFormatter(logging.Formatter):
    """
    Formats log records as JSON with timestamp, level, logger, message and
    source location. Exception text is included when present.
    """

    def __init__(self, service_name: str = "kraft-provisioner"):
        super().__init__()
        self.service_name = service_name
        self.hostname = os.environ.get("HOSTNAME", "unknown")

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_entry = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "service": self.service_name,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "hostname": self.hostname,
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, ensure_ascii=False)


def setup_logging(
    log_level: int = logging.INFO,
    log_file: Optional[str] = None,
    log_to_console: bool = True,
    log_prefix: Optional[str] = None,
    symbols: Optional[Dict[str, str]] = None,
) -> None:
    """
    Configures logging for the provisioner.

    Parameters:
    log_level: int
        The logging level to configure. Defaults to logging.INFO.
    log_file: Optional[str]
        If given, JSON-formatted records are also appended to this file.
    log_to_console: bool
        Whether to log to the console (stdout). Defaults to True.
    log_prefix: Optional[str]
        Text placed in front of every console line, e.g. "[KRAFT-SETUP]".
    symbols: Optional[Dict[str, str]]
        Status glyphs per level; defaults to the built-in set.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    if log_to_console:
        fmt = (
            SIMPLE_LOG_FORMAT_WITH_PREFIX_PLACEHOLDER.format(log_prefix=log_prefix)
            if log_prefix
            else SIMPLE_LOG_FORMAT_NO_PREFIX
        )
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(log_level)
        console_handler.setFormatter(SymbolFormatter(fmt, symbols=symbols))
        root_logger.addHandler(console_handler)

    if log_file:
        try:
            file_handler = logging.FileHandler(log_file, encoding="utf-8")
        except OSError as e:
            root_logger.warning(f"Could not open log file '{log_file}': {e}")
        else:
            file_handler.setLevel(log_level)
            file_handler.setFormatter(JSONFormatter())
            root_logger.addHandler(file_handler)

    if not root_logger.handlers:
        root_logger.addHandler(logging.NullHandler())

    # Keep third-party HTTP chatter out of INFO output
    logging.getLogger("urllib3").setLevel(max(log_level, logging.WARNING))
