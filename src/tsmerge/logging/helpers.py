from __future__ import annotations

"""Small logging helpers to standardize tsmerge logger names and configuration.

This module provides:
    - ConsoleLogFormatter: plain text formatter that emphasizes warnings and errors.
    - JsonLogFormatter: JSON log formatter with stable fields and optional context.
    - setup_base_logger: Root logger configuration for the 'tsmerge' logger.
    - get_logger: Namespaced logger factory ('tsmerge.*').
"""

import logging
import os
from typing import Optional, TextIO

BASE_LOGGER_NAME = 'tsmerge'


class ConsoleLogFormatter(logging.Formatter):
    """Human-readable formatter.

    INFO and DEBUG records print the bare message; WARNING and above carry a
    marker and the level name so they stand out in a long merge log.
    """

    def format(self, record: logging.LogRecord) -> str:
        message = record.getMessage()
        if record.levelno >= logging.WARNING:
            return f'⚠  {record.levelname}: {message}'
        return message


class JsonLogFormatter(logging.Formatter):
    """Emit logs as compact JSON with a fixed schema.

    Fields:
        - ts: ISO-8601 timestamp in UTC with millisecond precision.
        - level: Log level name.
        - module: Logger name (e.g., 'tsmerge.processing.dts').
        - msg: Formatted message string.
        - version: tsmerge.__version__ (fixed per formatter instance).
        - ctx: Optional dictionary attached to the record as 'context'.
    """

    def __init__(self) -> None:
        super().__init__()
        self._version = self._resolve_version()

    @staticmethod
    def _resolve_version() -> str:
        try:
            # Lazy import to reduce the chance of circular imports at import time.
            from tsmerge import __version__ as _v
            return str(_v)
        except ImportError:
            return os.getenv('TSMERGE_VERSION', 'unknown')

    def format(self, record: logging.LogRecord) -> str:
        from datetime import datetime, timezone
        import json

        ts = datetime.fromtimestamp(record.created, tz=timezone.utc)
        ts_str = ts.isoformat(timespec='milliseconds').replace('+00:00', 'Z')

        payload = {
            'ts': ts_str,
            'level': record.levelname,
            'module': record.name,
            'msg': record.getMessage(),
            'version': self._version,
        }

        ctx = getattr(record, 'context', None)
        if isinstance(ctx, dict) and ctx:
            payload['ctx'] = ctx

        return json.dumps(payload, ensure_ascii=False)


def setup_base_logger(
    *, json_logs: bool = False, level: int = logging.INFO, stream: Optional[TextIO] = None
) -> logging.Logger:
    """Configure the base 'tsmerge' logger once and return it.

    Args:
        json_logs: If True, configure a JSON formatter, else plain text.
        level: Logging level for the base logger.
        stream: Optional stream (stderr by default).

    Returns:
        The configured base logger.
    """
    base = logging.getLogger(BASE_LOGGER_NAME)
    if base.handlers:
        base.setLevel(level)
        return base

    import sys as _sys

    base.setLevel(level)
    base.propagate = False

    handler = logging.StreamHandler(stream or _sys.stderr)
    if json_logs:
        handler.setFormatter(JsonLogFormatter())
    else:
        handler.setFormatter(ConsoleLogFormatter())
    base.addHandler(handler)

    return base


def reset_base_logger() -> None:
    """Drop the handlers installed by `setup_base_logger` (used by the CLI on reconfiguration)."""
    base = logging.getLogger(BASE_LOGGER_NAME)
    for handler in list(base.handlers):
        base.removeHandler(handler)


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a namespaced logger under 'tsmerge'."""
    if not name or name == BASE_LOGGER_NAME:
        return logging.getLogger(BASE_LOGGER_NAME)
    if name.startswith(BASE_LOGGER_NAME):
        return logging.getLogger(name)
    return logging.getLogger(f'{BASE_LOGGER_NAME}.{name}')
