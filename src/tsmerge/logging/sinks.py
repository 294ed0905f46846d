from __future__ import annotations

"""Merge-log sinks.

Processors report progress through `MergeContext.log(message, level)`; the
context forwards every call to one of the sinks below, selected from the
`logger` merge option.
"""

import logging
from typing import Callable, Optional

from tsmerge.core.errors import InvalidOptionsError
from tsmerge.core.interfaces.logging import MergeLoggerProtocol
from tsmerge.core.models import LogLevel
from tsmerge.logging.helpers import get_logger

LoggerFunction = Callable[..., None]

_STDLIB_LEVELS = {
    LogLevel.VERBOSE: logging.DEBUG,
    LogLevel.INFORMATION: logging.INFO,
    LogLevel.WARNING: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
    LogLevel.SUCCESS: logging.INFO,
}


class NoneSink:
    """Discards every message."""

    def log(self, message: str, level: LogLevel = LogLevel.INFORMATION, newline: bool = True) -> None:
        return None


class ConsoleSink:
    """Routes merge messages through the stdlib 'tsmerge' logger."""

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self._log = logger or get_logger('merge')

    def log(self, message: str, level: LogLevel = LogLevel.INFORMATION, newline: bool = True) -> None:
        self._log.log(_STDLIB_LEVELS.get(LogLevel(level), logging.INFO), '%s', message)


class CallbackSink:
    """Adapts a bare `(message, level, newline)` function to the sink protocol."""

    def __init__(self, func: LoggerFunction) -> None:
        self._func = func

    def log(self, message: str, level: LogLevel = LogLevel.INFORMATION, newline: bool = True) -> None:
        self._func(message, level, newline)


def build_sink(option: object) -> MergeLoggerProtocol:
    """Resolve the `logger` merge option into a sink instance."""
    if option is None or option == 'none':
        return NoneSink()
    if option == 'console':
        return ConsoleSink()
    if isinstance(option, MergeLoggerProtocol):
        return option
    if callable(option):
        return CallbackSink(option)
    raise InvalidOptionsError(f'Invalid logger option: {option!r}')
