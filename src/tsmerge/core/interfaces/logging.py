from __future__ import annotations

from typing import Protocol, runtime_checkable

from tsmerge.core.models import LogLevel


@runtime_checkable
class LoggerLikeProtocol(Protocol):
    """Minimal stdlib logging surface used across the project."""

    def debug(self, msg: str, *args, **kwargs) -> None: ...

    def info(self, msg: str, *args, **kwargs) -> None: ...

    def warning(self, msg: str, *args, **kwargs) -> None: ...

    def error(self, msg: str, *args, **kwargs) -> None: ...


@runtime_checkable
class MergeLoggerProtocol(Protocol):
    """Sink receiving the leveled messages emitted while merging."""

    def log(self, message: str, level: LogLevel = LogLevel.INFORMATION, newline: bool = True) -> None:
        ...
