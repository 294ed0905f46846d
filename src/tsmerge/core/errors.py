from __future__ import annotations

from typing import Optional


class TsMergeError(Exception):
    """Base error for every failure raised by tsmerge."""


class InvalidOptionsError(TsMergeError):
    """Raised for an unknown option table or an unsupported logger value."""


class ScriptParseError(TsMergeError):
    """Raised when a script cannot be parsed under the configured rules."""

    def __init__(self, message: str, *, path: Optional[str] = None) -> None:
        super().__init__(message)
        self.path = path
