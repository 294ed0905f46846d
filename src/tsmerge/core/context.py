from __future__ import annotations

"""Merge options and the context object shared by every processor of a run.

The context carries the options, the merge-log sink and the list of errors
reported during the run. It holds no merge state, so the same context can be
handed to any number of processors.
"""

import copy
from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Literal, Mapping, Optional, Union

from tsmerge.constants import (
    DEFAULT_EXTENSION_PREFIX,
    DEFAULT_GENERATE_OPTIONS,
    DEFAULT_MERGE_OPTIONS,
    DEFAULT_PARSE_OPTIONS,
)
from tsmerge.core.errors import InvalidOptionsError, TsMergeError
from tsmerge.core.interfaces.logging import MergeLoggerProtocol
from tsmerge.core.models import LogLevel
from tsmerge.logging.sinks import LoggerFunction, build_sink

OptionsKind = Literal['generate', 'merge', 'parse']

_DEFAULTS: Dict[str, Mapping[str, Any]] = {
    'generate': DEFAULT_GENERATE_OPTIONS,
    'merge': DEFAULT_MERGE_OPTIONS,
    'parse': DEFAULT_PARSE_OPTIONS,
}


def extend_options(kind: OptionsKind, options: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
    """Return a fresh copy of the `kind` defaults updated with `options`.

    Args:
        kind: "generate" (printer options), "merge" (MergeOptions fields) or
            "parse" (parser options).
        options: Values replacing the defaults on key conflicts.

    Raises:
        InvalidOptionsError: When `kind` is not a known option table.
    """
    try:
        defaults = _DEFAULTS[kind]
    except KeyError:
        raise InvalidOptionsError(f"Invalid options type: '{kind}'.") from None
    result = copy.deepcopy(dict(defaults))
    result.update(options or {})
    return result


@dataclass
class MergeOptions:
    """Options that adjust a merge run."""

    extension_prefix: str = DEFAULT_EXTENSION_PREFIX
    out_dir: Optional[str] = None
    logger: Union[str, LoggerFunction, MergeLoggerProtocol, None] = 'console'
    skip_declarations: bool = False
    skip_scripts: bool = False
    skip_source_maps: bool = False
    generate_options: Dict[str, Any] = field(default_factory=dict)
    parse_options: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> 'MergeOptions':
        """Build options from a plain mapping, rejecting unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(values) - known)
        if unknown:
            raise InvalidOptionsError(f'Unknown merge option(s): {", ".join(unknown)}')
        return cls(**extend_options('merge', values))


class MergeContext:
    """Central references for a merge run: options, log sink and errors."""

    def __init__(self, options: Union[MergeOptions, Mapping[str, Any], None] = None) -> None:
        if options is None:
            options = MergeOptions()
        elif not isinstance(options, MergeOptions):
            options = MergeOptions.from_mapping(options)
        self._options = options
        self._logger = build_sink(options.logger)
        self._errors: List[Exception] = []

    @property
    def options(self) -> MergeOptions:
        return self._options

    @property
    def logger(self) -> MergeLoggerProtocol:
        return self._logger

    @property
    def errors(self) -> List[Exception]:
        return self._errors

    @property
    def has_errors(self) -> bool:
        return len(self._errors) > 0

    def error(self, error: Union[str, Exception]) -> Exception:
        """Record an error and log it at Error level.

        A string is wrapped into a TsMergeError. The error instance is returned
        so callers can write `raise context.error(...)`.
        """
        if isinstance(error, str):
            error = TsMergeError(error)
        self._errors.append(error)
        self.log(str(error), LogLevel.ERROR)
        return error

    def log(self, message: str, level: LogLevel = LogLevel.INFORMATION, newline: bool = True) -> None:
        self._logger.log(message, level, newline)
