from __future__ import annotations

"""Public surface for tsmerge.core.

Data records, the merge context and the error types live here so downstream
code has a single stable import location:

    from tsmerge.core import File, MergeContext, MergeOptions, LogLevel
"""

from tsmerge.core.context import MergeContext, MergeOptions, extend_options
from tsmerge.core.errors import InvalidOptionsError, ScriptParseError, TsMergeError
from tsmerge.core.models import Declaration, File, LogLevel, MergeableBody, SourceMapInfo

__all__ = [
    "Declaration",
    "File",
    "InvalidOptionsError",
    "LogLevel",
    "MergeContext",
    "MergeOptions",
    "MergeableBody",
    "ScriptParseError",
    "SourceMapInfo",
    "TsMergeError",
    "extend_options",
]
