from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Dict, List, Literal, Optional

SourceMapKind = Literal['inline', 'url', 'none']


class LogLevel(IntEnum):
    """Merge log levels, ordered by increasing severity."""
    VERBOSE = 0
    INFORMATION = 1
    WARNING = 2
    ERROR = 3
    SUCCESS = 4


@dataclass
class File:
    """A file record exchanged between the worker and the processors.

    `path` is the directory (without the file name); `source` points at the
    record this file was produced from and is only read for reporting.
    """
    contents: str
    name: str
    path: str = ''
    size: Optional[int] = None
    source: Optional['File'] = None

    def length(self) -> int:
        if self.size is None:
            self.size = len(self.contents)
        return self.size

    @property
    def full_path(self) -> str:
        if not self.path:
            return self.name
        return f'{self.path.rstrip("/")}/{self.name}'


@dataclass
class Declaration:
    """A `declare namespace` block located in a declaration file."""
    name: str
    start_index: int
    end_index: Optional[int] = None
    body: Optional[str] = None


@dataclass
class MergeableBody:
    """One IIFE module wrapper waiting to be merged with its same-named siblings."""
    name: str
    declaration: Any
    wrapper: Any
    body: List[Any] = field(default_factory=list)


@dataclass(frozen=True)
class SourceMapInfo:
    kind: SourceMapKind = 'none'
    url: Optional[str] = None
    data: Optional[Dict[str, Any]] = None
