from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable

from tsmerge.core.models import File


@runtime_checkable
class MergeProcessorProtocol(Protocol):
    """A processor reads one file and merges its namespace blocks.

    Implementations return None when their file kind is configured to be
    skipped.
    """

    def merge(self) -> Optional[File]:
        ...
