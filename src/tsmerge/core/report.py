from __future__ import annotations

"""
Runtime report of a merge run.

Tracks how many files were queued, written, skipped (no usable name) and
failed, the time spent per stage and every error message, so the CLI can
print a summary once the worker is done.
"""

import json
import time
from dataclasses import dataclass, field
from typing import Dict, List


@dataclass
class MergeReport:
    started_at: float = field(default_factory=time.perf_counter)
    finished_at: float | None = None
    duration_s: float | None = None

    files_total: int = 0
    files_by_kind: Dict[str, int] = field(default_factory=lambda: {'declaration': 0, 'script': 0})
    files_written: int = 0
    files_skipped: int = 0
    files_failed: int = 0

    bytes_in: int = 0
    bytes_out: int = 0

    time_by_stage: Dict[str, float] = field(
        default_factory=lambda: {
            'read': 0.0,
            'declarations': 0.0,
            'scripts': 0.0,
            'write': 0.0,
        }
    )

    errors: List[str] = field(default_factory=list)

    def add_file(self, kind: str, size: int) -> None:
        self.files_total += 1
        self.files_by_kind[kind] = self.files_by_kind.get(kind, 0) + 1
        self.bytes_in += size

    def add_written(self, size: int) -> None:
        self.files_written += 1
        self.bytes_out += size

    def add_skipped(self) -> None:
        self.files_skipped += 1

    def add_time(self, stage: str, seconds: float) -> None:
        self.time_by_stage[stage] = self.time_by_stage.get(stage, 0.0) + seconds

    def add_error(self, message: str) -> None:
        self.files_failed += 1
        self.errors.append(message)

    def finish(self) -> None:
        self.finished_at = time.perf_counter()
        self.duration_s = self.finished_at - self.started_at

    def elapsed(self) -> str:
        """Human readable duration, e.g. '0.231s' or '1m 4.020s'."""
        seconds = self.duration_s
        if seconds is None:
            seconds = time.perf_counter() - self.started_at
        minutes, seconds = divmod(seconds, 60)
        if minutes:
            return f'{int(minutes)}m {seconds:.3f}s'
        return f'{seconds:.3f}s'

    def to_json(self, *, indent: int = 2) -> str:
        return json.dumps(
            {
                'started_at': self.started_at,
                'finished_at': self.finished_at,
                'duration_s': self.duration_s,
                'files_total': self.files_total,
                'files_by_kind': self.files_by_kind,
                'files_written': self.files_written,
                'files_skipped': self.files_skipped,
                'files_failed': self.files_failed,
                'bytes_in': self.bytes_in,
                'bytes_out': self.bytes_out,
                'time_by_stage': self.time_by_stage,
                'errors': self.errors,
            },
            indent=indent,
        )


class StageTimer:
    def __init__(self, report: MergeReport, stage: str):
        self._report = report
        self._stage = stage
        self._t0: float | None = None

    def __enter__(self):
        self._t0 = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc, tb):
        if self._t0 is not None:
            self._report.add_time(self._stage, time.perf_counter() - self._t0)
        return False
