from __future__ import annotations

"""
File worker: queues declaration and script files, runs the processors and
writes the results back to disk.

The processors never touch the filesystem; this module owns discovery
(explicit paths and glob patterns), reading, map loading and writing.
"""

import glob
import os
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from tsmerge.constants import DECLARATION_EXTENSION, SCRIPT_EXTENSION
from tsmerge.core.context import MergeContext
from tsmerge.core.errors import TsMergeError
from tsmerge.core.interfaces import LoggerLikeProtocol, MergeProcessorProtocol
from tsmerge.core.models import File, LogLevel
from tsmerge.core.report import MergeReport, StageTimer
from tsmerge.logging.helpers import get_logger
from tsmerge.processing.dts_processor import DtsProcessor
from tsmerge.processing.js_processor import JsProcessor, read_map_from_disk
from tsmerge.utils.naming import has_prefix_marker

QueueItem = Union[str, File]


def is_declaration_path(path: str) -> bool:
    return path.lower().endswith(DECLARATION_EXTENSION)


def is_script_path(path: str) -> bool:
    return Path(path).suffix.lower() == SCRIPT_EXTENSION


def expand_pattern(pattern: str) -> List[Path]:
    """Return the files matching `pattern`, sorted.

    The leading parts without wildcards form the base directory, the rest is
    matched with `Path.glob` (`**` recurses).
    """
    parts = Path(pattern).parts
    for index, part in enumerate(parts):
        if glob.has_magic(part):
            base = Path(*parts[:index]) if index else Path('.')
            return sorted(p for p in base.glob(str(Path(*parts[index:]))) if p.is_file())
    path = Path(pattern)
    return [path] if path.is_file() else []


class FileWorker:
    """Controls the processors for many files, declarations and scripts alike."""

    def __init__(
        self,
        context: Optional[MergeContext] = None,
        *,
        fail_fast: bool = False,
        logger: Optional[LoggerLikeProtocol] = None,
    ) -> None:
        self._context = context or MergeContext()
        self._fail_fast = fail_fast
        self._log = logger or get_logger('io.worker')
        self._dts_list: List[QueueItem] = []
        self._js_list: List[QueueItem] = []
        self._unsaved: List[File] = []
        self._failed: List[QueueItem] = []
        self._report = MergeReport()

    @property
    def dts_list(self) -> Tuple[QueueItem, ...]:
        return tuple(self._dts_list)

    @property
    def js_list(self) -> Tuple[QueueItem, ...]:
        return tuple(self._js_list)

    @property
    def unsaved(self) -> List[File]:
        """Files not written by `write` because they carry no name."""
        return self._unsaved

    @property
    def failed(self) -> List[QueueItem]:
        return self._failed

    @property
    def report(self) -> MergeReport:
        return self._report

    # -------- Queueing --------

    def add_dts(self, file_path: str) -> None:
        if not Path(file_path).exists():
            self._context.log(f"File '{file_path}' does not exist. Skipping", LogLevel.WARNING)
            return
        if not is_declaration_path(file_path):
            self._context.log(f"File '{file_path}' extension is not d.ts", LogLevel.WARNING)
        self._dts_list.append(file_path)

    def add_js(self, file_path: str) -> None:
        if not Path(file_path).exists():
            self._context.log(f"File '{file_path}' does not exist. Skipping", LogLevel.WARNING)
            return
        if not is_script_path(file_path):
            self._context.log(f"File '{file_path}' extension is not js", LogLevel.WARNING)
        self._js_list.append(file_path)

    def add_file(self, file_path: str) -> None:
        """Queue a single path according to its extension."""
        if is_declaration_path(file_path):
            self.add_dts(file_path)
        elif is_script_path(file_path):
            self.add_js(file_path)
        else:
            self._context.log(f"File '{file_path}' is neither d.ts nor js. Ignoring", LogLevel.VERBOSE)

    def add_files(self, files: Iterable[File]) -> None:
        """Queue in-memory file records."""
        for file in files:
            if is_declaration_path(file.name):
                self._dts_list.append(file)
            elif is_script_path(file.name):
                self._js_list.append(file)

    def add_glob_patterns(self, patterns: Sequence[str], root: Optional[str] = None) -> int:
        """Queue every file matching `patterns`; return how many were added.

        Files that already carry the merge marker (`*.<prefix>.*`) are
        ignored so a second run does not re-merge its own output.
        """
        prefix = self._context.options.extension_prefix
        seen = set(p for p in self._dts_list + self._js_list if isinstance(p, str))
        count = 0
        for pattern in patterns:
            if root and not Path(pattern).is_absolute():
                pattern = str(Path(root, pattern))
            for file_path in expand_pattern(pattern):
                path = str(file_path)
                if path in seen or has_prefix_marker(file_path.name, prefix):
                    continue
                if is_declaration_path(path):
                    self._dts_list.append(path)
                elif is_script_path(path):
                    self._js_list.append(path)
                else:
                    continue
                seen.add(path)
                count += 1
        self._context.log(f'Added {count} file(s) to the queue')
        return count

    # -------- Processing --------

    def work(self) -> List[File]:
        """Merge every queued file and return the produced files.

        Declarations are processed before scripts; each script may add its
        companion source map right after it.
        """
        self._report = MergeReport()
        results: List[File] = []

        for item in self._dts_list:
            file = self._read_item(item, 'declaration')
            if file is None:
                continue
            with StageTimer(self._report, 'declarations'):
                merged = self._run(DtsProcessor(file, self._context), item)
            if merged is not None:
                results.append(merged)

        for item in self._js_list:
            file = self._read_item(item, 'script')
            if file is None:
                continue
            processor = JsProcessor(file, self._context, map_loader=read_map_from_disk)
            with StageTimer(self._report, 'scripts'):
                merged = self._run(processor, item)
            if merged is not None:
                results.append(merged)
            if processor.source_map_file is not None:
                results.append(processor.source_map_file)

        self._report.finish()
        return results

    def work_and_write(self) -> List[File]:
        files = self.work()
        self.write(files)
        return files

    def write(self, files: Union[File, Iterable[File]]) -> None:
        """Write files to disk; nameless files are kept in `unsaved`."""
        if isinstance(files, File):
            files = [files]

        with StageTimer(self._report, 'write'):
            for file in files:
                if not file.name:
                    self._unsaved.append(file)
                    self._report.add_skipped()
                    continue

                directory = Path(file.path or '.')
                file_path = directory / file.name
                size = file.length()

                if file.source is not None:
                    source_size = file.source.length()
                    self._context.log(f'{file_path}: ({size} bytes (from {source_size} bytes)).')

                directory.mkdir(parents=True, exist_ok=True)
                with open(file_path, 'w', encoding='utf-8', newline='') as handle:
                    handle.write(file.contents)
                self._report.add_written(size)

    # -------- Internal helpers --------

    def _run(self, processor: MergeProcessorProtocol, item: QueueItem) -> Optional[File]:
        try:
            return processor.merge()
        except TsMergeError as exc:
            if exc not in self._context.errors:
                self._context.error(exc)
            self._report.add_error(str(exc))
            self._failed.append(item)
            if self._fail_fast:
                raise
            return None

    def _read_item(self, item: QueueItem, kind: str) -> Optional[File]:
        with StageTimer(self._report, 'read'):
            try:
                file = self._read(item)
            except OSError as exc:
                message = f"Unable to read '{item}': {exc}"
                self._context.error(message)
                self._report.add_error(message)
                self._failed.append(item)
                if self._fail_fast:
                    raise
                return None
        self._report.add_file(kind, file.length())
        return file

    def _read(self, item: QueueItem) -> File:
        if isinstance(item, File):
            return item
        self._log.debug('reading %s', item)
        file_path = Path(item)
        data = file_path.read_text(encoding='utf-8')
        return File(
            contents=data,
            name=file_path.name,
            path=os.path.dirname(item),
            size=len(data),
        )
