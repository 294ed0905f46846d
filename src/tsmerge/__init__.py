from __future__ import annotations

from tsmerge.cli import CliApplication
from tsmerge.core.context import MergeContext, MergeOptions, extend_options
from tsmerge.core.errors import InvalidOptionsError, ScriptParseError, TsMergeError
from tsmerge.core.models import Declaration, File, LogLevel
from tsmerge.io.file_worker import FileWorker
from tsmerge.processing.dts_processor import DtsProcessor
from tsmerge.processing.js_processor import JsProcessor

__version__ = '1.0.0'


def merge_declarations(file: File | str, options: MergeOptions | None = None) -> File | None:
    """Merge one declaration file with a throwaway context."""
    return DtsProcessor(file, MergeContext(options)).merge()


def merge_script(file: File | str, options: MergeOptions | None = None) -> tuple[File | None, File | None]:
    """Merge one script file; return the merged file and its companion map."""
    processor = JsProcessor(file, MergeContext(options))
    return processor.merge(), processor.source_map_file


__all__ = [
    'CliApplication',
    'Declaration',
    'DtsProcessor',
    'File',
    'FileWorker',
    'InvalidOptionsError',
    'JsProcessor',
    'LogLevel',
    'MergeContext',
    'MergeOptions',
    'ScriptParseError',
    'TsMergeError',
    'extend_options',
    'merge_declarations',
    'merge_script',
]
