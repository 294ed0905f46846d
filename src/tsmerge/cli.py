from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import List, NoReturn, Optional, Sequence

from tsmerge.constants import DEFAULT_EXTENSION_PREFIX
from tsmerge.core.context import MergeContext, MergeOptions
from tsmerge.core.errors import TsMergeError
from tsmerge.core.models import LogLevel
from tsmerge.io.file_worker import FileWorker
from tsmerge.logging.factory import DefaultLoggerFactory
from tsmerge.logging.helpers import get_logger

logger = get_logger('tsmerge')


def _configure_logging(enable_json: bool) -> None:
    """Configure process-wide logging once, either JSON or plain text."""
    prev = getattr(_configure_logging, '_configured_mode', None)
    if prev is not None and prev == bool(enable_json):
        return
    factory = DefaultLoggerFactory(json_logs=enable_json, level=logging.INFO)
    lg = factory.get_logger('tsmerge')
    global logger
    logger = lg
    setattr(_configure_logging, '_configured_mode', bool(enable_json))


def _build_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser."""
    from tsmerge import __version__

    p = argparse.ArgumentParser(
        prog='tsmerge',
        formatter_class=argparse.RawTextHelpFormatter,
        usage='%(prog)s pattern0 [pattern1 ... patternN] [OPTIONS]',
        description=(
            'tsmerge – merges the namespace blocks of TypeScript output files\n'
            'pattern0...patternN: glob patterns with the .d.ts / .js files to be merged'
        ),
    )
    p.add_argument('patterns', nargs='*', metavar='pattern', help='Glob pattern of files to merge.')

    g_out = p.add_argument_group('Output')
    g_proc = p.add_argument_group('Processing')
    g_misc = p.add_argument_group('Miscellaneous')

    g_out.add_argument(
        '--extension-prefix',
        '--extensionPrefix',
        dest='extension_prefix',
        default=DEFAULT_EXTENSION_PREFIX,
        metavar='PREFIX',
        help="Token inserted before the extension of output files (default: 'merged').\n"
             "An empty string overwrites the input files.",
    )
    g_out.add_argument(
        '-o',
        '--out-dir',
        '--outDir',
        dest='out_dir',
        metavar='DIR',
        help='Directory receiving the merged files (default: next to each input).',
    )

    g_proc.add_argument('-D', '--skip-declarations', '--skipDeclarations', dest='skip_declarations',
                        action='store_true', help='Do not merge .d.ts files.')
    g_proc.add_argument('-S', '--skip-scripts', '--skipScripts', dest='skip_scripts',
                        action='store_true', help='Do not merge .js files.')
    g_proc.add_argument('-M', '--skip-source-maps', '--skipSourceMaps', dest='skip_source_maps',
                        action='store_true', help='Do not generate .map files.')
    g_proc.add_argument('--fail-fast', dest='fail_fast', action='store_true',
                        help='Abort the whole run on the first file that fails to merge.')

    g_misc.add_argument('--logger', choices=('none', 'console'), default='console',
                        help='Merge log output (default: console).')
    g_misc.add_argument('--json-logs', dest='json_logs', action='store_true',
                        help='Emit log records as JSON lines.')
    g_misc.add_argument('--report', action='store_true',
                        help='Print the run report as JSON on stdout.')
    g_misc.add_argument('-V', '--version', action='version', version=f'TypeScript Merger (tsmerge) {__version__}')
    return p


def options_from_args(ns: argparse.Namespace) -> MergeOptions:
    return MergeOptions(
        extension_prefix=ns.extension_prefix if ns.extension_prefix is not None else DEFAULT_EXTENSION_PREFIX,
        out_dir=ns.out_dir,
        logger=ns.logger,
        skip_declarations=ns.skip_declarations,
        skip_scripts=ns.skip_scripts,
        skip_source_maps=ns.skip_source_maps,
    )


class CliApplication:
    """Application behind the command-line interface."""

    def __init__(self, argv: Sequence[str]) -> None:
        self._parser = _build_parser()
        self._ns = self._parser.parse_args(list(argv))
        self._context = MergeContext(options_from_args(self._ns))
        self._worker = FileWorker(self._context, fail_fast=self._ns.fail_fast)

    @property
    def context(self) -> MergeContext:
        return self._context

    @property
    def worker(self) -> FileWorker:
        return self._worker

    def run(self) -> int:
        """Run the merge and return the process exit code."""
        if not self._ns.patterns:
            self._parser.print_help()
            return 0

        self._worker.add_glob_patterns(self._ns.patterns)
        files = self._worker.work()
        self._worker.write(files)

        report = self._worker.report
        self._context.log(f'Files processed in {report.elapsed()}')
        self._context.log(
            f'{report.files_written} file(s) written, {report.files_skipped} skipped, '
            f'{report.files_failed} failed (from {report.files_total} queued)'
        )

        skipped = len(self._worker.unsaved)
        if skipped:
            self._context.log(f'Skipped {skipped} files due to unknown file name', LogLevel.VERBOSE)

        for message in report.errors:
            self._context.log(message, LogLevel.ERROR)

        if self._ns.report:
            print(report.to_json())

        if report.files_failed:
            return 1
        self._context.log('Done', LogLevel.SUCCESS)
        return 0


def run(argv: Sequence[str]) -> int:
    json_logs = '--json-logs' in argv or os.getenv('TSMERGE_JSON_LOGS') == '1'
    _configure_logging(json_logs)
    return CliApplication(argv).run()


def main(argv: Optional[List[str]] = None) -> NoReturn:
    """Entry point for the `tsmerge` console script."""
    try:
        raise SystemExit(run(sys.argv[1:] if argv is None else argv))
    except KeyboardInterrupt:
        logger.error('Interrupted by user.')
        raise SystemExit(130)
    except BrokenPipeError:
        raise SystemExit(0)
    except (TsMergeError, OSError) as exc:
        if os.getenv('DEBUG') == '1':
            raise
        logger.error('%s', exc)
        raise SystemExit(1)


if __name__ == '__main__':
    main()
