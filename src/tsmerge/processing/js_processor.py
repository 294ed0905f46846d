from __future__ import annotations

"""Script (.js) merger.

TypeScript compiles each namespace of each source file into an IIFE module
block:

    var myModule;
    (function (myModule) {[body0]})(myModule || (myModule = {}));
    var myModule;
    (function (myModule) {[body1]})(myModule || (myModule = {}));

Consecutive blocks with the same module name are merged into the first one,
and the merged body is searched again for nested modules:

    var myModule;
    (function (myModule) {[body0; body1]})(myModule || (myModule = {}));
"""

import io
import json
import os
import uuid
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from calmjs.parse import asttypes, es5
from calmjs.parse.exceptions import ECMASyntaxError
from calmjs.parse.sourcemap import encode_sourcemap, write
from calmjs.parse.unparsers.es5 import pretty_printer

from tsmerge.constants import SCRIPT_EXTENSION
from tsmerge.core.context import MergeContext, extend_options
from tsmerge.core.errors import ScriptParseError
from tsmerge.core.models import File, LogLevel, MergeableBody, SourceMapInfo
from tsmerge.processing.sourcemaps import (
    MapLoader,
    classify_source_map,
    load_source_map,
    repair_source_map,
    source_map_comment,
    strip_source_map_comments,
)
from tsmerge.utils.naming import output_name, source_map_name


def _unwrap(node: Any) -> Any:
    """Strip grouping parentheses around an expression."""
    while isinstance(node, asttypes.GroupingOp):
        node = node.expr
    return node


def _dotted_name(node: Any) -> Optional[str]:
    node = _unwrap(node)
    if isinstance(node, asttypes.Identifier):
        return node.value
    if isinstance(node, asttypes.DotAccessor):
        owner = _dotted_name(node.node)
        return f'{owner}.{node.identifier.value}' if owner else None
    return None


def _call_arguments(call: Any) -> Sequence[Any]:
    args = call.args
    if args is None:
        return []
    return getattr(args, 'items', args)


def get_node_name(node: Any) -> Optional[str]:
    """Module name declared by `var name;`, or None for any other statement."""
    if not isinstance(node, asttypes.VarStatement):
        return None
    declarations = list(node.children())
    if len(declarations) != 1:
        return None
    declaration = declarations[0]
    if not isinstance(declaration, asttypes.VarDecl) or declaration.initializer is not None:
        return None
    return _dotted_name(declaration.identifier)


def get_node_body(name: Optional[str], node: Any) -> Optional[List[Any]]:
    """Statement list of an IIFE wrapping module `name`, or None if `node` is not one.

    Accepted shape: `(function (name) {...})(x || (x = {}))` or
    `(function (name) {...})(name = x || (x = {}))`, where the argument's
    left-hand side contains `name`.
    """
    if not name or not isinstance(node, asttypes.ExprStatement):
        return None

    call = _unwrap(node.expr)
    if not isinstance(call, asttypes.FunctionCall):
        return None

    callee = _unwrap(call.identifier)
    if not isinstance(callee, asttypes.FuncExpr) or callee.identifier is not None:
        return None
    parameters = list(callee.parameters or [])
    if len(parameters) != 1 or _dotted_name(parameters[0]) != name:
        return None

    arguments = list(_call_arguments(call))
    if len(arguments) != 1:
        return None
    argument = _unwrap(arguments[0])
    is_logical_or = isinstance(argument, asttypes.BinOp) and argument.op == '||'
    if not (is_logical_or or isinstance(argument, asttypes.Assign)):
        return None
    left_name = _dotted_name(argument.left)
    if left_name is None or name not in left_name:
        return None

    return callee.elements


class JsProcessor:
    """Merges the IIFE module blocks of one script file."""

    def __init__(
        self,
        file: Union[File, str],
        context: Optional[MergeContext] = None,
        *,
        map_loader: Optional[MapLoader] = None,
    ) -> None:
        self._context = context or MergeContext()
        if isinstance(file, str):
            file = File(
                contents=file,
                name=f'unnamed-{uuid.uuid4().hex[:8]}{SCRIPT_EXTENSION}',
                path='',
                size=len(file),
            )
        self._file = file
        self._map_loader = map_loader
        self._merge_count = 0
        self._source_map_file: Optional[File] = None

    @property
    def file(self) -> File:
        return self._file

    @property
    def merge_count(self) -> int:
        return self._merge_count

    @property
    def source_map_file(self) -> Optional[File]:
        """Companion map produced by the last `merge()`, if any."""
        return self._source_map_file

    def merge(self) -> Optional[File]:
        """Merge the script, or return None when scripts are skipped.

        Raises:
            ScriptParseError: If the script cannot be parsed.
        """
        self._source_map_file = None
        self._merge_count = 0
        if self._context.options.skip_scripts:
            return None

        file_path = self._file.full_path
        self._log(f"Initializing merging of file '{file_path}'")

        program = self._parse()
        self.optimize(program.children())
        self._log(f"Total block merges for '{file_path}': {self._merge_count}")

        return self._create_file(program)

    def optimize(self, nodes: List[Any], nesting: int = 0) -> int:
        """Merge same-named module runs of `nodes` in place; return the merge count so far.

        The list is rebuilt rather than spliced while scanning: each run keeps
        its first `var`/IIFE pair, which receives the bodies of the others.
        """
        rebuilt: List[Any] = []
        run: List[MergeableBody] = []

        def _flush() -> None:
            if not run:
                return
            self._merge_bodies(run, nesting)
            rebuilt.extend((run[0].declaration, run[0].wrapper))
            run.clear()

        index = 0
        while index < len(nodes):
            node = nodes[index]
            name = get_node_name(node)
            body = get_node_body(name, nodes[index + 1]) if index + 1 < len(nodes) else None

            # Any other statement may depend on the modules before it, and the
            # modules after it may depend on its effects, so runs stop here.
            if name is None or body is None:
                _flush()
                rebuilt.append(node)
                index += 1
                continue

            if not run or run[0].name != name:
                _flush()
                self._log(f"IIFE block '{name}' found at statement {index}", LogLevel.VERBOSE)

            run.append(MergeableBody(name=name, declaration=node, wrapper=nodes[index + 1], body=body))
            index += 2

        _flush()
        nodes[:] = rebuilt
        return self._merge_count

    def _merge_bodies(self, run: List[MergeableBody], nesting: int) -> None:
        target = run[0].body
        for other in run[1:]:
            target.extend(other.body)
        self._merge_count += len(run) - 1
        self.optimize(target, nesting + 1)

    def _parse(self) -> Any:
        parse_options = extend_options('parse', self._context.options.parse_options)
        try:
            return es5(self._file.contents, **parse_options)
        except ECMASyntaxError as exc:
            error = ScriptParseError(f"Unable to parse '{self._file.full_path}': {exc}", path=self._file.full_path)
            raise self._context.error(error) from exc

    def _generate(self, program: Any, map_name: str) -> Tuple[str, Dict[str, Any]]:
        generate_options = extend_options('generate', self._context.options.generate_options)
        printer = pretty_printer(**generate_options)
        stream = io.StringIO()
        mappings, sources, names = write(printer(program), stream)
        return stream.getvalue(), encode_sourcemap(map_name, mappings, sources, names)

    def _create_file(self, program: Any) -> File:
        options = self._context.options
        name = output_name(self._file.name, SCRIPT_EXTENSION, options.extension_prefix)
        map_name = source_map_name(name)
        out_path = options.out_dir or self._file.path

        code, fresh_map = self._generate(program, name)
        code = strip_source_map_comments(code)

        if not options.skip_source_maps:
            info, original_map = self._original_map()
            if original_map is not None:
                source = self._file.source or self._file
                source_map = repair_source_map(
                    fresh_map,
                    original_map,
                    self._merge_count,
                    file_name=name,
                    source_name=source.name,
                )
                if not code.endswith('\n'):
                    code += '\n'
                code += source_map_comment(info.kind, source_map, map_name)
                map_contents = json.dumps(source_map)
                self._source_map_file = File(
                    contents=map_contents,
                    name=map_name,
                    path=out_path,
                    size=len(map_contents),
                    source=self._file,
                )

        return File(contents=code, name=name, path=out_path, size=len(code), source=self._file)

    def _original_map(self) -> Tuple[SourceMapInfo, Optional[Dict[str, Any]]]:
        info = classify_source_map(self._file.contents)
        if info.kind == 'none':
            if info.url:
                self._log(f"Unreadable source map reference in '{self._file.full_path}'", LogLevel.WARNING)
            return info, None
        try:
            original = load_source_map(info, self._file, self._map_loader)
        except (OSError, ValueError) as exc:
            self._log(f"Unable to load source map '{info.url}': {exc}", LogLevel.WARNING)
            return info, None
        if original is None:
            self._log(f"No source map recovered for '{self._file.full_path}'", LogLevel.VERBOSE)
        return info, original

    def _log(self, message: str, level: LogLevel = LogLevel.INFORMATION) -> None:
        self._context.log(message, level)


def read_map_from_disk(file: File, url: str) -> Optional[str]:
    """Map loader resolving a url-style reference next to the script on disk."""
    if '://' in url:
        return None
    map_path = os.path.join(file.path or '.', url)
    if not os.path.isfile(map_path):
        return None
    with open(map_path, 'r', encoding='utf-8') as handle:
        return handle.read()
