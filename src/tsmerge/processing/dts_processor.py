from __future__ import annotations

"""Declaration (d.ts) merger.

The TypeScript compiler emits one `declare namespace` block per source file
when concatenating output. This processor regroups every block of the same
namespace into a single one, in order of first appearance:

    declare namespace om {
        type A = number;
    }
    declare namespace om {
        interface B {}
    }

becomes

    declare namespace om {
        type A = number;
        interface B {}
    }

Text found outside recognized blocks (wider than GAP_THRESHOLD) is kept
verbatim as an "additional declaration" fragment.
"""

import dataclasses
import os
import uuid
from typing import Dict, List, Optional, Union

from tsmerge.constants import (
    ADDITIONAL_NAME,
    ADDITIONAL_REGEX,
    DECLARATION_EXTENSION,
    DECLARATION_REGEX,
    GAP_THRESHOLD,
)
from tsmerge.core.context import MergeContext
from tsmerge.core.models import Declaration, File, LogLevel
from tsmerge.utils.naming import output_name

DeclarationGroups = Dict[str, List[Declaration]]


def scan_declarations(data: str) -> List[Declaration]:
    """Locate every namespace opening and back-fill the previous block's body.

    A block's body runs from its own start to one character before the next
    block's start; the last block runs to the end of the text.
    """
    result: List[Declaration] = []
    previous: Optional[Declaration] = None

    for match in DECLARATION_REGEX.finditer(data):
        if previous is not None:
            end_index = match.start() - 1
            previous.body = data[previous.start_index:end_index]
            previous.end_index = end_index

        current = Declaration(name=match.group(3).strip(), start_index=match.start())
        result.append(current)
        previous = current

    if previous is not None:
        previous.body = data[previous.start_index:]
        previous.end_index = len(data)

    return result


def strip_declaration(declaration: Declaration) -> Declaration:
    """Remove the header and the closing brace from a scanned declaration body.

    `end_index` is moved onto the absolute offset of the closing brace. A body
    without a closing brace is left whole.
    """
    body = declaration.body or ''
    last_bracket = body.rfind('}')
    if last_bracket >= 0:
        end_index = declaration.start_index + last_bracket
        body = body[:last_bracket]
    else:
        end_index = declaration.end_index
    body = DECLARATION_REGEX.sub('', body, count=1)
    return dataclasses.replace(declaration, body=body, end_index=end_index)


def organize_declarations(data: str, declarations: List[Declaration]) -> DeclarationGroups:
    """Group stripped declarations by name, keeping gaps as extra fragments."""
    result: DeclarationGroups = {}
    extra_count = 0
    previous_end = -1

    def _add_extra(start: int, end: int) -> None:
        nonlocal extra_count
        extra = Declaration(name=ADDITIONAL_NAME, start_index=start, end_index=end, body=data[start:end])
        result.setdefault(f'{ADDITIONAL_NAME}{extra_count}', []).append(extra)
        extra_count += 1

    for index, raw in enumerate(declarations):
        declaration = strip_declaration(raw)

        if index == 0:
            # Leading content such as `/// <reference ... />` lines.
            if declaration.start_index >= GAP_THRESHOLD:
                _add_extra(0, declaration.start_index)
        elif declaration.start_index - previous_end >= GAP_THRESHOLD:
            _add_extra(previous_end + 1, declaration.start_index)

        previous_end = declaration.end_index
        result.setdefault(declaration.name, []).append(declaration)

    if len(data) - previous_end >= GAP_THRESHOLD:
        _add_extra(previous_end + 1, len(data))

    return result


def count_groups(groups: DeclarationGroups) -> int:
    """Number of emitted groups, with all extra fragments counted once."""
    named = sum(1 for key in groups if not ADDITIONAL_REGEX.fullmatch(key))
    has_extra = any(ADDITIONAL_REGEX.fullmatch(key) for key in groups)
    return max(named + int(has_extra), 1)


def join_declarations(declarations: List[Declaration], separator: str = '') -> str:
    bodies = [d.body or '' for d in declarations]
    return separator.join(body for body in bodies if body.strip())


def render_groups(groups: DeclarationGroups) -> str:
    parts: List[str] = []
    for name, declarations in groups.items():
        # Additional declarations carry their own text, no namespace wrapper.
        if ADDITIONAL_REGEX.fullmatch(name):
            parts.append(join_declarations(declarations))
            continue
        parts.append(f'declare namespace {name} {{\n\t')
        parts.append(join_declarations(declarations, '\t'))
        parts.append('}\n')
    return ''.join(parts).replace('\r\n', '\n').replace('\n\r', '\n')


class DtsProcessor:
    """Merges the namespace blocks of one declaration file."""

    def __init__(self, file: Union[File, str], context: Optional[MergeContext] = None) -> None:
        self._context = context or MergeContext()
        if isinstance(file, str):
            file = File(
                contents=file,
                name=f'unnamed-{uuid.uuid4().hex[:8]}{DECLARATION_EXTENSION}',
                path=os.getcwd(),
                size=len(file),
            )
        self._file = file

    @property
    def file(self) -> File:
        return self._file

    def merge(self) -> Optional[File]:
        """Merge the file, or return None when declarations are skipped."""
        options = self._context.options
        if options.skip_declarations:
            return None

        self._file.length()
        file_path = self._file.full_path
        self._log(f"Initializing merging of file '{file_path}'")

        declarations = scan_declarations(self._file.contents)

        if not declarations:
            self._log(f"'{file_path}' has 0 mergeable declarations")
            return dataclasses.replace(
                self._file,
                name=self._output_name(),
                path=options.out_dir or self._file.path,
            )

        groups = organize_declarations(self._file.contents, declarations)
        self._log(
            f"Total merged namespaces for '{file_path}': {count_groups(groups)} (from {len(declarations)})"
        )
        return self._create_file(render_groups(groups))

    def _create_file(self, contents: str) -> File:
        return File(
            contents=contents,
            name=self._output_name(),
            path=self._context.options.out_dir or self._file.path,
            size=len(contents),
            source=self._file,
        )

    def _output_name(self) -> str:
        return output_name(self._file.name, DECLARATION_EXTENSION, self._context.options.extension_prefix)

    def _log(self, message: str, level: LogLevel = LogLevel.INFORMATION) -> None:
        self._context.log(message, level)
