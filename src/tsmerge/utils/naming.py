from __future__ import annotations
"""Output file naming.

The merge prefix is inserted right before the file extension:

    output_name("widget.d.ts", ".d.ts", "merged") -> "widget.merged.d.ts"
    output_name("widget.js", ".js", "opt")         -> "widget.opt.js"
    output_name("widget.js", ".js", "")            -> "widget.js"

An empty prefix would produce a doubled dot, which is collapsed so the output
name equals the input name (overwrite-style naming).
"""

import os


def prefixed_extension(extension: str, prefix: str) -> str:
    """Return `.<prefix><extension>` with a doubled separator collapsed."""
    return f'.{prefix or ""}{extension}'.replace('..', '.')


def output_name(name: str, extension: str, prefix: str) -> str:
    """Insert the merge prefix before `extension` in `name`.

    Names not ending with `extension` get the prefix before their own final
    suffix, so the output never silently takes the input's name.
    """
    new_extension = prefixed_extension(extension, prefix)
    if name.lower().endswith(extension.lower()):
        return name[: len(name) - len(extension)] + new_extension
    stem, suffix = os.path.splitext(name)
    if not suffix:
        return name + prefixed_extension('', prefix).rstrip('.')
    return stem + prefixed_extension(suffix, prefix)


def source_map_name(script_name: str) -> str:
    return f'{script_name}.map'


def has_prefix_marker(name: str, prefix: str) -> bool:
    """True if `name` already carries the `.<prefix>.` merge marker."""
    return bool(prefix) and f'.{prefix}.' in name
