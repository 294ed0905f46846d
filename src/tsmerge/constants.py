from __future__ import annotations

"""Project-wide constants used across modules.

This module isolates the merge heuristics and the default option tables so the
processors, the context and the CLI share a single source of truth.
"""

import re

# Groups: 1 - indentation, 2 - type, 3 - name
DECLARATION_REGEX: re.Pattern[str] = re.compile(r'^(.*?)declare (namespace) (.*?)\{', re.IGNORECASE | re.MULTILINE)

# Minimum distance between two declarations for the text in between to be kept.
GAP_THRESHOLD: int = 3

ADDITIONAL_NAME: str = '__additionalDeclaration'
ADDITIONAL_REGEX: re.Pattern[str] = re.compile(r'__additionalDeclaration[0-9]+', re.IGNORECASE)

DECLARATION_EXTENSION: str = '.d.ts'
SCRIPT_EXTENSION: str = '.js'
SOURCE_MAP_EXTENSION: str = '.map'

DEFAULT_EXTENSION_PREFIX: str = 'merged'

DEFAULT_GENERATE_OPTIONS: dict = {
    'indent_str': '    ',
}

DEFAULT_PARSE_OPTIONS: dict = {
    'with_comments': True,
}

DEFAULT_MERGE_OPTIONS: dict = {
    'extension_prefix': DEFAULT_EXTENSION_PREFIX,
    'out_dir': None,
    'logger': 'console',
    'skip_declarations': False,
    'skip_scripts': False,
    'skip_source_maps': False,
}
