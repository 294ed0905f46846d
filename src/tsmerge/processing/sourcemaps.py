from __future__ import annotations

"""Source map classification and repair for merged scripts.

A script's map reference is read from its trailing `sourceMappingURL`
comment:

    //# sourceMappingURL=data:application/json;base64,eyJ2Z...   -> inline
    //# sourceMappingURL=app.js.map                              -> url
    (no comment, or an unreadable data URI)                       -> none

Repair is best-effort: anything that cannot be decoded degrades to "none".
"""

import base64
import binascii
import json
import re
from typing import Any, Callable, Dict, Mapping, Optional

from tsmerge.core.models import File, SourceMapInfo

MapLoader = Callable[[File, str], Optional[str]]

SOURCE_MAP_COMMENT_REGEX = re.compile(
    r'^[ \t]*(?://[#@][ \t]*sourceMappingURL=(?P<line>[^\s]+)[ \t]*'
    r'|/\*[#@][ \t]*sourceMappingURL=(?P<block>[^\s*]+)[ \t]*\*/[ \t]*)$\n?',
    re.MULTILINE,
)
DATA_URI_REGEX = re.compile(r'^data:application/json(?:;charset=[\w-]+)?;base64,(?P<payload>.*)$', re.IGNORECASE)

INLINE_PREFIX = 'data:application/json;charset=utf-8;base64,'

# Fields inherited from the original map when rebuilding one.
INHERITED_FIELDS = ('file', 'names', 'sourceRoot', 'sources', 'sourcesContent')


def find_source_map_comment(text: str) -> Optional[str]:
    """Return the value of the last sourceMappingURL comment in `text`."""
    value = None
    for match in SOURCE_MAP_COMMENT_REGEX.finditer(text):
        value = match.group('line') or match.group('block')
    return value


def decode_data_uri(value: str) -> Dict[str, Any]:
    """Decode a base64 JSON data URI.

    Raises:
        ValueError: If the URI is not a base64 JSON document.
    """
    match = DATA_URI_REGEX.match(value)
    if not match:
        raise ValueError(f'unsupported data URI: {value[:40]!r}')
    try:
        raw = base64.b64decode(match.group('payload'), validate=True)
    except binascii.Error as exc:
        raise ValueError(f'invalid base64 payload: {exc}') from exc
    data = json.loads(raw.decode('utf-8'))
    if not isinstance(data, dict):
        raise ValueError('source map is not a JSON object')
    return data


def classify_source_map(text: str) -> SourceMapInfo:
    """Classify the map reference carried by `text` as inline, url or none.

    An unreadable data URI is reported as kind "none" with its `url` set, so
    callers can tell a broken reference from a missing one.
    """
    value = find_source_map_comment(text)
    if not value:
        return SourceMapInfo()
    if value.lower().startswith('data:'):
        try:
            return SourceMapInfo(kind='inline', url=value, data=decode_data_uri(value))
        except ValueError:
            return SourceMapInfo(kind='none', url=value)
    return SourceMapInfo(kind='url', url=value)


def load_source_map(info: SourceMapInfo, file: File, map_loader: Optional[MapLoader] = None) -> Optional[Dict[str, Any]]:
    """Return the original map for `info`, or None if it cannot be recovered.

    Raises:
        ValueError: If a url map was loaded but is not a JSON object.
    """
    if info.kind == 'inline':
        return info.data
    if info.kind != 'url' or map_loader is None or not info.url:
        return None
    raw = map_loader(file, info.url)
    if raw is None:
        return None
    data = json.loads(raw)
    if not isinstance(data, dict):
        raise ValueError('source map is not a JSON object')
    return data


def repair_source_map(
    fresh: Mapping[str, Any],
    original: Mapping[str, Any],
    merge_count: int,
    *,
    file_name: str,
    source_name: str,
) -> Dict[str, Any]:
    """Build the output map from a freshly generated one and the original map.

    The fresh map supplies the mappings; the original supplies the static
    metadata. With no merge, the original mappings are kept verbatim.
    """
    placeholders: Dict[str, Any] = {
        'file': file_name,
        'names': [''],
        'sourceRoot': '',
        'sources': [source_name],
        'sourcesContent': [],
    }
    result = dict(fresh)
    for key in INHERITED_FIELDS:
        result[key] = original.get(key, placeholders[key])

    if merge_count == 0 and original.get('mappings') is not None:
        result['mappings'] = original['mappings']

    if not result.get('sourcesContent'):
        result.pop('sourcesContent', None)

    result.setdefault('version', 3)
    return result


def strip_source_map_comments(text: str) -> str:
    return SOURCE_MAP_COMMENT_REGEX.sub('', text)


def source_map_comment(kind: str, source_map: Mapping[str, Any], map_name: str) -> str:
    """Return the reference comment to append for `kind`, or '' for none."""
    if kind == 'inline':
        encoded = base64.b64encode(json.dumps(source_map).encode('utf-8')).decode('ascii')
        return f'//# sourceMappingURL={INLINE_PREFIX}{encoded}\n'
    if kind == 'url':
        return f'//# sourceMappingURL={map_name}\n'
    return ''
