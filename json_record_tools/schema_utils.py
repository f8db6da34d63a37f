from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, List, Optional, Tuple

from .paths import ARRAY_MARKER, join_path, split_path
from .values import (
    ARRAY,
    OBJECT,
    STRING,
    UNSERIALIZABLE,
    compact_dumps,
    json_type,
)

logger = logging.getLogger(__name__)

# Only the head of a data set is walked for field discovery. Fields that
# first appear after this many records are not reported.
DEFAULT_SAMPLE_SIZE = 100

SAMPLE_STRING_LIMIT = 100

FIELD_DESCRIPTIONS = {
    'artistName': 'Artist or band name',
    'musicBrainzArtistID': 'Unique MusicBrainz identifier',
    'mvids': 'Array of music videos',
    'status': 'Processing status (pending/processing/completed/error)',
    'error': 'Error message if processing failed',
    'strDescription': 'Video description text (often large)',
    'strMusicVid': 'Music video URL',
    'strTrackThumb': 'Track thumbnail image URL',
    'intDuration': 'Track duration in seconds',
}


@dataclass
class FieldDescriptor:
    path: Tuple[str, ...]
    type: str
    sample_value: Any = None
    is_selected: bool = True
    description: str = ''

    @property
    def key(self) -> str:
        return join_path(self.path)

    @property
    def name(self) -> str:
        return self.path[-1] if self.path else ''


@dataclass(frozen=True)
class SchemaSnapshot:
    fields: Tuple[FieldDescriptor, ...] = ()
    total_records: int = 0
    estimated_size: str = '0 B'
    data_types: Dict[str, int] = field(default_factory=dict)

    @property
    def keys(self) -> List[str]:
        return [f.key for f in self.fields]

    def get(self, key: str) -> Optional[FieldDescriptor]:
        for descriptor in self.fields:
            if descriptor.key == key:
                return descriptor
        return None


def sample_value(value: Any) -> Any:
    kind = json_type(value)
    if kind == STRING and len(value) > SAMPLE_STRING_LIMIT:
        return value[:SAMPLE_STRING_LIMIT] + '...'
    if kind == ARRAY:
        return f"Array[{len(value)}]"
    if kind == OBJECT:
        return f"Object{{{len(value)} keys}}"
    return value


def describe_field(key: str, value: Any) -> str:
    if key in FIELD_DESCRIPTIONS:
        return FIELD_DESCRIPTIONS[key]
    if json_type(value) == STRING and value.startswith('http'):
        return 'URL or web link'
    if key == 'id' or 'ID' in key or 'Id' in key:
        return 'Unique identifier'
    return ''


def format_size(num_bytes: int) -> str:
    if num_bytes < 1024:
        return f"{num_bytes} B"
    if num_bytes < 1024 ** 2:
        return f"{num_bytes / 1024:.1f} KB"
    if num_bytes < 1024 ** 3:
        return f"{num_bytes / 1024 ** 2:.1f} MB"
    return f"{num_bytes / 1024 ** 3:.1f} GB"


def estimate_size(data: Any) -> str:
    text = compact_dumps(data)
    if text == UNSERIALIZABLE:
        return 'unknown'
    return format_size(len(text.encode('utf-8')))


def collect_fields(
    node: Any,
    path: Tuple[str, ...],
    found: Dict[str, FieldDescriptor],
    ancestors: FrozenSet[int] = frozenset(),
) -> None:
    """Walk one record, registering a descriptor for every first-seen path.

    A container that is one of its own ancestors is registered but not
    descended into.
    """
    kind = json_type(node)
    if kind not in (ARRAY, OBJECT) or id(node) in ancestors:
        return
    ancestors = ancestors | {id(node)}

    if kind == ARRAY:
        # Arrays are characterised by their first element only.
        if node:
            collect_fields(node[0], path + (ARRAY_MARKER,), found, ancestors)
        return

    for k, v in node.items():
        child_path = path + (str(k),)
        child_key = join_path(child_path)
        if child_key not in found:
            found[child_key] = FieldDescriptor(
                path=child_path,
                type=json_type(v),
                sample_value=sample_value(v),
                description=describe_field(str(k), v),
            )
        if json_type(v) in (ARRAY, OBJECT):
            collect_fields(v, child_path, found, ancestors)


def analyze_structure(data: Any, sample_size: int = DEFAULT_SAMPLE_SIZE) -> SchemaSnapshot:
    """Discover every field path in the first `sample_size` records."""
    if not isinstance(data, list) or not data:
        return SchemaSnapshot()

    found: Dict[str, FieldDescriptor] = {}
    for record in data[:max(0, int(sample_size))]:
        collect_fields(record, (), found)

    fields = tuple(found[k] for k in sorted(found))
    data_types: Dict[str, int] = {}
    for descriptor in fields:
        data_types[descriptor.type] = data_types.get(descriptor.type, 0) + 1

    snapshot = SchemaSnapshot(
        fields=fields,
        total_records=len(data),
        estimated_size=estimate_size(data),
        data_types=data_types,
    )
    logger.info(
        "Analyzed %d records (%d sampled): %d fields, %s",
        snapshot.total_records, min(len(data), sample_size), len(fields), snapshot.estimated_size,
    )
    return snapshot


def build_tree_from_keys(keys: List[str]) -> Dict[str, Any]:
    """Convert dot-notation keys into a nested dictionary tree.

    Leaf nodes are strings (the full path).
    Branch nodes are dictionaries.
    If a node is both a leaf and a branch (e.g. 'a' and 'a.b'),
    the value for 'a' is stored in the dictionary under '__self__'.
    """
    tree: Dict[str, Any] = {}
    for key in sorted(keys):
        parts = split_path(key)
        if not parts:
            continue
        current = tree
        for part in parts[:-1]:
            if part not in current:
                current[part] = {}

            # A node seen earlier as a leaf becomes a branch
            if isinstance(current[part], str):
                current[part] = {'__self__': current[part]}

            current = current[part]

        last_part = parts[-1]
        if last_part in current:
            if isinstance(current[last_part], dict):
                current[last_part]['__self__'] = key
        else:
            current[last_part] = key
    return tree
