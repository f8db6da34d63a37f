from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from .errors import ConfigurationError
from .values import OBJECT, coerce_records, compact_dumps, json_type

logger = logging.getLogger(__name__)

APPEND = 'append'
MERGE = 'merge'
REPLACE = 'replace'
STRATEGIES = (APPEND, MERGE, REPLACE)

KEEP_FIRST = 'keep_first'
KEEP_LAST = 'keep_last'
COMBINE = 'combine'
CONFLICT_RESOLUTIONS = (KEEP_FIRST, KEEP_LAST, COMBINE)

# Fields tried in order when deciding whether two records are the same entity.
IDENTITY_FIELDS = ('artistName', 'id', 'name')


@dataclass(frozen=True)
class MergeConfiguration:
    strategy: str = APPEND
    conflict_resolution: str = KEEP_FIRST

    def __post_init__(self):
        if self.strategy not in STRATEGIES:
            raise ConfigurationError(f"Unknown merge strategy: {self.strategy!r}")
        if self.conflict_resolution not in CONFLICT_RESOLUTIONS:
            raise ConfigurationError(f"Unknown conflict resolution: {self.conflict_resolution!r}")


def get_record_key(item: Any) -> str:
    """Identity of a record for the merge strategy.

    The compact JSON text of the first truthy value of artistName, id or name,
    else of the whole record. Keying on JSON text keeps true, 1 and 1.0 apart.
    A caller-supplied key selector would be the natural extension.
    """
    if json_type(item) == OBJECT:
        for name in IDENTITY_FIELDS:
            value = item.get(name)
            if value:
                return compact_dumps(value)
    return compact_dumps(item)


def display_record_key(key: str) -> str:
    """Readable form of a record key: string identifiers lose their JSON quotes."""
    try:
        value = json.loads(key)
    except ValueError:
        return key
    return value if isinstance(value, str) else key


def resolve_conflict(existing: Any, incoming: Any, conflict_resolution: str) -> Any:
    if conflict_resolution == KEEP_LAST:
        return incoming
    if conflict_resolution == COMBINE:
        if json_type(existing) == OBJECT and json_type(incoming) == OBJECT:
            return {**existing, **incoming}
        return incoming
    return existing


def merge_arrays(first: List[Any], second: List[Any], conflict_resolution: str) -> List[Any]:
    merged = list(first)
    positions: Dict[Any, int] = {}
    for idx, item in enumerate(merged):
        positions.setdefault(get_record_key(item), idx)

    for item in second:
        key = get_record_key(item)
        idx = positions.get(key)
        if idx is None:
            positions[key] = len(merged)
            merged.append(item)
        else:
            merged[idx] = resolve_conflict(merged[idx], item, conflict_resolution)
    return merged


def combine_two(first: List[Any], second: List[Any], config: MergeConfiguration) -> List[Any]:
    if config.strategy == MERGE:
        return merge_arrays(first, second, config.conflict_resolution)
    if config.strategy == REPLACE:
        return list(second)
    return [*first, *second]


def combine_json_files(files: Sequence[Any], config: Optional[MergeConfiguration] = None) -> List[Any]:
    """Fold several record arrays into one, left to right."""
    config = config or MergeConfiguration()
    if not files:
        return []
    if len(files) == 1:
        return coerce_records(files[0])

    combined = coerce_records(files[0])
    for other in files[1:]:
        combined = combine_two(combined, coerce_records(other), config)

    logger.info(
        "Combined %d files with strategy=%s conflict=%s into %d records",
        len(files), config.strategy, config.conflict_resolution, len(combined),
    )
    return combined
