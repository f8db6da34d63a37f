from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .values import ARRAY, NULL, OBJECT, STRING, json_type

logger = logging.getLogger(__name__)

# Name fragments that usually mark a field as a natural identifier.
COMMON_ID_FIELDS = (
    'id', 'ID', '_id', 'objectId',
    'artistName', 'name', 'title',
    'musicBrainzArtistID', 'musicBrainzId', 'mbid',
    'email', 'username', 'userId',
    'url', 'link', 'href',
)


@dataclass
class DeduplicationOutcome:
    original_count: int = 0
    deduplicated_count: int = 0
    removed_count: int = 0
    duplicate_keys: List[str] = field(default_factory=list)
    deduplicated_data: List[Any] = field(default_factory=list)

    def summary(self) -> str:
        return (
            f"Original: {self.original_count} | Kept: {self.deduplicated_count} | "
            f"Removed: {self.removed_count}"
        )


def normalize_for_comparison(value: Any) -> Any:
    kind = json_type(value)
    if kind == NULL:
        return None
    if kind == ARRAY:
        return [normalize_for_comparison(item) for item in value]
    if kind == OBJECT:
        return {k: normalize_for_comparison(value[k]) for k in sorted(value, key=str)}
    return value


def record_fingerprint(record: Any) -> Optional[str]:
    """Canonical text for a record, or None when it cannot be serialized."""
    if record is None:
        return 'null'
    try:
        return json.dumps(normalize_for_comparison(record), ensure_ascii=False, separators=(',', ':'))
    except (TypeError, ValueError, RecursionError) as exc:
        logger.warning("Record could not be fingerprinted, keeping it as unique: %s", exc)
        return None


def identify_duplicate_keys(record: Any, duplicate_keys: Dict[str, None]) -> None:
    if json_type(record) != OBJECT:
        return

    for key, value in record.items():
        lowered = str(key).lower()
        if any(id_field.lower() in lowered for id_field in COMMON_ID_FIELDS):
            duplicate_keys[key] = None
        if json_type(value) == STRING and value.startswith('http'):
            duplicate_keys[key] = None


def deduplicate_records(data: Any) -> DeduplicationOutcome:
    """Drop records whose content matches an earlier record, first occurrence wins."""
    if not isinstance(data, list) or not data:
        return DeduplicationOutcome()

    seen = set()
    kept: List[Any] = []
    # dict keeps first-seen order for the report
    duplicate_keys: Dict[str, None] = {}
    removed = 0

    for record in data:
        fingerprint = record_fingerprint(record)
        if fingerprint is not None and fingerprint in seen:
            removed += 1
            identify_duplicate_keys(record, duplicate_keys)
            continue
        if fingerprint is not None:
            seen.add(fingerprint)
        kept.append(record)

    outcome = DeduplicationOutcome(
        original_count=len(data),
        deduplicated_count=len(kept),
        removed_count=removed,
        duplicate_keys=list(duplicate_keys),
        deduplicated_data=kept,
    )
    logger.info("Deduplicated records. %s", outcome.summary())
    return outcome
