from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List

from .combine import display_record_key, get_record_key
from .values import OBJECT, json_type

logger = logging.getLogger(__name__)

PRIMARY_IDENTIFIERS = ('artistName', 'name', 'title')


@dataclass
class ValidationResult:
    is_valid: bool = True
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    summary: Dict[str, int] = field(default_factory=dict)


def validate_records(data: Any) -> ValidationResult:
    """Check that records are objects with an identifier and report repeated keys."""
    records = data if isinstance(data, list) else []
    errors: List[str] = []
    warnings: List[str] = []
    valid = 0
    invalid = 0
    duplicates = 0
    seen = set()

    for index, record in enumerate(records, start=1):
        if json_type(record) != OBJECT:
            errors.append(f"Record {index}: Invalid record type")
            invalid += 1
            continue

        if not any(record.get(name) for name in PRIMARY_IDENTIFIERS):
            warnings.append(f"Record {index}: Missing primary identifier (artistName/name/title)")

        key = get_record_key(record)
        if key in seen:
            duplicates += 1
            warnings.append(f'Record {index}: Duplicate key "{display_record_key(key)}"')
        else:
            seen.add(key)

        valid += 1

    if not isinstance(data, list):
        errors.append("Expected a JSON array of records")

    result = ValidationResult(
        is_valid=not errors,
        errors=errors,
        warnings=warnings,
        summary={
            'total_records': len(records),
            'valid_records': valid,
            'invalid_records': invalid,
            'duplicates': duplicates,
        },
    )
    logger.info(
        "Validated %d records: %d invalid, %d duplicates, %d warnings",
        len(records), invalid, duplicates, len(warnings),
    )
    return result
