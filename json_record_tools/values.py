"""Helpers for the JSON value shapes produced by `json.loads`.

Records are plain Python trees of None, bool, int, float, str, list and dict.
Every recursive walk in this package dispatches on `json_type` instead of
probing types ad hoc.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Union

logger = logging.getLogger(__name__)

JsonValue = Union[None, bool, int, float, str, List[Any], Dict[str, Any]]

NULL = 'null'
BOOLEAN = 'boolean'
NUMBER = 'number'
STRING = 'string'
ARRAY = 'array'
OBJECT = 'object'
UNDEFINED = 'undefined'

UNSERIALIZABLE = '[unserializable]'


def json_type(value: Any) -> str:
    if value is None:
        return NULL
    # bool is a subclass of int, so it has to be checked first
    if isinstance(value, bool):
        return BOOLEAN
    if isinstance(value, (int, float)):
        return NUMBER
    if isinstance(value, str):
        return STRING
    if isinstance(value, (list, tuple)):
        return ARRAY
    if isinstance(value, dict):
        return OBJECT
    return UNDEFINED


def is_container(value: Any) -> bool:
    return json_type(value) in (ARRAY, OBJECT)


def safe_dumps(value: Any, **kwargs) -> str:
    """Serialize to JSON text, substituting a marker when that is impossible."""
    kwargs.setdefault('ensure_ascii', False)
    try:
        return json.dumps(value, **kwargs)
    except (TypeError, ValueError) as exc:
        logger.warning("Could not serialize value of type %s: %s", type(value).__name__, exc)
        return UNSERIALIZABLE


def compact_dumps(value: Any) -> str:
    return safe_dumps(value, separators=(',', ':'))


def coerce_records(data: Any) -> List[Any]:
    """Resolve the record array out of loaded JSON.

    Lists pass through. A database export mapping is unwrapped through its
    'artists', 'data' or 'records' list. Anything else yields no records.
    """
    if isinstance(data, list):
        return data
    if isinstance(data, dict):
        for key in ('artists', 'data', 'records'):
            inner = data.get(key)
            if isinstance(inner, list):
                return inner
    return []
