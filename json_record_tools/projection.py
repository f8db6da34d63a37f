from __future__ import annotations

import logging
from copy import deepcopy
from typing import Any, Iterable, List, Set, Union

from .paths import ARRAY_MARKER, join_path
from .schema_utils import FieldDescriptor
from .values import ARRAY, OBJECT, coerce_records, is_container, json_type

logger = logging.getLogger(__name__)


def selected_paths(fields: Iterable[Union[FieldDescriptor, str]]) -> Set[str]:
    """Collect the path keys of selected descriptors (plain strings count as selected)."""
    paths: Set[str] = set()
    for f in fields or []:
        if isinstance(f, FieldDescriptor):
            if f.is_selected:
                paths.add(f.key)
        elif f:
            paths.add(str(f))
    return paths


def has_nested_selection(path_key: str, selected: Set[str]) -> bool:
    prefix = f"{path_key}."
    return any(p.startswith(prefix) for p in selected)


def filter_node(node: Any, selected: Set[str], path: tuple) -> Any:
    kind = json_type(node)

    if kind == ARRAY:
        # Arrays keep their shape even when every element filters to {}.
        return [filter_node(item, selected, path + (ARRAY_MARKER,)) for item in node]

    if kind != OBJECT:
        return node

    filtered = {}
    for k, v in node.items():
        child_path = path + (str(k),)
        child_key = join_path(child_path)
        if child_key in selected:
            filtered[k] = deepcopy(v)
        elif is_container(v) and has_nested_selection(child_key, selected):
            nested = filter_node(v, selected, child_path)
            if json_type(nested) == ARRAY or nested:
                filtered[k] = nested
    return filtered


def create_modified_records(data: Any, fields: Iterable[Union[FieldDescriptor, str]]) -> List[Any]:
    """Return a copy of every record narrowed to the selected field paths."""
    records = coerce_records(data)
    selected = selected_paths(fields)
    result = [filter_node(record, selected, ()) for record in records]
    logger.info("Projected %d records onto %d selected paths", len(result), len(selected))
    return result
