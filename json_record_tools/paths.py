"""Dot paths naming fields in nested records.

Segments are joined with '.', literal dots and backslashes inside a key are
backslash-escaped, and '[]' stands for "any element of this array".
"""
from __future__ import annotations

from typing import Iterable, List

ARRAY_MARKER = '[]'


def escape_path_segment(segment: str) -> str:
    """Escape one key so that 'gpt-3.5-turbo' stays a single segment."""
    segment = str(segment)
    if segment == ARRAY_MARKER:
        return segment
    return segment.replace('\\', '\\\\').replace('.', '\\.')


def join_path(segments: Iterable[str]) -> str:
    """Build the dotted path string used as a field's identity key."""
    return '.'.join(escape_path_segment(s) for s in segments)


def split_path(path: str) -> List[str]:
    """Inverse of join_path. Empty segments are dropped."""
    if not path:
        return []

    segments: List[str] = []
    current: List[str] = []
    chars = iter(str(path))
    for ch in chars:
        if ch == '\\':
            # a trailing backslash is kept literally
            current.append(next(chars, '\\'))
        elif ch == '.':
            segments.append(''.join(current))
            current = []
        else:
            current.append(ch)
    segments.append(''.join(current))
    return [s for s in segments if s]
