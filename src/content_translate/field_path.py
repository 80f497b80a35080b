# -*- coding: utf-8 -*-
"""Structured field paths over nested dict/list entry data.

A path like ``"seo.metaTitle"``, ``"sections[1].body"`` or
``"sections.1.body"`` is parsed once into a tuple of segments; string
segments address dict keys and int segments address list indices.
"""

import re
from typing import Any, Tuple, Union

Segment = Union[str, int]
FieldPath = Tuple[Segment, ...]

_TOKEN = re.compile(r"([^.\[\]]+)|\[(\d+)\]")

_MISSING = object()


def parse_path(path: Union[str, FieldPath]) -> FieldPath:
    """Parse a dotted/indexed path string into segments."""
    if isinstance(path, tuple):
        return path
    if not path:
        raise ValueError("Empty field path")
    segments = []
    pos = 0
    for match in _TOKEN.finditer(path):
        gap = path[pos:match.start()]
        if gap not in ("", "."):
            raise ValueError(f"Malformed field path: {path!r}")
        key, index = match.groups()
        if index is not None:
            segments.append(int(index))
        elif key.isdigit():
            segments.append(int(key))
        else:
            segments.append(key)
        pos = match.end()
    if pos != len(path):
        raise ValueError(f"Malformed field path: {path!r}")
    return tuple(segments)


def format_path(segments: FieldPath) -> str:
    parts = []
    for seg in segments:
        if isinstance(seg, int):
            parts.append(f"[{seg}]")
        else:
            parts.append(("." if parts else "") + seg)
    return "".join(parts)


def _step(value: Any, seg: Segment) -> Any:
    if isinstance(seg, int):
        if isinstance(value, list) and -len(value) <= seg < len(value):
            return value[seg]
        return _MISSING
    if isinstance(value, dict):
        return value.get(seg, _MISSING)
    return _MISSING


def get_path(data: Any, path: Union[str, FieldPath], default: Any = None) -> Any:
    value = data
    for seg in parse_path(path):
        value = _step(value, seg)
        if value is _MISSING:
            return default
    return value


def has_path(data: Any, path: Union[str, FieldPath]) -> bool:
    return get_path(data, path, _MISSING) is not _MISSING


def set_path(data: Any, path: Union[str, FieldPath], value: Any) -> Any:
    """Set ``value`` at ``path``, creating intermediate containers.

    Containers along the path are copied before being written to, so nested
    values shared with another entry (e.g. after a shallow copy) are never
    mutated in place. Returns ``data``.
    """
    segments = parse_path(path)
    node = data
    for seg, nxt in zip(segments, segments[1:]):
        child = _step(node, seg)
        if isinstance(child, dict):
            child = dict(child)
        elif isinstance(child, list):
            child = list(child)
        else:
            child = [] if isinstance(nxt, int) else {}
        _assign(node, seg, child)
        node = child
    _assign(node, segments[-1], value)
    return data


def _assign(node: Any, seg: Segment, value: Any) -> None:
    if isinstance(seg, int):
        if not isinstance(node, list):
            raise TypeError(f"Cannot index {type(node).__name__} with {seg}")
        while len(node) <= seg:
            node.append(None)
        node[seg] = value
    else:
        if not isinstance(node, dict):
            raise TypeError(f"Cannot set key {seg!r} on {type(node).__name__}")
        node[seg] = value


def top_level_key(path: Union[str, FieldPath]) -> Segment:
    return parse_path(path)[0]
