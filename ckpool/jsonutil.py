"""Checked access to values in decoded JSON documents."""

from __future__ import annotations

import copy
from typing import Any


def json_array_string(val: Any, entry: int) -> str | None:
    """Return the string at index ``entry`` of the JSON array ``val``.

    Returns ``None`` when ``val`` is not an array, the index is out of range
    or the element is not a string.
    """
    if not isinstance(val, list):
        return None
    if entry < 0 or entry >= len(val):
        return None
    item = val[entry]
    if not isinstance(item, str):
        return None
    return item


def json_object_dup(val: Any, entry: str) -> Any:
    """Return a shallow copy of member ``entry`` of the JSON object ``val``.

    Returns ``None`` when ``val`` is not an object or has no such member.
    """
    if not isinstance(val, dict):
        return None
    item = val.get(entry)
    if item is None:
        return None
    return copy.copy(item)