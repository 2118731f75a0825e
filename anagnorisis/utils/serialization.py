"""Shared serialization utilities.

Converts patterns, shapes and tree nodes into JSON-serializable primitives
for diagnostic descriptions and the command line. Serialization here is
best-effort: it feeds log lines, so it degrades instead of raising.
"""

import math
from collections.abc import Mapping
from dataclasses import asdict, is_dataclass
from enum import Enum
from typing import Any


def serialize_to_primitives(data: Any) -> Any:
    """Convert complex Python types to JSON-serializable primitives.

    Handles:
    - Primitives (str, int, float, bool, None): returned as-is
    - Enum: converted to value
    - dataclass: converted to dict via asdict()
    - Mapping: recursively serialize keys and values
    - list/tuple/set: recursively serialize items
    - Objects with to_dict(): use that method
    - Special floats (inf, nan): converted to None
    - Anything else: its repr()

    Args:
        data: Any Python data structure.

    Returns:
        JSON-serializable data (primitives, dicts, lists only).

    Examples:
        >>> from dataclasses import dataclass
        >>> @dataclass
        ... class Tag:
        ...     name: str
        ...     attributes: dict
        >>> serialize_to_primitives(Tag("div", {"class": "panel"}))
        {'name': 'div', 'attributes': {'class': 'panel'}}
    """
    if data is None:
        return None

    if isinstance(data, (str, int, bool)):
        return data

    if isinstance(data, float):
        if math.isnan(data) or math.isinf(data):
            return None
        return data

    if isinstance(data, Enum):
        return data.value

    if hasattr(data, "to_dict"):
        return serialize_to_primitives(data.to_dict())

    if is_dataclass(data) and not isinstance(data, type):
        return serialize_to_primitives(asdict(data))

    if isinstance(data, Mapping):
        return {
            str(serialize_to_primitives(k)): serialize_to_primitives(v)
            for k, v in data.items()
        }

    if isinstance(data, (list, tuple)):
        return [serialize_to_primitives(item) for item in data]

    if isinstance(data, (set, frozenset)):
        return sorted(serialize_to_primitives(item) for item in data)

    return repr(data)


def describe_node(node: Any) -> str:
    """Short CSS-like label for a tree node: ``tag#id.class`` or ``#text``.

    Never raises; unknown objects fall back to their type name.
    """
    try:
        name = getattr(node, "local_name", None)
        if not name:
            return "#text" if hasattr(node, "text_content") else type(node).__name__

        label = name
        get_attribute = getattr(node, "get_attribute", None)
        node_id = get_attribute("id") if callable(get_attribute) else None
        if node_id:
            label += f"#{node_id}"
        classes = getattr(node, "class_list", None) or ()
        for token in sorted(classes):
            label += f".{token}"
        return label
    except Exception:
        return type(node).__name__
