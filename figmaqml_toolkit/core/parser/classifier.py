from __future__ import annotations

"""Node classification.

Maps the raw ``type`` tag of a design node onto the closed set of semantic
categories the emitters know how to handle.
"""

import enum
from typing import Any, Dict, Mapping

from figmaqml_toolkit.core.exceptions import UnsupportedNodeTypeError

__all__ = ["ItemType", "TYPE_TABLE", "classify", "is_group"]


class ItemType(enum.Enum):
    NONE = "none"
    VECTOR = "vector"
    TEXT = "text"
    FRAME = "frame"
    COMPONENT = "component"
    BOOLEAN = "boolean"
    INSTANCE = "instance"


TYPE_TABLE: Dict[str, ItemType] = {
    "RECTANGLE": ItemType.VECTOR,
    "ELLIPSE": ItemType.VECTOR,
    "VECTOR": ItemType.VECTOR,
    "LINE": ItemType.VECTOR,
    "REGULAR_POLYGON": ItemType.VECTOR,
    "STAR": ItemType.VECTOR,
    "TEXT": ItemType.TEXT,
    "FRAME": ItemType.FRAME,
    "GROUP": ItemType.FRAME,
    "COMPONENT": ItemType.COMPONENT,
    "BOOLEAN_OPERATION": ItemType.BOOLEAN,
    "INSTANCE": ItemType.INSTANCE,
    "SLICE": ItemType.NONE,
    "NONE": ItemType.NONE,
}

# A category nobody maps to would be dead code in the dispatcher
_unmapped = set(ItemType) - set(TYPE_TABLE.values())
if _unmapped:
    raise RuntimeError(f"Item types without a raw tag: {sorted(t.name for t in _unmapped)}")
del _unmapped


def classify(node: Mapping[str, Any]) -> ItemType:
    """Return the :class:`ItemType` of *node*.

    Raises:
        UnsupportedNodeTypeError: If the node's type tag is unknown.
    """
    tag = node.get("type")
    try:
        return TYPE_TABLE[tag]  # type: ignore[index]
    except (KeyError, TypeError):
        raise UnsupportedNodeTypeError(str(tag), node.get("id")) from None


def is_group(node: Mapping[str, Any]) -> bool:
    return node.get("type") == "GROUP"
