from __future__ import annotations

"""Design document parsing helpers.

Node classification, document traversal and component registry
construction used by the generation pipeline.
"""

from .classifier import ItemType, classify  # noqa: F401
from .document import get_objects_by_type, read_canvases  # noqa: F401
from .registry import build_registry  # noqa: F401

__all__: list[str] = [
    "ItemType",
    "classify",
    "get_objects_by_type",
    "read_canvases",
    "build_registry",
]
