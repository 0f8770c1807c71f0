from __future__ import annotations

"""Figma to QML conversion logic.

This package holds the generation driver: the recursive node dispatcher and
the public entry points used by services and hosts.

Key modules:
- figma_to_qml: dispatcher, registry/canvas/element/component entry points
"""

from .figma_to_qml import (  # noqa: F401
    build_components,
    canvases,
    component,
    element,
    parse_node,
)

__all__ = [
    "build_components",
    "canvases",
    "component",
    "element",
    "parse_node",
]
