from __future__ import annotations

"""Prerender gate.

Some nodes are better shown as a raster snapshot than as generated markup:
gradients have no ``ShapePath`` equivalent here, and the host may ask for
whole categories to be prerendered. Such a node becomes a single ``Image``
and its descendants are not emitted.
"""

import logging
from typing import Any, Mapping, Tuple

from figmaqml_toolkit.core.generators.context import GenerationContext
from figmaqml_toolkit.core.generators.styles import is_gradient, make_image_source, make_reference
from figmaqml_toolkit.core.models import Flags
from figmaqml_toolkit.core.parser.classifier import ItemType, classify, is_group
from figmaqml_toolkit.core.utils import num, qml_id, tabs

logger = logging.getLogger(__name__)

__all__ = ["should_prerender", "bounding_size", "parse_rendered"]

Node = Mapping[str, Any]


def should_prerender(ctx: GenerationContext, node: Node) -> bool:
    if node.get("isRendering"):
        return True
    kind = classify(node)
    if kind is ItemType.VECTOR and (ctx.has(Flags.PRERENDER_SHAPES) or is_gradient(node)):
        return True
    if kind is ItemType.TEXT and is_gradient(node):
        return True
    if kind is ItemType.FRAME and not is_group(node) and ctx.has(Flags.PRERENDER_FRAMES):
        return True
    if is_group(node) and ctx.has(Flags.PRERENDER_GROUPS):
        return True
    if kind is ItemType.COMPONENT and ctx.has(Flags.PRERENDER_COMPONENTS):
        return True
    if kind is ItemType.INSTANCE and ctx.has(Flags.PRERENDER_INSTANCES):
        return True
    return False


def bounding_size(node: Node) -> Tuple[float, float]:
    """Width and height covering the node and all of its descendants.

    The union of the absolute bounding boxes, so children sticking out of
    their parent are not cropped from the snapshot.
    """
    boxes = []
    stack = [node]
    while stack:
        current = stack.pop()
        box = current.get("absoluteBoundingBox")
        if box:
            x = float(box.get("x", 0))
            y = float(box.get("y", 0))
            boxes.append((x, y, x + float(box.get("width", 0)), y + float(box.get("height", 0))))
        stack.extend(current.get("children") or [])
    if not boxes:
        return 0.0, 0.0
    left = min(b[0] for b in boxes)
    top = min(b[1] for b in boxes)
    right = max(b[2] for b in boxes)
    bottom = max(b[3] for b in boxes)
    return right - left, bottom - top


def parse_rendered(ctx: GenerationContext, node: Node, indents: int, parent: Node) -> str:
    """Emit *node* as an image snapshot positioned relative to *parent*."""
    indent = tabs(indents)
    parent_box = parent.get("absoluteBoundingBox") or {}
    box = node.get("absoluteBoundingBox") or {}
    width, height = bounding_size(node)
    logger.debug("Prerendering %s (%sx%s)", node.get("id"), num(width), num(height))

    out = make_reference("Item", node, indents)
    out += indent + "x: " + num(float(box.get("x", 0)) - float(parent_box.get("x", 0))) + "\n"
    out += indent + "y: " + num(float(box.get("y", 0)) - float(parent_box.get("y", 0))) + "\n"
    out += indent + "width:" + num(width) + "\n"
    out += indent + "height:" + num(height) + "\n"

    # Invisible nodes cannot be rendered
    if node.get("visible", True) is not False:
        inner = tabs(indents + 1)
        out += indent + "Image {\n"
        out += inner + "id: i_" + qml_id(node.get("id", "")) + "\n"
        out += inner + "anchors.centerIn: parent\n"
        out += inner + "mipmap: true\n"
        out += inner + "fillMode: Image.PreserveAspectFit\n"
        out += make_image_source(ctx, str(node.get("id", "")), True, indents + 1, ctx.placeholder)
        out += indent + "}\n"
    out += tabs(indents - 1) + "}\n"
    return out
