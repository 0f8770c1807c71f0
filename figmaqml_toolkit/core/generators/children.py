from __future__ import annotations

"""Ordered child collection and mask grouping.

A child flagged ``isMask`` masks every sibling that follows it. The mask and
those siblings are folded into one composite entry, keyed ``"maskedItem"``,
which replaces them in the ordered map.
"""

import logging
from typing import Any, Dict, List, Mapping

from figmaqml_toolkit.core.generators.context import GenerationContext
from figmaqml_toolkit.core.utils import qml_id, tabs

logger = logging.getLogger(__name__)

__all__ = ["MASKED_ITEM", "parse_children_items", "parse_children"]

MASKED_ITEM = "maskedItem"

Node = Mapping[str, Any]


def _mask_header(ctx: GenerationContext, node: Node, mask_child: Node, indents: int) -> str:
    """Open the composite: the mask, its hidden source and the source item body."""
    from figmaqml_toolkit.core.converter.figma_to_qml import parse_node

    indent = tabs(indents)
    inner = tabs(indents + 1)
    inner2 = tabs(indents + 2)
    mask_id = "mask_" + qml_id(mask_child.get("id", ""))
    source_id = "source_" + qml_id(mask_child.get("id", ""))

    out = indent + "Item {\n"
    out += inner + "anchors.fill:parent\n"
    out += inner + "OpacityMask {\n"
    out += inner2 + "anchors.fill:parent\n"
    out += inner2 + "source: " + source_id + "\n"
    out += inner2 + "maskSource: " + mask_id + "\n"
    out += inner + "}\n\n"
    out += inner + "Item {\n"
    out += inner2 + "id: " + mask_id + "\n"
    out += inner2 + "anchors.fill:parent\n"
    out += parse_node(ctx, mask_child, indents + 3, node)
    out += inner2 + "visible:false\n"
    out += inner + "}\n\n"
    out += inner + "Item {\n"
    out += inner2 + "id: " + source_id + "\n"
    out += inner2 + "anchors.fill:parent\n"
    out += inner2 + "visible:false\n"
    return out


def parse_children_items(ctx: GenerationContext, node: Node, indents: int) -> Dict[str, str]:
    """Emit the children of *node* in document order, keyed by child id.

    Children are parsed with *node* as their parent. Entries before the first
    mask are independent; the mask and everything after it form a single
    ``"maskedItem"`` entry. Children without output (slices) get no entry.
    """
    from figmaqml_toolkit.core.converter.figma_to_qml import parse_node

    items: Dict[str, str] = {}
    masked: List[str] = []
    header = ""
    for child in node.get("children") or []:
        if not header and child.get("isMask"):
            header = _mask_header(ctx, node, child, indents)
            logger.debug("Child %s of %s opens a mask group", child.get("id"), node.get("id"))
            continue
        if header:
            masked.append(parse_node(ctx, child, indents + 3, node))
        else:
            markup = parse_node(ctx, child, indents + 1, node)
            if markup:
                items[child.get("id", "")] = markup

    if header:
        group = header + "".join(masked)
        group += tabs(indents + 1) + "}\n"
        group += tabs(indents) + "}\n"
        items[MASKED_ITEM] = group
    return items


def parse_children(ctx: GenerationContext, node: Node, indents: int) -> str:
    return "".join(parse_children_items(ctx, node, indents).values())
