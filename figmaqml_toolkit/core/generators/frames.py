from __future__ import annotations

"""Frame, group and placeholder emitters."""

from typing import Any, Mapping

from figmaqml_toolkit.core.generators.children import parse_children
from figmaqml_toolkit.core.generators.context import GenerationContext
from figmaqml_toolkit.core.generators.styles import make_extents, make_fill, make_item, make_vector
from figmaqml_toolkit.core.utils import num, tabs

__all__ = ["make_container_properties", "parse_frame", "parse_plain_item", "parse_slice"]

Node = Mapping[str, Any]


def make_container_properties(node: Node, indents: int) -> str:
    out = ""
    if "cornerRadius" in node:
        out += tabs(indents) + "radius:" + num(node["cornerRadius"]) + "\n"
    out += tabs(indents) + "clip: " + ("true" if node.get("clipsContent") else "false") + "\n"
    return out


def parse_frame(ctx: GenerationContext, node: Node, indents: int, parent: Node) -> str:
    """Frames and groups become a ``Rectangle`` holding their children."""
    out = make_item("Rectangle", node, indents)
    out += make_vector(ctx, node, indents, parent)
    out += make_container_properties(node, indents)
    out += parse_children(ctx, node, indents)
    out += tabs(indents - 1) + "}\n"
    return out


def parse_plain_item(ctx: GenerationContext, node: Node, indents: int, parent: Node) -> str:
    out = make_item("Rectangle", node, indents)
    out += make_fill(ctx, node, indents)
    out += make_extents(ctx, node, indents, parent)
    out += parse_children(ctx, node, indents)
    out += tabs(indents - 1) + "}\n"
    return out


def parse_slice(ctx: GenerationContext, node: Node, indents: int, parent: Node) -> str:
    # Slices are export regions and have no visual output
    return ""
