from __future__ import annotations

"""Vector shape emitter.

``ShapePath`` strokes are always centred on the outline. Borders wider than
one pixel aligned INSIDE or OUTSIDE are therefore drawn at twice their width
and cropped with an ``OpacityMask`` built from the fill geometry. Each of the
three alignments has a flat-fill and an image-fill variant.
"""

import logging
from typing import Any, Mapping

from figmaqml_toolkit.core.generators.context import GenerationContext
from figmaqml_toolkit.core.generators.styles import (
    StrokeType,
    image_fill,
    make_antialiasing,
    make_extents,
    make_image_source,
    make_item,
    make_shape_fill,
    make_shape_fill_data,
    make_shape_stroke,
    make_size,
)
from figmaqml_toolkit.core.utils import num, qml_id, tabs

logger = logging.getLogger(__name__)

__all__ = ["border_policy", "parse_vector"]

Node = Mapping[str, Any]


def border_policy(node: Node) -> str:
    """Return ``"INSIDE"``, ``"OUTSIDE"`` or ``"CENTER"`` for the emitter to use."""
    strokes = node.get("strokes")
    has_borders = (
        isinstance(strokes, list)
        and bool(strokes)
        and float(node.get("strokeWeight", 0) or 0) > 1.0
    )
    align = node.get("strokeAlign")
    if has_borders and align in ("INSIDE", "OUTSIDE"):
        return align
    return "CENTER"


def parse_vector(ctx: GenerationContext, node: Node, indents: int, parent: Node) -> str:
    policy = border_policy(node)
    image = image_fill(node)
    logger.debug("Vector %s: border %s, image fill %s", node.get("id"), policy, bool(image))
    if policy == "INSIDE":
        if image:
            return _inside_image(ctx, image, node, indents, parent)
        return _inside_flat(ctx, node, indents, parent)
    if policy == "OUTSIDE":
        if image:
            return _outside_image(ctx, image, node, indents, parent)
        return _outside_flat(ctx, node, indents, parent)
    if image:
        return _normal_image(ctx, image, node, indents, parent)
    return _normal_flat(ctx, node, indents, parent)


# ----------------------------------------------------------------------
# Shared blocks
# ----------------------------------------------------------------------

def _ids(node: Node) -> dict:
    qid = qml_id(node.get("id", ""))
    return {
        "source": "source_" + qid,
        "mask_source": "maskSource_" + qid,
        "border_source": "borderSource_" + qid,
        "border_mask": "borderMask_" + qid,
    }


def _alignment_note(node: Node, indents: int) -> str:
    return (
        tabs(indents)
        + "// QML (SVG) supports only center borders, thus an extra mask is created for "
        + str(node.get("strokeAlign", ""))
        + "\n"
    )


def _shape(ctx: GenerationContext, node: Node, indents: int, stroke: StrokeType, extra: str = "") -> str:
    """Anchored ``Shape`` holding the node's own stroke and fill."""
    out = tabs(indents - 1) + "Shape {\n"
    out += extra
    out += tabs(indents) + "anchors.fill: parent\n"
    out += make_antialiasing(ctx, indents)
    out += tabs(indents) + "ShapePath {\n"
    out += make_shape_stroke(node, indents + 1, stroke)
    out += make_shape_fill(node, indents + 1)
    out += make_shape_fill_data(node, indents + 1)
    out += tabs(indents) + "}\n"
    out += tabs(indents - 1) + "}\n"
    return out


def _solid_mask_path(node: Node, indents: int, stroke_width: float = 0) -> str:
    """``ShapePath`` filling the geometry in black, used as a mask source."""
    indent = tabs(indents + 1)
    out = tabs(indents) + "ShapePath {\n"
    out += indent + 'fillColor: "black"\n'
    out += indent + 'strokeColor: "transparent"\n'
    out += indent + "strokeWidth: " + num(stroke_width) + "\n"
    out += indent + "joinStyle: ShapePath.MiterJoin\n"
    out += make_shape_fill_data(node, indents + 1)
    out += tabs(indents) + "}\n"
    return out


def _opacity_mask(source: str, mask: str, indents: int, invert: bool = False) -> str:
    out = tabs(indents) + "OpacityMask {\n"
    out += tabs(indents + 1) + "anchors.fill:parent\n"
    out += tabs(indents + 1) + "source: " + source + "\n"
    out += tabs(indents + 1) + "maskSource: " + mask + "\n"
    if invert:
        out += tabs(indents + 1) + "invert: true\n"
    out += tabs(indents) + "}\n"
    return out


def make_image_mask_data(
    ctx: GenerationContext,
    image: str,
    node: Node,
    indents: int,
    source_id: str,
    mask_source_id: str,
) -> str:
    """Image cropped to the node geometry: mask, hidden image and hidden shape."""
    indent = tabs(indents)
    inner = tabs(indents + 1)
    out = _opacity_mask(source_id, mask_source_id, indents)

    out += indent + "Image {\n"
    out += inner + "id: " + source_id + "\n"
    out += inner + "layer.enabled: true\n"
    out += inner + "fillMode: Image.PreserveAspectCrop\n"
    out += inner + "visible: false\n"
    out += inner + "mipmap: true\n"
    out += inner + "anchors.fill:parent\n"
    out += make_image_source(ctx, image, False, indents + 1)
    out += indent + "}\n"

    out += indent + "Shape {\n"
    out += inner + "id: " + mask_source_id + "\n"
    out += inner + "anchors.fill: parent\n"
    out += inner + "layer.enabled: true\n"
    out += inner + "visible: false\n"
    out += inner + "ShapePath {\n"
    out += make_shape_stroke(node, indents + 2, StrokeType.NORMAL)
    out += tabs(indents + 2) + 'fillColor:"black"\n'
    out += make_shape_fill_data(node, indents + 2)
    out += inner + "}\n"
    out += indent + "}\n"
    return out


# ----------------------------------------------------------------------
# CENTER
# ----------------------------------------------------------------------

def _normal_flat(ctx: GenerationContext, node: Node, indents: int, parent: Node) -> str:
    indent = tabs(indents)
    out = make_item("Shape", node, indents)
    out += make_extents(ctx, node, indents, parent)
    out += make_antialiasing(ctx, indents)
    out += indent + "ShapePath {\n"
    out += make_shape_stroke(node, indents + 1, StrokeType.NORMAL)
    out += make_shape_fill(node, indents + 1)
    out += make_shape_fill_data(node, indents + 1)
    out += indent + "}\n"
    out += tabs(indents - 1) + "}\n"
    return out


def _normal_image(ctx: GenerationContext, image: str, node: Node, indents: int, parent: Node) -> str:
    ids = _ids(node)
    out = make_item("Item", node, indents)
    out += make_extents(ctx, node, indents, parent)
    out += make_image_mask_data(ctx, image, node, indents, ids["source"], ids["mask_source"])
    out += _shape(ctx, node, indents + 1, StrokeType.NORMAL)
    out += tabs(indents - 1) + "}\n"
    return out


# ----------------------------------------------------------------------
# INSIDE
# ----------------------------------------------------------------------

def _inside_mask(ctx: GenerationContext, node: Node, indents: int, mask_id: str) -> str:
    indent = tabs(indents)
    inner = tabs(indents + 1)
    out = indent + "Shape {\n"
    out += inner + "id: " + mask_id + "\n"
    out += inner + "anchors.fill:parent\n"
    out += make_antialiasing(ctx, indents + 1)
    # the doubled stroke is drawn out of bounds
    out += inner + "layer.enabled: true\n"
    out += inner + "visible: false\n"
    out += _solid_mask_path(node, indents + 1)
    out += indent + "}\n"
    return out


def _inside_flat(ctx: GenerationContext, node: Node, indents: int, parent: Node) -> str:
    ids = _ids(node)
    inner = tabs(indents + 1)
    out = make_item("Item", node, indents)
    out += _alignment_note(node, indents)
    out += make_extents(ctx, node, indents, parent)

    header = inner + "id: " + ids["border_source"] + "\n" + inner + "visible: false\n"
    out += _shape(ctx, node, indents + 1, StrokeType.DOUBLE, header)
    out += _inside_mask(ctx, node, indents, ids["border_mask"])
    out += _opacity_mask(ids["border_source"], ids["border_mask"], indents)
    out += tabs(indents - 1) + "}\n"
    return out


def _inside_image(ctx: GenerationContext, image: str, node: Node, indents: int, parent: Node) -> str:
    ids = _ids(node)
    indent = tabs(indents)
    inner = tabs(indents + 1)
    out = make_item("Item", node, indents)
    out += _alignment_note(node, indents)
    out += make_extents(ctx, node, indents, parent)

    out += indent + "Item {\n"
    out += inner + "id: " + ids["border_source"] + "\n"
    out += inner + "anchors.fill: parent\n"
    out += make_antialiasing(ctx, indents + 1)
    out += inner + "visible: false\n"
    out += make_image_mask_data(ctx, image, node, indents + 1, ids["source"], ids["mask_source"])
    out += _shape(ctx, node, indents + 2, StrokeType.DOUBLE)
    out += indent + "}\n"

    out += _inside_mask(ctx, node, indents, ids["border_mask"])
    out += _opacity_mask(ids["border_source"], ids["border_mask"], indents)
    out += tabs(indents - 1) + "}\n"
    return out


# ----------------------------------------------------------------------
# OUTSIDE
# ----------------------------------------------------------------------

def _offset(node: Node, indents: int, border: float) -> str:
    out = tabs(indents) + "x: " + num(border) + "\n"
    out += tabs(indents) + "y: " + num(border) + "\n"
    out += make_size(node, indents)
    return out


def _outside_border(ctx: GenerationContext, node: Node, indents: int, border: float, ids: dict) -> str:
    """Doubled border source, solid fill mask and the inverted composite."""
    indent = tabs(indents)
    inner = tabs(indents + 1)
    inner2 = tabs(indents + 2)

    out = indent + "Item {\n"
    out += inner + "id: " + ids["border_source"] + "\n"
    out += inner + "anchors.fill:parent\n"
    out += inner + "visible: false\n"
    out += inner + "Shape {\n"
    out += make_antialiasing(ctx, indents + 2)
    out += _offset(node, indents + 2, border)
    out += inner2 + "ShapePath {\n"
    out += tabs(indents + 3) + 'fillColor: "black"\n'
    out += make_shape_stroke(node, indents + 3, StrokeType.DOUBLE)
    out += make_shape_fill_data(node, indents + 3)
    out += inner2 + "}\n"
    out += inner + "}\n"
    out += indent + "}\n"

    out += indent + "Item {\n"
    out += inner + "id: " + ids["border_mask"] + "\n"
    out += inner + "anchors.fill:parent\n"
    out += make_antialiasing(ctx, indents + 1)
    out += inner + "visible: false\n"
    out += inner + "Shape {\n"
    out += _offset(node, indents + 2, border)
    out += _solid_mask_path(node, indents + 2, border)
    out += inner + "}\n"
    out += indent + "}\n"

    out += _opacity_mask(ids["border_source"], ids["border_mask"], indents, invert=True)
    return out


def _outside_flat(ctx: GenerationContext, node: Node, indents: int, parent: Node) -> str:
    ids = _ids(node)
    border = float(node.get("strokeWeight", 0))
    indent = tabs(indents)
    inner = tabs(indents + 1)
    inner2 = tabs(indents + 2)

    out = make_item("Item", node, indents)
    out += _alignment_note(node, indents)
    # grown on every side so the border fits inside the mask
    out += make_extents(ctx, node, indents, parent, (-border, -border, border * 2.0, border * 2.0))

    out += indent + "Shape {\n"
    out += _offset(node, indents + 1, border)
    out += make_antialiasing(ctx, indents + 1)
    out += inner + "ShapePath {\n"
    out += make_shape_fill(node, indents + 2)
    out += make_shape_fill_data(node, indents + 2)
    out += inner2 + "strokeWidth: 0\n"
    out += inner2 + "strokeColor: fillColor\n"
    out += inner2 + "joinStyle: ShapePath.MiterJoin\n"
    out += inner + "}\n"
    out += indent + "}\n"

    out += _outside_border(ctx, node, indents, border, ids)
    out += tabs(indents - 1) + "}\n"
    return out


def _outside_image(ctx: GenerationContext, image: str, node: Node, indents: int, parent: Node) -> str:
    ids = _ids(node)
    border = float(node.get("strokeWeight", 0))
    indent = tabs(indents)
    inner = tabs(indents + 1)
    inner2 = tabs(indents + 2)
    inner3 = tabs(indents + 3)

    out = make_item("Item", node, indents)
    out += _alignment_note(node, indents)
    out += make_extents(ctx, node, indents, parent, (-border, -border, border * 2.0, border * 2.0))

    out += indent + "Item {\n"
    out += _offset(node, indents + 1, border)
    out += make_antialiasing(ctx, indents + 1)
    out += make_image_mask_data(ctx, image, node, indents + 1, ids["source"], ids["mask_source"])
    out += inner + "Shape {\n"
    out += inner2 + "anchors.fill: parent\n"
    out += make_antialiasing(ctx, indents + 2)
    out += inner2 + "ShapePath {\n"
    out += inner3 + 'strokeColor: "transparent"\n'
    out += inner3 + "strokeWidth: 0\n"
    out += inner3 + "joinStyle: ShapePath.MiterJoin\n"
    out += make_shape_fill(node, indents + 3)
    out += make_shape_fill_data(node, indents + 3)
    out += inner2 + "}\n"
    out += inner + "}\n"
    out += indent + "}\n"

    out += _outside_border(ctx, node, indents, border, ids)
    out += tabs(indents - 1) + "}\n"
    return out
