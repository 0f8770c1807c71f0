from __future__ import annotations

"""Markup fragments shared by every emitter.

Item headers, effects, transforms, geometry extents, fills, inline images and
the ``ShapePath`` building blocks. Each helper returns the QML text for its
fragment, indented with :func:`~figmaqml_toolkit.core.utils.tabs`.

Indentation convention: an emitter called with ``indents=n`` opens its item at
``n - 1`` levels and writes the item's properties at ``n`` levels.
"""

import enum
import logging
from typing import Any, Mapping, Optional, Tuple

from figmaqml_toolkit.core.exceptions import ImageLoadError, MalformedNodeError
from figmaqml_toolkit.core.generators.context import GenerationContext
from figmaqml_toolkit.core.models import Flags
from figmaqml_toolkit.core.parser.classifier import ItemType, classify
from figmaqml_toolkit.core.utils import (
    escape_string,
    eq,
    is_identity_transform,
    num,
    position,
    qml_id,
    stroke_join,
    tabs,
    to_color,
    transform_rows,
)

logger = logging.getLogger(__name__)

Node = Mapping[str, Any]

# Characters per line of an inlined image source
IMAGE_CHUNK = 1024


class StrokeType(enum.Enum):
    NORMAL = "normal"
    DOUBLE = "double"


# ----------------------------------------------------------------------
# Node inspection
# ----------------------------------------------------------------------

def get_value(ctx: GenerationContext, node: Node, key: str) -> Any:
    """Return ``node[key]``, falling back to the base component for instances."""
    if key in node:
        return node[key]
    if classify(node) is ItemType.INSTANCE:
        base = ctx.component(node.get("componentId", ""), node.get("id"))
        return get_value(ctx, base.node, key)
    return None


def is_gradient(node: Node) -> bool:
    fills = node.get("fills")
    if not isinstance(fills, list):
        return False
    return any(isinstance(f, Mapping) and "gradientHandlePositions" in f for f in fills)


def image_fill(node: Node) -> Optional[str]:
    """Return the ``imageRef`` of the first fill, if any."""
    fills = node.get("fills")
    if isinstance(fills, list) and fills and "imageRef" in fills[0]:
        return str(fills[0]["imageRef"])
    return None


def _paint_color(paint: Node, opacity: float = 1.0) -> str:
    color = paint.get("color") or {}
    return to_color(color.get("r", 0), color.get("g", 0), color.get("b", 0), float(color.get("a", 0)) * opacity)


# ----------------------------------------------------------------------
# Item header
# ----------------------------------------------------------------------

def make_reference(type_name: str, node: Node, indents: int) -> str:
    """Open ``type_name {`` and write its ``id`` and ``objectName``."""
    if "id" not in node:
        raise MalformedNodeError(f"Node '{node.get('name', '')}' has no id")
    out = tabs(indents - 1) + type_name + " {\n"
    out += tabs(indents) + "id: " + qml_id(node["id"]) + "\n"
    out += tabs(indents) + 'objectName:"' + escape_string(str(node.get("name", ""))) + '"\n'
    return out


def make_effects(node: Node, indents: int) -> str:
    """Emit the first drop or inner shadow as a ``layer.effect``.

    QtQuick layers take a single effect, so later entries are ignored.
    """
    effects = node.get("effects")
    if not isinstance(effects, list) or not effects:
        return ""
    effect = effects[0]
    kind = effect.get("type")
    if kind not in ("DROP_SHADOW", "INNER_SHADOW"):
        return ""
    offset = effect.get("offset") or {}
    dx = float(offset.get("x", 0))
    dy = float(offset.get("y", 0))
    if kind == "INNER_SHADOW":
        dx, dy = -dx, -dy
    color = effect.get("color") or {}
    inner = tabs(indents + 1)
    out = tabs(indents) + "layer.enabled:true\n"
    out += tabs(indents) + "layer.effect: DropShadow {\n"
    out += inner + "horizontalOffset: " + num(dx) + "\n"
    out += inner + "verticalOffset: " + num(dy) + "\n"
    out += inner + "radius: " + num(effect.get("radius", 0)) + "\n"
    out += inner + "samples: 17\n"
    out += inner + "color: " + to_color(color.get("r", 0), color.get("g", 0), color.get("b", 0), color.get("a", 0)) + "\n"
    out += tabs(indents) + "}\n"
    return out


def matrix_literal(node: Node) -> str:
    """``Qt.matrix4x4(...)`` expression of the node's affine transform."""
    (a, b, tx), (c, d, ty) = transform_rows(node)
    values = (a, b, tx, 0, c, d, ty, 0, 0, 0, 1, 0, 0, 0, 0, 1)
    return "Qt.matrix4x4(" + ", ".join(num(v) for v in values) + ")"


def make_transforms(node: Node, indents: int) -> str:
    """Emit a ``Matrix4x4`` transform when the node rotates, scales or skews."""
    if "relativeTransform" not in node or is_identity_transform(node):
        return ""
    (a, b, tx), (c, d, ty) = transform_rows(node)
    inner = tabs(indents + 1)
    out = tabs(indents) + "transform: Matrix4x4 {\n"
    out += inner + "matrix: Qt.matrix4x4(\n"
    out += inner + f"{num(a)}, {num(b)}, {num(tx)}, 0,\n"
    out += inner + f"{num(c)}, {num(d)}, {num(ty)}, 0,\n"
    out += inner + "0, 0, 1, 0,\n"
    out += inner + "0, 0, 0, 1)\n"
    out += tabs(indents) + "}\n"
    return out


def make_item(type_name: str, node: Node, indents: int) -> str:
    """Item header followed by effects, transform, visibility and opacity."""
    out = make_reference(type_name, node, indents)
    out += make_effects(node, indents)
    out += make_transforms(node, indents)
    if node.get("visible", True) is False:
        out += tabs(indents) + "visible: false\n"
    if "opacity" in node:
        out += tabs(indents) + "opacity: " + num(node["opacity"]) + "\n"
    return out


# ----------------------------------------------------------------------
# Geometry
# ----------------------------------------------------------------------

def _centered(axis: str, extent: str, node_size: float, parent: Node, offset: int) -> str:
    parent_size = float((parent.get("size") or {}).get(axis, 0))
    parent_id = qml_id(parent.get("id", ""))
    static = (parent_size - node_size) / 2.0 - offset
    base = f"({parent_id}.{extent} - {extent}) / 2"
    if eq(static, 0.0):
        return base
    return f"{base} {'+' if static < 0 else '-'} {num(abs(static))}"


def make_extents(
    ctx: GenerationContext,
    node: Node,
    indents: int,
    parent: Node,
    extents: Tuple[float, float, float, float] = (0.0, 0.0, 0.0, 0.0),
) -> str:
    """Emit ``x``, ``y``, ``width`` and ``height`` honouring layout constraints.

    ``extents`` is ``(dx, dy, dwidth, dheight)`` added to the node geometry.
    CENTER constraints bind against *parent*; every other constraint keeps
    the static position.
    """
    indent = tabs(indents)
    constraints = node.get("constraints") or {}
    horizontal = constraints.get("horizontal", "LEFT")
    vertical = constraints.get("vertical", "TOP")
    out = ""

    # Instance overrides may lack a transform, in which case the position is inherited
    if "relativeTransform" in node:
        px, py = position(node)
        tx = int(px + extents[0])
        ty = int(py + extents[1])

        if horizontal in ("LEFT", "SCALE", "LEFT_RIGHT", "RIGHT"):
            out += indent + f"x:{tx}\n"
        elif horizontal == "CENTER":
            width = float((get_value(ctx, node, "size") or {}).get("x", 0))
            out += indent + "x: " + _centered("x", "width", width, parent, tx) + "\n"

        if vertical in ("TOP", "SCALE", "TOP_BOTTOM", "BOTTOM"):
            out += indent + f"y:{ty}\n"
        elif vertical == "CENTER":
            height = float((get_value(ctx, node, "size") or {}).get("y", 0))
            out += indent + "y: " + _centered("y", "height", height, parent, ty) + "\n"

    if "size" in node:
        size = node["size"] or {}
        out += indent + "width:" + num(float(size.get("x", 0)) + extents[2]) + "\n"
        out += indent + "height:" + num(float(size.get("y", 0)) + extents[3]) + "\n"
    return out


def make_size(node: Node, indents: int) -> str:
    size = node.get("size") or {}
    out = tabs(indents) + "width:" + num(size.get("x", 0)) + "\n"
    out += tabs(indents) + "height:" + num(size.get("y", 0)) + "\n"
    return out


# ----------------------------------------------------------------------
# Fills and images
# ----------------------------------------------------------------------

def make_color(color: Node, indents: int, opacity: float = 1.0) -> str:
    return tabs(indents) + "color:" + to_color(
        color.get("r", 0), color.get("g", 0), color.get("b", 0), float(color.get("a", 0)) * opacity
    ) + "\n"


def make_image_source(
    ctx: GenerationContext,
    ref: str,
    is_rendering: bool,
    indents: int,
    placeholder: Optional[str] = None,
) -> str:
    """Inline the image returned by the provider as a ``source`` binding.

    Raises:
        ImageLoadError: The image is unavailable and there is no placeholder,
            or the placeholder is unavailable too.
    """
    indent = tabs(indents)
    out = ""
    data = ctx.image_provider(ref, is_rendering)
    if not data:
        if not placeholder:
            raise ImageLoadError(f"Cannot read imageRef {ref}", ref)
        logger.warning("Image for %s unavailable, using placeholder '%s'", ref, placeholder)
        data = ctx.image_provider(placeholder, is_rendering)
        if not data:
            raise ImageLoadError("Cannot load placeholder", placeholder, ref)
        out += indent + "//Image load failed, placeholder\n"
        out += indent + "sourceSize: Qt.size(parent.width, parent.height)\n"

    if isinstance(data, (bytes, bytearray)):
        try:
            text = data.decode("ascii")
        except UnicodeDecodeError as exc:
            raise ImageLoadError(f"Image data for {ref} is not an ASCII data URI: {exc}", ref) from exc
    else:
        text = str(data)
    chunks = [text[i:i + IMAGE_CHUNK] for i in range(0, len(text), IMAGE_CHUNK)] or [""]
    out += indent + 'source: "' + '" +\n "'.join(chunks) + '"\n'
    return out


def make_image_ref(ctx: GenerationContext, ref: str, indents: int) -> str:
    inner = tabs(indents + 1)
    out = tabs(indents) + "Image {\n"
    out += inner + "anchors.fill: parent\n"
    out += inner + "mipmap: true\n"
    out += inner + "fillMode: Image.PreserveAspectCrop\n"
    out += make_image_source(ctx, ref, False, indents + 1)
    out += tabs(indents) + "}\n"
    return out


def make_fill(ctx: GenerationContext, fill: Node, indents: int) -> str:
    """Emit a paint as ``color`` plus, for image paints, a child ``Image``."""
    out = ""
    invisible = fill.get("visible", True) is False
    if "color" in fill:
        if not invisible and "opacity" in fill:
            out += make_color(fill["color"], indents, float(fill["opacity"]))
        else:
            out += make_color(fill["color"], indents, 0.0 if invisible else 1.0)
    else:
        out += tabs(indents) + 'color: "transparent"\n'
    if "imageRef" in fill:
        out += make_image_ref(ctx, str(fill["imageRef"]), indents)
    return out


def make_vector(ctx: GenerationContext, node: Node, indents: int, parent: Node) -> str:
    """Extents plus the first fill.

    A string ``fills`` value marks an instance override that keeps the
    component's fill, so nothing is written for it.
    """
    out = make_extents(ctx, node, indents, parent)
    fills = node.get("fills")
    if isinstance(fills, list) and fills:
        out += make_fill(ctx, fills[0], indents)
    elif not isinstance(fills, str):
        out += tabs(indents) + 'color: "transparent"\n'
    return out


# ----------------------------------------------------------------------
# Shapes
# ----------------------------------------------------------------------

def make_shape_stroke(node: Node, indents: int, stroke_type: StrokeType = StrokeType.NORMAL) -> str:
    indent = tabs(indents)
    # Lines render their stroke as fill
    color_key = "fillColor" if node.get("type") == "LINE" else "strokeColor"
    out = ""
    strokes = node.get("strokes")
    if isinstance(strokes, list) and strokes:
        stroke = strokes[0]
        join = stroke.get("strokeJoin", node.get("strokeJoin"))
        out += indent + "joinStyle: ShapePath." + stroke_join(join) + "\n"
        out += indent + color_key + ": " + _paint_color(stroke, float(stroke.get("opacity", 1.0))) + "\n"
    elif not isinstance(strokes, str):
        out += indent + color_key + ': "transparent"\n'
    if "strokeWeight" in node:
        width = float(node["strokeWeight"])
        if stroke_type is StrokeType.DOUBLE:
            width *= 2.0
        out += indent + "strokeWidth:" + num(width) + "\n"
    return out


def make_shape_fill(node: Node, indents: int) -> str:
    indent = tabs(indents)
    out = ""
    if node.get("type") != "LINE":
        fills = node.get("fills")
        if isinstance(fills, list) and fills:
            fill = fills[0]
            out += indent + "fillColor:" + _paint_color(fill, float(fill.get("opacity", 1.0))) + "\n"
        elif not isinstance(fills, str):
            out += indent + 'fillColor:"transparent"\n'
    else:
        out += indent + 'strokeColor: "transparent"\n'
    out += indent + "id: svgpath_" + qml_id(node.get("id", "")) + "\n"
    return out


def make_svg_path(node: Node, index: int, is_fill: bool, indents: int) -> str:
    geometry = node.get("fillGeometry" if is_fill else "strokeGeometry") or []
    path = geometry[index]
    out = ""
    # Winding is per path in the source but per ShapePath in QML
    if index == 0 and path.get("windingRule") == "NONZERO":
        out += tabs(indents) + "fillRule: ShapePath.WindingFill\n"
    out += tabs(indents) + "PathSvg {\n"
    out += tabs(indents + 1) + 'path: "' + str(path.get("path", "")) + '"\n'
    out += tabs(indents) + "}\n"
    return out


def make_shape_fill_data(node: Node, indents: int) -> str:
    """Emit the fill geometry, or the stroke geometry when there is none."""
    for key, is_fill in (("fillGeometry", True), ("strokeGeometry", False)):
        geometry = node.get(key) or []
        if geometry:
            return "".join(make_svg_path(node, i, is_fill, indents) for i in range(len(geometry)))
    return ""


def make_antialiasing(ctx: GenerationContext, indents: int) -> str:
    return tabs(indents) + "antialiasing: true\n" if ctx.has(Flags.ANTIALIAS_SHAPES) else ""
