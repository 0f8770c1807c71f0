from __future__ import annotations

"""Boolean operation compositor.

QtQuick has no path boolean operations, so with ``BREAK_BOOLEANS`` the
operands are rendered as hidden items and combined through opacity masks
(UNION, SUBTRACT, INTERSECT) or a pair of fragment shaders (EXCLUDE). Without
the flag the node is emitted as a plain vector from its precomputed outline.
"""

import logging
from typing import Any, List, Mapping

from figmaqml_toolkit.core.exceptions import BooleanOperationError
from figmaqml_toolkit.core.generators.children import parse_children
from figmaqml_toolkit.core.generators.context import GenerationContext
from figmaqml_toolkit.core.generators.styles import make_extents, make_fill, make_item
from figmaqml_toolkit.core.generators.vectors import parse_vector
from figmaqml_toolkit.core.models import Flags
from figmaqml_toolkit.core.utils import qml_id, tabs

logger = logging.getLogger(__name__)

__all__ = ["BOOLEAN_OPERATIONS", "parse_boolean"]

Node = Mapping[str, Any]

BOOLEAN_OPERATIONS = ("UNION", "SUBTRACT", "INTERSECT", "EXCLUDE")

# Symmetric difference of the current and the accumulated mask
_EXCLUDE_SHADER = (
    "uniform lowp sampler2D colorSource;",
    "uniform lowp sampler2D prevMask;",
    "uniform lowp sampler2D currentMask;",
    "uniform lowp float qt_Opacity;",
    "varying highp vec2 qt_TexCoord0;",
    "void main() {",
    "    vec4 color = texture2D(colorSource, qt_TexCoord0);",
    "    vec4 cm = texture2D(currentMask, qt_TexCoord0);",
    "    vec4 pm = texture2D(prevMask, qt_TexCoord0);",
    "    gl_FragColor = qt_Opacity * color * ((cm.a * (1.0 - pm.a)) + ((1.0 - cm.a) * pm.a));",
    '}"',
)

# First pass, nothing accumulated yet
_FIRST_PASS_SHADER = (
    "uniform lowp sampler2D colorSource;",
    "uniform lowp sampler2D currentMask;",
    "uniform lowp float qt_Opacity;",
    "varying highp vec2 qt_TexCoord0;",
    "void main() {",
    "    vec4 color = texture2D(colorSource, qt_TexCoord0);",
    "    vec4 cm = texture2D(currentMask, qt_TexCoord0);",
    "    gl_FragColor = cm.a * color;",
    '}"',
)


def _parse(ctx: GenerationContext, child: Node, indents: int, parent: Node) -> str:
    from figmaqml_toolkit.core.converter.figma_to_qml import parse_node

    return parse_node(ctx, child, indents, parent)


def _color_source(ctx: GenerationContext, node: Node, indents: int, source_id: str) -> str:
    """Hidden rectangle painted with the boolean's fill; the color of every operation."""
    inner = tabs(indents + 1)
    out = tabs(indents) + "Rectangle {\n"
    out += inner + "id: " + source_id + "\n"
    out += inner + "anchors.fill: parent\n"
    fills = node.get("fills")
    if isinstance(fills, list) and fills:
        out += make_fill(ctx, fills[0], indents + 1)
    elif not isinstance(fills, str):
        out += inner + 'color: "transparent"\n'
    out += inner + "visible: false\n"
    return out


def _mask(
    source: str, mask: str, indents: int, invert: bool = False, extra: str = "", fill: str = ""
) -> str:
    inner = tabs(indents + 1)
    out = tabs(indents) + "OpacityMask {\n"
    out += extra
    out += inner + "anchors.fill:" + (fill or source) + "\n"
    out += inner + "source:" + source + "\n"
    out += inner + "maskSource:" + mask + "\n"
    if invert:
        out += inner + "invert: true\n"
    out += tabs(indents) + "}\n"
    return out


def _hidden_item(item_id: str, indents: int, body: str, layered: bool = False) -> str:
    inner = tabs(indents + 1)
    out = tabs(indents) + "Item {\n"
    out += inner + "id: " + item_id + "\n"
    out += inner + "anchors.fill: parent\n"
    out += inner + "visible: false\n"
    if layered:
        out += inner + "layer.enabled: true\n"
    out += body
    out += tabs(indents) + "}\n"
    return out


def _union(ctx: GenerationContext, node: Node, indents: int, source_id: str, mask_id: str) -> str:
    out = _color_source(ctx, node, indents, source_id)
    out += tabs(indents) + "}\n"
    out += _hidden_item(mask_id, indents, parse_children(ctx, node, indents + 1))
    out += _mask(source_id, mask_id, indents)
    return out


def _subtract(
    ctx: GenerationContext, node: Node, children: List[Node], indents: int, source_id: str, mask_id: str
) -> str:
    # child[0] cut out of the color source, then everything else removed from it
    inner = tabs(indents + 1)
    base = _color_source(ctx, node, indents + 1, source_id)
    base += inner + "}\n"
    base += _hidden_item(mask_id, indents + 1, _parse(ctx, children[0], indents + 3, node))
    base += _mask(source_id, mask_id, indents + 1)
    out = _hidden_item(source_id + "_subtract", indents, base)

    rest = "".join(_parse(ctx, child, indents + 2, node) for child in children[1:])
    out += _hidden_item(mask_id + "_subtract", indents, rest)
    out += _mask(source_id + "_subtract", mask_id + "_subtract", indents, invert=True)
    return out


def _intersect(
    ctx: GenerationContext, node: Node, children: List[Node], indents: int, source_id: str, mask_id: str
) -> str:
    out = _color_source(ctx, node, indents, source_id)
    out += tabs(indents) + "}\n"
    next_source = source_id
    last = len(children) - 1
    for i, child in enumerate(children):
        child_mask = f"{mask_id}_{i}"
        out += _hidden_item(child_mask, indents, _parse(ctx, child, indents + 2, node))
        result_id = f"{source_id}_{i}"
        extra = tabs(indents + 1) + "id: " + result_id + "\n"
        if i < last:
            extra += tabs(indents + 1) + "visible: false\n"
        out += _mask(next_source, child_mask, indents, extra=extra, fill=source_id)
        next_source = result_id
    return out


def _shader_property(name: str, lines: tuple, indents: int) -> str:
    out = tabs(indents) + f'readonly property string {name}: "\n'
    out += "".join(tabs(indents + 1) + line + "\n" for line in lines)
    return out


def _exclude(
    ctx: GenerationContext, node: Node, children: List[Node], indents: int, source_id: str, mask_id: str
) -> str:
    inner = tabs(indents + 1)
    out = _color_source(ctx, node, indents, source_id)
    out += inner + "layer.enabled: true\n"
    out += _shader_property("shaderSource", _EXCLUDE_SHADER, indents + 1)
    out += _shader_property("shaderSource0", _FIRST_PASS_SHADER, indents + 1)
    out += tabs(indents) + "}\n"

    previous = ""
    last = len(children) - 1
    for i, child in enumerate(children):
        child_mask = f"{mask_id}_{i}"
        out += _hidden_item(child_mask, indents, _parse(ctx, child, indents + 2, node), layered=True)

        out += tabs(indents) + "ShaderEffect {\n"
        out += inner + "anchors.fill: parent\n"
        out += inner + "layer.enabled: true\n"
        out += inner + "property var colorSource:" + source_id + "\n"
        if previous:
            out += inner + "property var prevMask: ShaderEffectSource {\n"
            out += tabs(indents + 2) + "sourceItem: " + previous + "\n"
            out += inner + "}\n"
        out += inner + "property var currentMask:" + child_mask + "\n"
        out += inner + "fragmentShader: " + source_id + (".shaderSource" if previous else ".shaderSource0") + "\n"
        previous = f"{source_id}_{i}"
        if i < last:
            out += inner + "visible: false\n"
            out += inner + "id: " + previous + "\n"
        out += tabs(indents) + "}\n"
    return out


def parse_boolean(ctx: GenerationContext, node: Node, indents: int, parent: Node) -> str:
    """Emit a boolean operation node.

    Raises:
        BooleanOperationError: With ``BREAK_BOOLEANS`` and fewer than two operands.
    """
    if not ctx.has(Flags.BREAK_BOOLEANS):
        return parse_vector(ctx, node, indents, parent)

    children = list(node.get("children") or [])
    if len(children) < 2:
        raise BooleanOperationError("Boolean needs at least two elements", node.get("id"))

    operation = node.get("booleanOperation")
    if operation not in BOOLEAN_OPERATIONS:
        logger.warning("Boolean operation '%s' of %s is not supported, skipped", operation, node.get("id"))
        return ""

    qid = qml_id(node.get("id", ""))
    source_id = "source_" + qid
    mask_id = "maskSource_" + qid

    out = make_item("Item", node, indents)
    out += make_extents(ctx, node, indents, parent)
    if operation == "UNION":
        out += _union(ctx, node, indents, source_id, mask_id)
    elif operation == "SUBTRACT":
        out += _subtract(ctx, node, children, indents, source_id, mask_id)
    elif operation == "INTERSECT":
        out += _intersect(ctx, node, children, indents, source_id, mask_id)
    else:
        out += _exclude(ctx, node, children, indents, source_id, mask_id)
    out += tabs(indents - 1) + "}\n"
    return out
