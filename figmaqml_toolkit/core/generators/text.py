from __future__ import annotations

"""Text emitter and text style mapping."""

import math
from typing import Any, Dict, Mapping

from figmaqml_toolkit.core.generators.context import GenerationContext
from figmaqml_toolkit.core.generators.styles import make_fill, make_item, make_vector
from figmaqml_toolkit.core.utils import escape_string, font_weight, num, tabs

__all__ = ["text_styles", "parse_style", "parse_text"]

Node = Mapping[str, Any]

_CAPITALIZATION = {
    "UPPER": "Font.AllUppercase",
    "LOWER": "Font.AllLowercase",
    "TITLE": "Font.MixedCase",
    "SMALL_CAPS": "Font.SmallCaps",
    "SMALL_CAPS_FORCED": "Font.Capitalize",
}

_DECORATION = {
    "STRIKETHROUGH": "font.strikeout",
    "UNDERLINE": "font.underline",
}

_H_ALIGN = {
    "LEFT": "Text.AlignLeft",
    "RIGHT": "Text.AlignRight",
    "CENTER": "Text.AlignHCenter",
    "JUSTIFIED": "Text.AlignJustify",
}

_V_ALIGN = {
    "TOP": "Text.AlignTop",
    "BOTTOM": "Text.AlignBottom",
    "CENTER": "Text.AlignVCenter",
}


def text_styles(ctx: GenerationContext, style: Node) -> Dict[str, str]:
    """Map a text ``style`` block to QML ``Text`` properties, sorted by name.

    Values the target has no equivalent for (``ORIGINAL`` case, unknown
    alignments) are left out.
    """
    styles: Dict[str, str] = {
        "font.family": '"' + escape_string(ctx.font_resolver(str(style.get("fontFamily", "")))) + '"',
        "font.italic": "true" if style.get("italic") else "false",
        "font.pixelSize": str(int(math.floor(float(style.get("fontSize", 0) or 0)))),
        "font.weight": font_weight(style.get("fontWeight", 400)),
        "font.letterSpacing": num(style.get("letterSpacing", 0)),
    }
    capitalization = _CAPITALIZATION.get(style.get("textCase", ""))
    if capitalization:
        styles["font.capitalization"] = capitalization
    decoration = _DECORATION.get(style.get("textDecoration", ""))
    if decoration:
        styles[decoration] = "true"
    if "paragraphSpacing" in style:
        styles["topPadding"] = str(int(style["paragraphSpacing"]))
    if "paragraphIndent" in style:
        styles["leftPadding"] = str(int(style["paragraphIndent"]))
    h_align = _H_ALIGN.get(style.get("textAlignHorizontal", ""))
    if h_align:
        styles["horizontalAlignment"] = h_align
    v_align = _V_ALIGN.get(style.get("textAlignVertical", ""))
    if v_align:
        styles["verticalAlignment"] = v_align
    return dict(sorted(styles.items()))


def parse_style(ctx: GenerationContext, style: Node, indents: int) -> str:
    indent = tabs(indents)
    out = "".join(f"{indent}{key}: {value}\n" for key, value in text_styles(ctx, style).items())
    fills = style.get("fills")
    if isinstance(fills, list) and fills:
        out += make_fill(ctx, fills[0], indents)
    return out


def parse_text(ctx: GenerationContext, node: Node, indents: int, parent: Node) -> str:
    indent = tabs(indents)
    out = make_item("Text", node, indents)
    out += make_vector(ctx, node, indents, parent)
    out += indent + "wrapMode: Text.WordWrap\n"
    out += indent + 'text:"' + escape_string(str(node.get("characters", ""))) + '"\n'
    out += parse_style(ctx, node.get("style") or {}, indents)
    out += tabs(indents - 1) + "}\n"
    return out
