from __future__ import annotations

"""Simple reusable helper functions.

These helpers are side-effect-free and contain no disk or network I/O; they
are shared by the parser, the emitters and the services.
"""

import math
import re
from typing import Any, Dict, Mapping, Tuple

from figmaqml_toolkit.core.models import FIGMA_SUFFIX

__all__ = [
    "INDENT",
    "tabs",
    "num",
    "valid_file_name",
    "qml_id",
    "delegate_name",
    "escape_string",
    "encode_color",
    "to_color",
    "eq",
    "position",
    "transform_rows",
    "is_identity_transform",
    "font_weight",
    "stroke_join",
]

INDENT = "    "

_PATH_UNSAFE_RE = re.compile(r'[\\/:*?"<>|\s]')
_NON_IDENT_RE = re.compile(r"[^a-zA-Z0-9_]")
_NON_ALNUM_RE = re.compile(r"[^a-zA-Z0-9]")

# Qt font weights, ascending, on the 0-99 scale used by Font.Weight
_FONT_WEIGHTS: Tuple[Tuple[str, float], ...] = (
    ("Font.Thin", 0),
    ("Font.ExtraLight", 12),
    ("Font.Light", 25),
    ("Font.Normal", 50),
    ("Font.Medium", 57),
    ("Font.DemiBold", 63),
    ("Font.Bold", 75),
    ("Font.ExtraBold", 81),
    ("Font.Black", 87),
)

_STROKE_JOINS: Dict[str, str] = {
    "MITER": "MiterJoin",
    "BEVEL": "BevelJoin",
    "ROUND": "RoundJoin",
}


def tabs(indents: int) -> str:
    return INDENT * max(indents, 0)


def num(value: Any) -> str:
    """Format a number the way QML expects it: shortest form, no trailing zeros."""
    return f"{float(value or 0):g}"


def valid_file_name(item_name: str) -> str:
    """Return a QML type name (and file stem) derived from *item_name*.

    Appends the reserved ``_figma`` suffix unless already present, replaces
    path-unsafe characters and whitespace with underscores and makes sure the
    name starts with an uppercase ASCII letter.

    Examples:
        >>> valid_file_name("My Button")
        'My_Button_figma'
        >>> valid_file_name("1st")
        'C1st_figma'
    """
    if not item_name:
        return ""
    name = item_name if item_name.endswith(FIGMA_SUFFIX) else item_name + FIGMA_SUFFIX
    name = _PATH_UNSAFE_RE.sub("_", name)
    name = _NON_IDENT_RE.sub("_", name)
    first = name[0]
    if not ("a" <= first <= "z" or "A" <= first <= "Z"):
        name = "C" + name
    return name[0].upper() + name[1:]


def qml_id(node_id: str) -> str:
    """Map a node id such as ``12:34`` to a QML id such as ``figma_12_34``."""
    return "figma_" + _NON_ALNUM_RE.sub("_", node_id or "").lower()


def delegate_name(node_id: str) -> str:
    return "delegate_" + _NON_IDENT_RE.sub("_", node_id or "")


def escape_string(text: str) -> str:
    """Escape *text* for use inside a double-quoted QML string literal."""
    return (
        (text or "")
        .replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\r", "")
        .replace("\n", "\\n")
    )


def _channel(value: Any) -> int:
    return min(255, max(0, int(math.floor(float(value or 0) * 255.0 + 0.5))))


def encode_color(r: Any, g: Any, b: Any, a: Any = 1.0) -> str:
    """Encode unit-range RGBA channels as ``#aarrggbb``.

    Each channel is rounded half up and clamped to ``0..255``.
    """
    return "#" + "".join(f"{_channel(c):02x}" for c in (a, r, g, b))


def to_color(r: Any, g: Any, b: Any, a: Any = 1.0) -> str:
    """Quoted form of :func:`encode_color`, ready to be used as a QML value."""
    return f'"{encode_color(r, g, b, a)}"'


def eq(a: float, b: float) -> bool:
    return math.fabs(a - b) < 2.220446049250313e-16


def transform_rows(node: Mapping[str, Any]) -> Tuple[Tuple[float, float, float], Tuple[float, float, float]]:
    """Return the two rows of the node's 2x3 ``relativeTransform``."""
    rows = node.get("relativeTransform") or [[1, 0, 0], [0, 1, 0]]
    r1 = tuple(float(v) for v in rows[0][:3])
    r2 = tuple(float(v) for v in rows[1][:3])
    return r1, r2  # type: ignore[return-value]


def position(node: Mapping[str, Any]) -> Tuple[float, float]:
    r1, r2 = transform_rows(node)
    return r1[2], r2[2]


def is_identity_transform(node: Mapping[str, Any]) -> bool:
    """True when the transform only translates (no rotation, scale or skew)."""
    r1, r2 = transform_rows(node)
    return eq(r1[0], 1.0) and eq(r1[1], 0.0) and eq(r2[0], 0.0) and eq(r2[1], 1.0)


def font_weight(value: Any) -> str:
    """Bucket a 100-900 design weight into a ``Font.*`` enum name.

    The weight is rescaled to Qt's 0-99 range and the first bucket whose
    threshold is not below it wins.
    """
    scaled = ((float(value or 0) - 100.0) / 900.0) * 90.0
    for name, threshold in _FONT_WEIGHTS:
        if scaled <= threshold:
            return name
    return _FONT_WEIGHTS[-1][0]


def stroke_join(join: str | None) -> str:
    return _STROKE_JOINS.get(join or "", "MiterJoin")
