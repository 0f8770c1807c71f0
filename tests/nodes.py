"""Builders for raw design nodes used across the test-suite."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

SQUARE_PATH = "M0 0L10 0L10 10L0 10L0 0Z"


def _base(node_type: str, node_id: str, name: str, x: float, y: float, w: float, h: float) -> Dict[str, Any]:
    return {
        "id": node_id,
        "name": name,
        "type": node_type,
        "relativeTransform": [[1, 0, x], [0, 1, y]],
        "size": {"x": w, "y": h},
        "absoluteBoundingBox": {"x": x, "y": y, "width": w, "height": h},
        "constraints": {"horizontal": "LEFT", "vertical": "TOP"},
    }


def solid(r: float = 1.0, g: float = 0.0, b: float = 0.0, a: float = 1.0, **extra: Any) -> Dict[str, Any]:
    paint = {"type": "SOLID", "color": {"r": r, "g": g, "b": b, "a": a}}
    paint.update(extra)
    return paint


def rect(node_id: str = "1:2", name: str = "Rect", x: float = 0, y: float = 0,
         w: float = 10, h: float = 10, **extra: Any) -> Dict[str, Any]:
    node = _base("RECTANGLE", node_id, name, x, y, w, h)
    node["fillGeometry"] = [{"path": SQUARE_PATH, "windingRule": "NONZERO"}]
    node.update(extra)
    return node


def text(node_id: str = "1:3", characters: str = "Hello", style: Optional[Dict[str, Any]] = None,
         **extra: Any) -> Dict[str, Any]:
    node = _base("TEXT", node_id, "Label", 0, 0, 100, 20)
    node["characters"] = characters
    node["fills"] = [solid(0, 0, 0)]
    node["style"] = style if style is not None else {
        "fontFamily": "Roboto",
        "fontSize": 14.5,
        "fontWeight": 400,
    }
    node.update(extra)
    return node


def frame(node_id: str = "1:1", name: str = "Frame", children: Optional[List[Dict[str, Any]]] = None,
          node_type: str = "FRAME", w: float = 100, h: float = 100, **extra: Any) -> Dict[str, Any]:
    node = _base(node_type, node_id, name, 0, 0, w, h)
    node["children"] = list(children or [])
    node["fills"] = [solid(1, 1, 1)]
    node.update(extra)
    return node


def boolean(operation: str, children: List[Dict[str, Any]], node_id: str = "2:1", **extra: Any) -> Dict[str, Any]:
    node = _base("BOOLEAN_OPERATION", node_id, "Bool", 0, 0, 20, 20)
    node["booleanOperation"] = operation
    node["children"] = children
    node["fills"] = [solid(0, 0, 1)]
    node["fillGeometry"] = [{"path": SQUARE_PATH, "windingRule": "NONZERO"}]
    node.update(extra)
    return node


def component(node_id: str = "10:1", name: str = "Button", children: Optional[List[Dict[str, Any]]] = None,
              **extra: Any) -> Dict[str, Any]:
    return frame(node_id, name, children, node_type="COMPONENT", w=80, h=30, **extra)


def instance_of(base: Dict[str, Any], node_id: str = "20:1", **overrides: Any) -> Dict[str, Any]:
    """Copy *base* as an instance, children ids prefixed the way the editor does."""
    node = dict(base)
    node["id"] = node_id
    node["type"] = "INSTANCE"
    node["componentId"] = base["id"]
    node["absoluteBoundingBox"] = {"x": 500, "y": 500, "width": 80, "height": 30}
    node["children"] = [
        dict(child, id=f"I{node_id};{child['id']}", absoluteBoundingBox={"x": 501, "y": 501})
        for child in base.get("children") or []
    ]
    node.update(overrides)
    return node


def document(pages: List[Dict[str, Any]], components: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    return {
        "name": "Design",
        "document": {"id": "0:0", "type": "DOCUMENT", "children": pages},
        "components": components or {},
    }


def page(children: List[Dict[str, Any]], node_id: str = "0:1", name: str = "Page 1") -> Dict[str, Any]:
    return {
        "id": node_id,
        "name": name,
        "type": "CANVAS",
        "backgroundColor": {"r": 1, "g": 1, "b": 1, "a": 1},
        "children": children,
    }
