from __future__ import annotations

"""Read-only helpers over a decoded design document."""

import logging
from typing import Any, Dict, List, Mapping

from figmaqml_toolkit.core.models import Canvas
from figmaqml_toolkit.core.utils import encode_color

logger = logging.getLogger(__name__)

__all__ = ["get_objects_by_type", "collect_instance_component_ids", "read_canvases", "document_name"]


def get_objects_by_type(node: Mapping[str, Any], type_tag: str) -> Dict[str, Dict[str, Any]]:
    """Return ``{id: node}`` for every node of *type_tag* under *node*.

    The search does not descend into a matching node, so components nested in
    a component are reached through their own definition.
    """
    found: Dict[str, Dict[str, Any]] = {}
    if node.get("type") == type_tag:
        found[node.get("id", "")] = node  # type: ignore[assignment]
        return found
    for child in node.get("children") or []:
        found.update(get_objects_by_type(child, type_tag))
    return found


def collect_instance_component_ids(node: Mapping[str, Any]) -> List[str]:
    """Return the ``componentId`` of every instance under *node*, in document order."""
    ids: List[str] = []
    stack = [node]
    while stack:
        current = stack.pop()
        if current.get("type") == "INSTANCE" and current.get("componentId"):
            cid = current["componentId"]
            if cid not in ids:
                ids.append(cid)
        stack.extend(reversed(current.get("children") or []))
    return ids


def read_canvases(document: Mapping[str, Any]) -> List[Canvas]:
    """Build one :class:`Canvas` per top-level page of *document*."""
    canvases: List[Canvas] = []
    for page in (document.get("document") or {}).get("children") or []:
        col = page.get("backgroundColor") or {}
        canvases.append(
            Canvas(
                name=page.get("name", ""),
                id=page.get("id", ""),
                color=encode_color(col.get("r", 0), col.get("g", 0), col.get("b", 0), col.get("a", 0)),
                elements=tuple(page.get("children") or ()),
            )
        )
    logger.debug("Document holds %d canvas(es)", len(canvases))
    return canvases


def document_name(document: Mapping[str, Any]) -> str:
    return str(document.get("name", ""))
