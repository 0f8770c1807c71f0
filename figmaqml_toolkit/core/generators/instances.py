from __future__ import annotations

"""Component and instance emitter.

A component is generated once, in its own file, as a type exposing every
child through a ``property Component delegate_<id>`` plus geometry override
properties. An instance then only writes what differs from its component:

* nothing but a reference when it is identical;
* a reference with ``x``/``y``/``width``/``height`` (and a matrix when it
  rotates) when only its geometry changed;
* otherwise an override block, followed by per-child delegate overrides.
"""

import logging
from typing import Any, Callable, Dict, Mapping, Optional

from figmaqml_toolkit.core.generators.children import MASKED_ITEM, parse_children_items
from figmaqml_toolkit.core.generators.context import GenerationContext
from figmaqml_toolkit.core.generators.frames import make_container_properties
from figmaqml_toolkit.core.generators.styles import (
    get_value,
    make_item,
    make_reference,
    make_transforms,
    make_vector,
    matrix_literal,
)
from figmaqml_toolkit.core.models import Flags
from figmaqml_toolkit.core.parser.classifier import ItemType, classify
from figmaqml_toolkit.core.utils import delegate_name, is_identity_transform, position, tabs

logger = logging.getLogger(__name__)

__all__ = [
    "GEOMETRY_KEYS",
    "CHILD_IGNORED_KEYS",
    "delta",
    "children_comparator",
    "make_instance_children",
    "parse_instance",
    "parse_component",
]

Node = Mapping[str, Any]
Comparator = Callable[[Any, Any], Any]

GEOMETRY_KEYS = frozenset({"size", "relativeTransform"})

# size and transform already describe the box
CHILD_IGNORED_KEYS = frozenset({"absoluteBoundingBox", "name", "id"})

# Keys that always differ between a component's children and an instance's copies
_CHILD_IDENTITY_KEYS = frozenset({"id", "absoluteBoundingBox", "absoluteRenderBounds"})

_OVERRIDE_PROPERTIES = ("x", "y", "width", "height")


def delta(
    instance: Node,
    base: Node,
    ignored: frozenset | set = frozenset(),
    comparators: Optional[Mapping[str, Comparator]] = None,
) -> Dict[str, Any]:
    """Return the keys of *instance* that differ from *base*.

    Keys missing from *base* are always kept. A key with a comparator keeps
    whatever the comparator returns for ``(base_value, instance_value)``
    unless it returns ``None``. Other keys are kept when their values differ.
    A non-empty result also carries the instance ``name`` unless ignored.
    """
    comparators = comparators or {}
    changes: Dict[str, Any] = {}
    for key, value in instance.items():
        if key in ignored:
            continue
        if key not in base:
            changes[key] = value
        elif key in comparators:
            compared = comparators[key](base[key], value)
            if compared is not None:
                changes[key] = compared
        elif base[key] != value:
            changes[key] = value
    if changes and "name" not in ignored and "name" in instance:
        changes["name"] = instance["name"]
    return changes


def _strip_identity(value: Any) -> Any:
    if isinstance(value, list):
        return [_strip_identity(v) for v in value]
    if isinstance(value, dict):
        return {k: _strip_identity(v) for k, v in value.items() if k not in _CHILD_IDENTITY_KEYS}
    return value


def children_comparator(ctx: GenerationContext, base: Node) -> Comparator:
    """Comparator for the ``children`` key of *base*.

    Children are unchanged when they only differ by ids and absolute boxes,
    or when *base* is a boolean rendered natively (its operands are baked
    into the outline).
    """
    native_boolean = classify(base) is ItemType.BOOLEAN and not ctx.has(Flags.BREAK_BOOLEANS)

    def compare(base_children: Any, instance_children: Any) -> Any:
        if native_boolean or _strip_identity(base_children) == _strip_identity(instance_children):
            return None
        return instance_children

    return compare


def _is_geometry_only(changes: Mapping[str, Any]) -> bool:
    return bool(changes) and set(changes) - {"name"} <= GEOMETRY_KEYS


def _geometry_overrides(ctx: GenerationContext, node: Node, indents: int) -> str:
    indent = tabs(indents)
    px, py = position(node)
    size = get_value(ctx, node, "size") or {}
    out = indent + f"x: {int(px)}\n"
    out += indent + f"y: {int(py)}\n"
    out += indent + f"width: {int(float(size.get('x', 0)))}\n"
    out += indent + f"height: {int(float(size.get('y', 0)))}\n"
    out += make_transforms(node, indents)
    return out


def make_instance_children(ctx: GenerationContext, node: Node, base: Node, indents: int) -> str:
    """Write the delegate overrides of an instance's children.

    Children are matched to the component's children by the last ``;``
    segment of their id. If the child counts differ, a component child has
    no match, or the children hold a mask group, every instance child is
    written out again in full. Children without output (slices) have no
    delegate and are never overridden.
    """
    items = parse_children_items(ctx, node, indents)
    base_children = list(base.get("children") or [])
    instance_children = list(node.get("children") or [])
    if MASKED_ITEM in items or len(base_children) != len(instance_children):
        logger.debug(
            "Instance %s has %d children, component %d: children written in full",
            node.get("id"), len(instance_children), len(base_children),
        )
        return "".join(items.values())

    by_base_id = {c.get("id", "").split(";")[-1]: c for c in instance_children}
    indent = tabs(indents)
    out = ""
    for base_child in base_children:
        base_id = base_child.get("id", "")
        child = by_base_id.get(base_id)
        if child is None:
            logger.debug("Instance %s has no child for %s: children written in full", node.get("id"), base_id)
            return "".join(items.values())

        key = child.get("id", "")
        if key not in items:
            continue
        changes = delta(child, base_child, CHILD_IGNORED_KEYS, {"children": children_comparator(ctx, base_child)})
        if not changes:
            continue

        delegate = delegate_name(base_id)
        if _is_geometry_only(changes):
            if "relativeTransform" in changes:
                if not is_identity_transform(child):
                    out += indent + f"{delegate}_transform: {matrix_literal(child)}\n"
                px, py = position(child)
                out += indent + f"{delegate}_x: {int(px)}\n"
                out += indent + f"{delegate}_y: {int(py)}\n"
            if "size" in changes:
                size = changes["size"] or {}
                out += indent + f"{delegate}_width: {int(float(size.get('x', 0)))}\n"
                out += indent + f"{delegate}_height: {int(float(size.get('y', 0)))}\n"
            continue

        out += indent + delegate + ": " + items[key].lstrip()
    return out


def parse_instance(ctx: GenerationContext, node: Node, indents: int, parent: Node) -> str:
    """Emit an instance, or a plain reference to a component node."""
    is_instance = classify(node) is ItemType.INSTANCE
    component_id = str(node.get("componentId") if is_instance else node.get("id"))
    ctx.component_ids.add(component_id)
    component = ctx.component(component_id, node.get("id"))
    closing = tabs(indents - 1) + "}\n"

    if not is_instance:
        return make_reference(component.name, node, indents) + closing

    changes = delta(
        node,
        component.node,
        ctx.instance_ignored_keys,
        {"children": children_comparator(ctx, component.node)},
    )
    if not changes:
        logger.debug("Instance %s matches %s", node.get("id"), component.name)
        return make_reference(component.name, node, indents) + closing

    if _is_geometry_only(changes):
        logger.debug("Instance %s of %s overrides geometry only", node.get("id"), component.name)
        return make_reference(component.name, node, indents) + _geometry_overrides(ctx, node, indents) + closing

    logger.debug("Instance %s of %s overrides %s", node.get("id"), component.name, sorted(changes))
    override: Dict[str, Any] = {k: node[k] for k in ("id", "name", "type", "componentId") if k in node}
    override.update(changes)
    override.pop("children", None)
    # An empty string keeps the component's paint instead of clearing it
    for key in ("fills", "strokes"):
        if key in node and key not in override:
            override[key] = ""

    out = make_item(component.name, override, indents)
    out += make_vector(ctx, override, indents, parent)
    out += make_instance_children(ctx, node, component.node, indents)
    return out + closing


def _delegate_properties(delegate: str, markup: str, indents: int) -> str:
    indent = tabs(indents)
    handler = delegate[0].upper() + delegate[1:]
    out = indent + f"property Component {delegate}: " + markup.lstrip()
    out += indent + f"property Item i_{delegate}\n"
    out += indent + f"property matrix4x4 {delegate}_transform: Qt.matrix4x4({','.join(['NaN'] * 16)})\n"
    out += indent + (
        f"on{handler}_transformChanged: "
        f"{{if(i_{delegate} && i_{delegate}.transform != {delegate}_transform) "
        f"i_{delegate}.transform = {delegate}_transform;}}\n"
    )
    for prop in _OVERRIDE_PROPERTIES:
        out += indent + f"property real {delegate}_{prop}: NaN\n"
        out += indent + (
            f"on{handler}_{prop}Changed: "
            f"{{if(i_{delegate} && i_{delegate}.{prop} != {delegate}_{prop}) "
            f"i_{delegate}.{prop} = {delegate}_{prop};}}\n"
        )
    return out


def _delegate_creation(delegate: str, indents: int) -> str:
    indent = tabs(indents)
    out = indent + f"const o_{delegate} = {{}}\n"
    out += indent + f"if(!isNaN({delegate}_transform.m11)) o_{delegate}['transform'] = {delegate}_transform;\n"
    for prop in _OVERRIDE_PROPERTIES:
        out += indent + f"if(!isNaN({delegate}_{prop})) o_{delegate}['{prop}'] = {delegate}_{prop};\n"
    out += indent + f"i_{delegate} = {delegate}.createObject(this, o_{delegate})\n"
    for prop in _OVERRIDE_PROPERTIES:
        out += indent + f"{delegate}_{prop} = Qt.binding(()=>i_{delegate}.{prop})\n"
    return out


def parse_component(ctx: GenerationContext, node: Node, indents: int, parent: Node) -> str:
    """Emit a component node.

    With ``PARSE_COMPONENT`` the full definition is written; each child
    becomes an overridable delegate created when the component completes.
    Otherwise the node is a reference like any instance.
    """
    if not ctx.has(Flags.PARSE_COMPONENT):
        return parse_instance(ctx, node, indents, parent)

    indent = tabs(indents)
    out = make_item("Rectangle", node, indents)
    out += make_vector(ctx, node, indents, parent)
    out += make_container_properties(node, indents)

    delegates = []
    for key, markup in parse_children_items(ctx, node, indents).items():
        if not markup:
            continue
        delegate = delegate_name(key)
        delegates.append(delegate)
        out += _delegate_properties(delegate, markup, indents)

    out += indent + "Component.onCompleted: {\n"
    for delegate in delegates:
        out += _delegate_creation(delegate, indents + 1)
    out += indent + "}\n"
    out += tabs(indents - 1) + "}\n"
    return out
