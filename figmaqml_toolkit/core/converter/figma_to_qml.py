from __future__ import annotations

"""Figma document to QML conversion entry points.

``parse_node`` is the recursive dispatcher every emitter calls back into.
The public functions (``build_components``, ``canvases``, ``element`` and
``component``) never raise generation errors: a failure is reported once to
the host's error sink and returned as a failed
:class:`~figmaqml_toolkit.core.models.OperationResult`, without partial
markup.
"""

import logging
from typing import Any, Iterable, Mapping, Optional

from figmaqml_toolkit.core.exceptions import FigmaQmlError, UnsupportedNodeTypeError
from figmaqml_toolkit.core.generators.booleans import parse_boolean
from figmaqml_toolkit.core.generators.context import (
    DEFAULT_INSTANCE_IGNORED_KEYS,
    PLACEHOLDER,
    GenerationContext,
)
from figmaqml_toolkit.core.generators.frames import parse_frame, parse_plain_item, parse_slice
from figmaqml_toolkit.core.generators.instances import parse_component, parse_instance
from figmaqml_toolkit.core.generators.rendered import parse_rendered, should_prerender
from figmaqml_toolkit.core.generators.text import parse_text
from figmaqml_toolkit.core.generators.vectors import parse_vector
from figmaqml_toolkit.core.interfaces import ErrorSink, FontResolver, ImageProvider, NodeFetcher
from figmaqml_toolkit.core.models import ComponentRegistry, Flags, GeneratedElement, OperationResult
from figmaqml_toolkit.core.parser.classifier import ItemType, classify
from figmaqml_toolkit.core.parser.document import read_canvases
from figmaqml_toolkit.core.parser.registry import build_registry
from figmaqml_toolkit.core.utils import valid_file_name

logger = logging.getLogger(__name__)

__all__ = [
    "parse_node",
    "generate_element",
    "build_components",
    "canvases",
    "element",
    "component",
]

Node = Mapping[str, Any]


def parse_node(ctx: GenerationContext, node: Node, indents: int, parent: Node) -> str:
    """Emit *node* and its subtree.

    Args:
        ctx: Generation state
        node: Raw design node
        indents: Indentation level of the node's properties
        parent: The node's parent, used for CENTER constraints and
            prerender positioning (the node itself at top level)

    Raises:
        FigmaQmlError: On any generation failure.
    """
    kind = classify(node)
    if should_prerender(ctx, node):
        return parse_rendered(ctx, node, indents, parent)

    if kind is ItemType.VECTOR:
        return parse_vector(ctx, node, indents, parent)
    elif kind is ItemType.TEXT:
        return parse_text(ctx, node, indents, parent)
    elif kind is ItemType.FRAME:
        return parse_frame(ctx, node, indents, parent)
    elif kind is ItemType.COMPONENT:
        return parse_component(ctx, node, indents, parent)
    elif kind is ItemType.BOOLEAN:
        return parse_boolean(ctx, node, indents, parent)
    elif kind is ItemType.INSTANCE:
        return parse_instance(ctx, node, indents, parent)
    elif kind is ItemType.NONE:
        if node.get("type") == "SLICE":
            return parse_slice(ctx, node, indents, parent)
        return parse_plain_item(ctx, node, indents, parent)
    raise UnsupportedNodeTypeError(str(node.get("type")), node.get("id"))


def generate_element(ctx: GenerationContext, node: Node) -> GeneratedElement:
    """Convert a top-level node; raises on failure."""
    markup = parse_node(ctx, node, 1, node)
    return GeneratedElement(
        name=valid_file_name(str(node.get("name", ""))),
        id=str(node.get("id", "")),
        type=str(node.get("type", "")),
        data=markup.encode("utf-8"),
        components=tuple(sorted(ctx.component_ids)),
    )


def _fail(error_sink: ErrorSink, operation: str, exc: FigmaQmlError) -> OperationResult:
    message = str(exc)
    logger.error("%s failed: %s", operation, message)
    error_sink(message, True)
    return OperationResult.failure(message, exc.kind)


def build_components(
    document: Mapping[str, Any], error_sink: ErrorSink, node_fetcher: NodeFetcher
) -> OperationResult:
    """Build the :class:`ComponentRegistry` of *document*."""
    try:
        registry = build_registry(document, node_fetcher)
    except FigmaQmlError as exc:
        return _fail(error_sink, "Component registry", exc)
    return OperationResult.ok(registry, f"{len(registry)} component(s)")


def canvases(document: Mapping[str, Any], error_sink: ErrorSink) -> OperationResult:
    """List the canvases of *document* as :class:`Canvas` values."""
    try:
        result = read_canvases(document)
    except FigmaQmlError as exc:
        return _fail(error_sink, "Canvas listing", exc)
    return OperationResult.ok(result, f"{len(result)} canvas(es)")


def _generate(
    node: Node,
    flags: Flags,
    error_sink: ErrorSink,
    image_provider: ImageProvider,
    font_resolver: FontResolver,
    registry: ComponentRegistry,
    placeholder: Optional[str],
    instance_ignored_keys: Optional[Iterable[str]],
) -> OperationResult:
    ctx = GenerationContext(
        flags=Flags(flags),
        image_provider=image_provider,
        font_resolver=font_resolver,
        registry=registry,
        placeholder=placeholder or PLACEHOLDER,
        instance_ignored_keys=(
            frozenset(instance_ignored_keys)
            if instance_ignored_keys is not None
            else DEFAULT_INSTANCE_IGNORED_KEYS
        ),
    )
    logger.info("Generating %s '%s' (%s)", node.get("type"), node.get("name"), node.get("id"))
    try:
        generated = generate_element(ctx, node)
    except FigmaQmlError as exc:
        return _fail(error_sink, f"Generation of {node.get('id')}", exc)
    logger.info(
        "Generated %s: %d bytes, %d component reference(s)",
        generated.name, len(generated.data), len(generated.components),
    )
    return OperationResult.ok(generated, generated.name)


def element(
    node: Node,
    flags: Flags,
    error_sink: ErrorSink,
    image_provider: ImageProvider,
    font_resolver: FontResolver,
    registry: ComponentRegistry,
    placeholder: Optional[str] = None,
    instance_ignored_keys: Optional[Iterable[str]] = None,
) -> OperationResult:
    """Generate the QML of a top-level node.

    Returns:
        OperationResult whose ``value`` is a :class:`GeneratedElement`.
    """
    return _generate(
        node, flags, error_sink, image_provider, font_resolver, registry,
        placeholder, instance_ignored_keys,
    )


def component(
    node: Node,
    flags: Flags,
    error_sink: ErrorSink,
    image_provider: ImageProvider,
    font_resolver: FontResolver,
    registry: ComponentRegistry,
    placeholder: Optional[str] = None,
    instance_ignored_keys: Optional[Iterable[str]] = None,
) -> OperationResult:
    """Generate a component definition (``PARSE_COMPONENT`` is forced on)."""
    return _generate(
        node, Flags(flags) | Flags.PARSE_COMPONENT, error_sink, image_provider, font_resolver,
        registry, placeholder, instance_ignored_keys,
    )
