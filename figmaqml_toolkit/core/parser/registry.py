from __future__ import annotations

"""Component registry construction.

Resolves every component embedded in or referenced by a document into a uniquely named
:class:`~figmaqml_toolkit.core.models.ComponentDefinition`. Components that
are not embedded in the document tree are fetched through the host's
:class:`~figmaqml_toolkit.core.interfaces.NodeFetcher`.
"""

import copy
import json
import logging
from typing import Any, Dict, List, Mapping, Set

from figmaqml_toolkit.core.exceptions import InvalidComponentError, MissingComponentError
from figmaqml_toolkit.core.interfaces import NodeFetcher
from figmaqml_toolkit.core.models import ComponentDefinition, ComponentRegistry
from figmaqml_toolkit.core.parser.document import collect_instance_component_ids, get_objects_by_type
from figmaqml_toolkit.core.utils import valid_file_name

logger = logging.getLogger(__name__)

__all__ = ["referenced_component_ids", "fetch_component", "unique_name", "build_registry"]


def referenced_component_ids(document: Mapping[str, Any]) -> List[str]:
    """Ids listed in ``document["components"]`` followed by instance targets."""
    ids = list((document.get("components") or {}).keys())
    for cid in collect_instance_component_ids(document.get("document") or {}):
        if cid not in ids:
            ids.append(cid)
    return ids


def fetch_component(component_id: str, node_fetcher: NodeFetcher) -> tuple[Dict[str, Any], Dict[str, Any]]:
    """Fetch a non-embedded component.

    Returns:
        ``(node, metadata)`` where *metadata* is the component entry of the
        response (may be empty).

    Raises:
        MissingComponentError: Empty response, or the component is absent
            from ``nodes[<id>].document``.
        InvalidComponentError: The response is not a JSON object.
    """
    logger.debug("Fetching component %s", component_id)
    response = node_fetcher(component_id)
    if not response:
        raise MissingComponentError(f"Component not found {component_id}", component_id)
    try:
        payload = json.loads(response)
    except (ValueError, UnicodeDecodeError) as exc:
        raise InvalidComponentError(component_id, exc) from exc
    if not isinstance(payload, dict):
        raise InvalidComponentError(component_id)

    entry = (payload.get("nodes") or {}).get(component_id) or {}
    received = get_objects_by_type(entry.get("document") or {}, "COMPONENT")
    if component_id not in received:
        raise MissingComponentError(f"Unrecognized component {component_id}", component_id)
    metadata = (entry.get("components") or {}).get(component_id) or {}
    return received[component_id], metadata


def unique_name(component_name: str, taken: Set[str]) -> str:
    """Sanitise *component_name* and append ``_<n>`` until it is not in *taken*."""
    candidate = valid_file_name(component_name)
    count = 1
    while candidate in taken:
        candidate = valid_file_name(f"{component_name}_{count}")
        count += 1
    return candidate


def build_registry(document: Mapping[str, Any], node_fetcher: NodeFetcher) -> ComponentRegistry:
    """Build the component registry for *document*.

    Raises:
        MissingComponentError: A referenced component cannot be resolved.
        InvalidComponentError: A fetched component is malformed.
    """
    embedded = get_objects_by_type(document.get("document") or {}, "COMPONENT")
    listed = document.get("components") or {}

    definitions: Dict[str, ComponentDefinition] = {}
    taken: Set[str] = set()
    fetched = 0
    component_ids = referenced_component_ids(document)
    # Embedded components are registered even when nothing lists or uses them
    component_ids += [cid for cid in embedded if cid not in component_ids]
    for component_id in component_ids:
        metadata: Dict[str, Any] = dict(listed.get(component_id) or {})
        if component_id in embedded:
            node = embedded[component_id]
        else:
            node, remote_metadata = fetch_component(component_id, node_fetcher)
            fetched += 1
            for key, value in remote_metadata.items():
                metadata.setdefault(key, value)

        raw_name = metadata.get("name") or node.get("name") or component_id
        name = unique_name(raw_name, taken)
        if name != valid_file_name(raw_name):
            logger.debug("Component name '%s' renamed to %s to stay unique", raw_name, name)
        taken.add(name)

        definitions[component_id] = ComponentDefinition(
            name=name,
            id=component_id,
            key=str(metadata.get("key", "")),
            description=str(metadata.get("description", "")),
            node=copy.deepcopy(node),
        )

    logger.info(
        "Component registry built: %d component(s), %d fetched remotely", len(definitions), fetched
    )
    return ComponentRegistry(definitions)
