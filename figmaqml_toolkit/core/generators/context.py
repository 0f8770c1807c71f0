from __future__ import annotations

"""Per-run generation state shared by the emitters."""

import logging
from dataclasses import dataclass, field
from typing import Optional, Set

from figmaqml_toolkit.core.exceptions import MissingComponentError
from figmaqml_toolkit.core.interfaces import FontResolver, ImageProvider
from figmaqml_toolkit.core.models import ComponentDefinition, ComponentRegistry, Flags

logger = logging.getLogger(__name__)

__all__ = ["DEFAULT_INSTANCE_IGNORED_KEYS", "PLACEHOLDER", "GenerationContext"]

PLACEHOLDER = "placeholder"

# Keys identifying an instance rather than describing it
DEFAULT_INSTANCE_IGNORED_KEYS = frozenset(
    {
        "id",
        "name",
        "type",
        "componentId",
        "absoluteBoundingBox",
        "absoluteRenderBounds",
        "overrides",
        "componentProperties",
        "exposedInstances",
        "isExposedInstance",
    }
)


@dataclass
class GenerationContext:
    """Collaborators and switches for one top-level conversion.

    The only mutable part is ``component_ids``, which accumulates every
    component referenced while the element is generated.
    """

    flags: Flags
    image_provider: ImageProvider
    font_resolver: FontResolver
    registry: ComponentRegistry
    placeholder: str = PLACEHOLDER
    instance_ignored_keys: frozenset = DEFAULT_INSTANCE_IGNORED_KEYS
    component_ids: Set[str] = field(default_factory=set)

    def has(self, flag: Flags) -> bool:
        return bool(self.flags & flag)

    def component(self, component_id: str, node_id: Optional[str] = None) -> ComponentDefinition:
        """Look up *component_id* in the registry.

        Raises:
            MissingComponentError: If the registry does not hold it.
        """
        try:
            return self.registry[component_id]
        except KeyError:
            raise MissingComponentError(
                f"Unexpected component dependency from {node_id} to {component_id}",
                component_id,
                node_id,
            ) from None
