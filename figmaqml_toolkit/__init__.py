"""Top-level package for the Figma to QML generator.

This package hosts the GUI-agnostic implementation.  Front-ends (CLI, a host
application embedding the generator) should only depend on the public API
exposed here rather than importing internal modules directly.
"""

from .core.models import (  # re-export for convenience
    Canvas,
    ComponentDefinition,
    ComponentRegistry,
    Flags,
    GeneratedElement,
    OperationResult,
)

__all__: list[str] = [
    "Canvas",
    "ComponentDefinition",
    "ComponentRegistry",
    "Flags",
    "GeneratedElement",
    "OperationResult",
]
