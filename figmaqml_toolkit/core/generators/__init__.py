from __future__ import annotations

"""Modules responsible for generating QML markup from design nodes."""

from .context import GenerationContext  # noqa: F401
from .instances import delta  # noqa: F401
from .rendered import should_prerender  # noqa: F401

__all__: list[str] = [
    "GenerationContext",
    "delta",
    "should_prerender",
]
