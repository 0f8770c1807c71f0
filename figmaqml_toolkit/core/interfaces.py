from __future__ import annotations

"""Collaborator interface definitions.

The generator never touches the network, the disk or a raster codec on its
own. Everything it needs from the outside world comes through the four
callables below, supplied by the host. Plain functions, lambdas and objects
with a ``__call__`` method all satisfy them.
"""

from typing import Protocol, runtime_checkable

__all__ = ["ImageProvider", "NodeFetcher", "FontResolver", "ErrorSink"]


@runtime_checkable
class ImageProvider(Protocol):
    """Protocol for image data suppliers.

    Called with either an ``imageRef`` taken from a fill, or a node id when a
    prerendered snapshot of that node is wanted.

    Args:
        ref: Image reference or node id
        is_rendering: True when ``ref`` is a node id to be rasterised

    Returns:
        Image data ready to be inlined as an ``Image.source`` value (for
        instance a ``data:`` URI). Empty bytes signal failure.
    """

    def __call__(self, ref: str, is_rendering: bool) -> bytes:
        ...


@runtime_checkable
class NodeFetcher(Protocol):
    """Protocol for fetching component subtrees that are not embedded.

    Returns the raw JSON response of a nodes query, which must contain the
    component under ``nodes[<id>].document``. Empty bytes mean not found.
    """

    def __call__(self, component_id: str) -> bytes:
        ...


@runtime_checkable
class FontResolver(Protocol):
    """Protocol mapping a requested font family to one the renderer has."""

    def __call__(self, family: str) -> str:
        ...


@runtime_checkable
class ErrorSink(Protocol):
    """Protocol receiving failures.

    The generator reports every failure with ``is_fatal=True``; the flag is
    kept in the signature for hosts that share the sink with other sources.
    """

    def __call__(self, message: str, is_fatal: bool) -> None:
        ...
