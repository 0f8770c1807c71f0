from __future__ import annotations

"""Generator exception classes.

Every failure raised while walking a design document derives from
:class:`FigmaQmlError`. The public entry points catch it once, report it to
the error sink and turn it into a failed
:class:`~figmaqml_toolkit.core.models.OperationResult`.
"""

import enum
from typing import Optional

__all__ = [
    "ErrorKind",
    "FigmaQmlError",
    "UnsupportedNodeTypeError",
    "MalformedNodeError",
    "MissingComponentError",
    "InvalidComponentError",
    "BooleanOperationError",
    "ImageLoadError",
    "ConversionError",
]


class ErrorKind(enum.Enum):
    UNSUPPORTED_TYPE = "unsupported_type"
    MISSING_COMPONENT = "missing_component"
    INVALID_COMPONENT = "invalid_component"
    BOOLEAN_ARITY = "boolean_arity"
    IMAGE_LOAD = "image_load"


class FigmaQmlError(Exception):
    """Base exception for all generation errors.

    Carries the :class:`ErrorKind` and, when known, the id of the node being
    processed.
    """

    kind: ErrorKind = ErrorKind.UNSUPPORTED_TYPE

    def __init__(self, message: str, node_id: Optional[str] = None) -> None:
        super().__init__(message)
        self.node_id = node_id

    def __str__(self) -> str:
        if self.node_id:
            return f"[Node: {self.node_id}] {super().__str__()}"
        return super().__str__()


class UnsupportedNodeTypeError(FigmaQmlError):
    """Raised when a node carries a type tag the classifier does not know."""

    kind = ErrorKind.UNSUPPORTED_TYPE

    def __init__(self, type_tag: str, node_id: Optional[str] = None) -> None:
        self.type_tag = type_tag
        super().__init__(f'Non supported object type:"{type_tag}"', node_id)


class MalformedNodeError(FigmaQmlError):
    """Raised when a node lacks a field every generated item needs."""

    kind = ErrorKind.UNSUPPORTED_TYPE


class MissingComponentError(FigmaQmlError):
    """Raised when a component cannot be found, locally or remotely.

    Covers an empty remote response, a response that does not hold the
    requested component and an instance pointing outside the registry.
    """

    kind = ErrorKind.MISSING_COMPONENT

    def __init__(self, message: str, component_id: str, node_id: Optional[str] = None) -> None:
        self.component_id = component_id
        super().__init__(message, node_id)


class InvalidComponentError(FigmaQmlError):
    """Raised when a fetched component response is not valid JSON, or a
    component definition is built from unusable data.
    """

    kind = ErrorKind.INVALID_COMPONENT

    def __init__(
        self, component_id: str, cause: Optional[Exception] = None, message: Optional[str] = None
    ) -> None:
        self.component_id = component_id
        self.cause = cause
        super().__init__(message or f"Invalid component {component_id}")


class BooleanOperationError(FigmaQmlError):
    kind = ErrorKind.BOOLEAN_ARITY


class ImageLoadError(FigmaQmlError):
    """Raised when an image, or the placeholder replacing it, cannot be loaded."""

    kind = ErrorKind.IMAGE_LOAD

    def __init__(self, message: str, image_ref: str, node_id: Optional[str] = None) -> None:
        self.image_ref = image_ref
        super().__init__(message, node_id)


class ConversionError(FigmaQmlError):
    """Raised by the conversion service when a generator step failed.

    The failure has already been reported to the error sink; ``kind`` is the
    kind of the underlying error when it is known.
    """

    def __init__(self, message: str, kind: Optional[ErrorKind] = None, node_id: Optional[str] = None) -> None:
        super().__init__(message, node_id)
        if kind is not None:
            self.kind = kind
