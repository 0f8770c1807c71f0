from __future__ import annotations

"""Shared data structures used across the generator core.

This module exposes dataclasses and value objects used by the parser,
emitters and services. It is intentionally free of UI / I/O code so that the
contained objects can be reused in any context (unit-tests, CLI, host
applications, etc.).
"""

import enum
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

from figmaqml_toolkit.core.exceptions import InvalidComponentError

__all__ = [
    "FIGMA_SUFFIX",
    "Flags",
    "Canvas",
    "ComponentDefinition",
    "ComponentRegistry",
    "GeneratedElement",
    "OperationResult",
    "QmlPackage",
]

# Reserved suffix appended to every generated type name so that it never
# clashes with a QtQuick built-in type.
FIGMA_SUFFIX = "_figma"


class Flags(enum.IntFlag):
    """Generation switches, composable as a bit-set."""

    NONE = 0
    PRERENDER_SHAPES = 2
    PRERENDER_GROUPS = 4
    PRERENDER_COMPONENTS = 8
    PRERENDER_FRAMES = 16
    PRERENDER_INSTANCES = 32
    PARSE_COMPONENT = 512
    BREAK_BOOLEANS = 1024
    ANTIALIAS_SHAPES = 2048

    @classmethod
    def from_names(cls, names: Iterable[str]) -> "Flags":
        """Combine flag names such as ``"break_booleans"`` (case-insensitive).

        Raises:
            ValueError: If a name does not match any flag.
        """
        value = cls.NONE
        for name in names:
            key = name.strip().upper().replace("-", "_")
            if not key:
                continue
            try:
                value |= cls[key]
            except KeyError:
                valid = ", ".join(m.name.lower() for m in cls if m.name != "NONE")
                raise ValueError(f"Unknown flag '{name}'. Valid flags: {valid}") from None
        return value


@dataclass(frozen=True)
class Canvas:
    """Top-level page of a design document.

    ``color`` is the encoded ``#aarrggbb`` background colour and ``elements``
    the raw top-level nodes in document order.
    """

    name: str
    id: str
    color: str
    elements: Tuple[Dict[str, Any], ...] = ()


@dataclass(frozen=True)
class ComponentDefinition:
    """A reusable component registered once per document.

    ``name`` is the registry-unique type name and always carries the
    ``_figma`` reservation suffix.
    """

    name: str
    id: str
    key: str
    description: str
    node: Dict[str, Any] = field(compare=False, repr=False)

    def __post_init__(self) -> None:
        if not self.name.endswith(FIGMA_SUFFIX):
            raise InvalidComponentError(self.id, message=f"Component name not sanitised: {self.name}")


class ComponentRegistry(Mapping[str, ComponentDefinition]):
    """Read-only mapping from component id to :class:`ComponentDefinition`.

    The registry owns every definition; instances only carry component ids
    and look them up here.
    """

    def __init__(self, definitions: Optional[Mapping[str, ComponentDefinition]] = None) -> None:
        self._definitions: Dict[str, ComponentDefinition] = dict(definitions or {})

    def __getitem__(self, component_id: str) -> ComponentDefinition:
        return self._definitions[component_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self._definitions)

    def __len__(self) -> int:
        return len(self._definitions)

    def names(self) -> list[str]:
        return [d.name for d in self._definitions.values()]

    def __repr__(self) -> str:
        return f"ComponentRegistry({len(self)} components)"


@dataclass(frozen=True)
class GeneratedElement:
    """Output of one top-level conversion.

    Attributes
    ----------
    name
        Sanitised type name, also used as the output file stem.
    id
        Id of the converted node.
    type
        Raw type tag of the converted node.
    data
        UTF-8 encoded QML markup.
    components
        Sorted ids of every component referenced while generating.
    """

    name: str
    id: str
    type: str
    data: bytes
    components: Tuple[str, ...] = ()

    @property
    def text(self) -> str:
        return self.data.decode("utf-8")


@dataclass(frozen=True)
class OperationResult:
    """Result of a public generator operation.

    Attributes
    ----------
    success
        Whether the operation completed successfully.
    message
        Human-readable summary suitable for logs or UI display.
    value
        Produced value on success, ``None`` on failure.
    kind
        :class:`~figmaqml_toolkit.core.exceptions.ErrorKind` of the failure.
    """

    success: bool
    message: str
    value: Any = None
    kind: Optional[Any] = None

    @classmethod
    def ok(cls, value: Any, message: str = "OK") -> "OperationResult":
        return cls(True, message, value)

    @classmethod
    def failure(cls, message: str, kind: Any = None) -> "OperationResult":
        return cls(False, message, None, kind)


@dataclass
class QmlPackage:
    """Everything generated for one document: top-level elements first,
    then the component definitions they need."""

    document_name: str = ""
    elements: List[GeneratedElement] = field(default_factory=list)
    components: List[GeneratedElement] = field(default_factory=list)

    def files(self) -> Iterator[GeneratedElement]:
        yield from self.elements
        yield from self.components

    def __len__(self) -> int:
        return len(self.elements) + len(self.components)
