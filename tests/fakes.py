"""Fake host collaborators used across the test-suite."""

from __future__ import annotations

import json
from typing import Dict, List, Optional, Tuple

from figmaqml_toolkit.core.models import ComponentDefinition, ComponentRegistry
from figmaqml_toolkit.core.utils import valid_file_name


class FakeImages:
    """Image provider serving a fixed mapping and recording every request."""

    def __init__(self, images: Optional[Dict[str, bytes]] = None) -> None:
        self.images = dict(images or {})
        self.calls: List[Tuple[str, bool]] = []

    def __call__(self, ref: str, is_rendering: bool) -> bytes:
        self.calls.append((ref, is_rendering))
        return self.images.get(ref, b"")


class FakeFetcher:
    """Node fetcher answering with a ``nodes`` response per component id."""

    def __init__(self, responses: Optional[Dict[str, bytes]] = None) -> None:
        self.responses = dict(responses or {})
        self.calls: List[str] = []

    def __call__(self, component_id: str) -> bytes:
        self.calls.append(component_id)
        return self.responses.get(component_id, b"")

    def add_component(self, node: dict, name: Optional[str] = None) -> None:
        payload = {
            "nodes": {
                node["id"]: {
                    "document": node,
                    "components": {node["id"]: {"name": name or node["name"], "key": "k-" + node["id"]}},
                }
            }
        }
        self.responses[node["id"]] = json.dumps(payload).encode("utf-8")


class RecordingSink:
    def __init__(self) -> None:
        self.errors: List[Tuple[str, bool]] = []

    def __call__(self, message: str, is_fatal: bool) -> None:
        self.errors.append((message, is_fatal))


def identity_font(family: str) -> str:
    return family


def registry_of(*nodes: dict) -> ComponentRegistry:
    """Registry holding *nodes* under their sanitised names."""
    return ComponentRegistry(
        {
            n["id"]: ComponentDefinition(
                name=valid_file_name(n["name"]), id=n["id"], key="", description="", node=n
            )
            for n in nodes
        }
    )

