from __future__ import annotations

"""High-level conversion service for Figma document to QML transformation.

Entry-point for any front-end (CLI, host application, tests) that needs to
turn a Figma JSON document into a set of ``.qml`` files. Wires the
configured defaults and the host collaborators into the generator entry
points of :mod:`figmaqml_toolkit.core.converter`.
"""

import dataclasses
import json
import logging
from collections import deque
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from figmaqml_toolkit.config import ConfigManager
from figmaqml_toolkit.core.assets import (
    DirectoryImageProvider,
    DirectoryNodeFetcher,
    FontMapResolver,
    LoggingErrorSink,
)
from figmaqml_toolkit.core.converter import build_components, canvases, component, element
from figmaqml_toolkit.core.exceptions import ConversionError
from figmaqml_toolkit.core.interfaces import ErrorSink, FontResolver, ImageProvider, NodeFetcher
from figmaqml_toolkit.core.models import (
    Canvas,
    ComponentRegistry,
    Flags,
    GeneratedElement,
    OperationResult,
    QmlPackage,
)
from figmaqml_toolkit.core.parser.document import document_name
from figmaqml_toolkit.core.parser.registry import unique_name
from figmaqml_toolkit.version import get_app_version

logger = logging.getLogger(__name__)

__all__ = ["ConversionService"]


def _no_images(ref: str, is_rendering: bool) -> bytes:
    return b""


def _no_components(component_id: str) -> bytes:
    return b""


class ConversionService:
    """Business-logic façade with zero GUI dependencies.

    Collaborators not given explicitly are built from *assets_dir* (see
    :mod:`figmaqml_toolkit.core.assets`). Without an assets folder no image
    and no remote component is available.
    """

    def __init__(
        self,
        *,
        config: Optional[ConfigManager] = None,
        assets_dir: Optional[str | Path] = None,
        flags: Optional[Flags] = None,
        image_provider: Optional[ImageProvider] = None,
        node_fetcher: Optional[NodeFetcher] = None,
        font_resolver: Optional[FontResolver] = None,
        error_sink: Optional[ErrorSink] = None,
    ) -> None:
        self.config = config or ConfigManager()
        self.logger = logger

        if assets_dir is not None:
            assets_dir = Path(assets_dir)
        self.image_provider = image_provider or (
            DirectoryImageProvider(assets_dir) if assets_dir else _no_images
        )
        self.node_fetcher = node_fetcher or (
            DirectoryNodeFetcher(assets_dir) if assets_dir else _no_components
        )
        self.font_resolver = font_resolver or FontMapResolver(self.config.get_font_map())
        self.error_sink = error_sink or LoggingErrorSink()

        self.flags = Flags(flags) if flags is not None else Flags.from_names(self.config.get_default_flags())
        self.placeholder = self.config.get_placeholder_image()
        self.instance_ignored_keys = self.config.get_instance_ignored_keys() or None

    # ---------------------------------------------------------------------
    # PUBLIC API
    # ---------------------------------------------------------------------
    def load_document(self, path: str | Path) -> Dict[str, Any]:
        """Read a Figma file JSON document from *path*.

        Raises:
            FileNotFoundError: If *path* does not exist
            ValueError: If the file is not a JSON object
        """
        path = Path(path)
        self.logger.debug("Loading document: %s", path)
        if not path.is_file():
            raise FileNotFoundError(f"Input file not found: {path}")
        try:
            document = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise ValueError(f"Invalid JSON document {path}: {exc}") from exc
        if not isinstance(document, dict):
            raise ValueError(f"Document {path} is not a JSON object")
        self.logger.info("Loaded document '%s'", document_name(document))
        return document

    def build_registry(self, document: Dict[str, Any]) -> ComponentRegistry:
        return self._unwrap(build_components(document, self.error_sink, self.node_fetcher))

    def list_canvases(self, document: Dict[str, Any]) -> List[Canvas]:
        return self._unwrap(canvases(document, self.error_sink))

    def convert(
        self,
        document: Dict[str, Any],
        canvas_names: Optional[Iterable[str]] = None,
        registry: Optional[ComponentRegistry] = None,
    ) -> QmlPackage:
        """Generate the elements of *document* and the components they use.

        Args:
            document: Parsed Figma file JSON
            canvas_names: Restrict generation to these canvases (all when ``None``)
            registry: Registry to reuse instead of building one

        Returns:
            QmlPackage with one element per top-level node of the selected
            canvases and one component per definition referenced, directly or
            through other components.

        Raises:
            ConversionError: If any generator step failed
            ValueError: If a requested canvas does not exist
        """
        if registry is None:
            registry = self.build_registry(document)
        all_canvases = self.list_canvases(document)
        selected = self._select_canvases(all_canvases, canvas_names)

        package = QmlPackage(document_name=document_name(document))
        pending: deque = deque()
        # Component files keep their registry names; elements are renamed around them
        taken = {definition.name for definition in registry.values()}
        self.logger.info("Convert: %d canvas(es), flags=%s", len(selected), self.flags)
        for canvas in selected:
            self.logger.debug("Canvas '%s' holds %d element(s)", canvas.name, len(canvas.elements))
            for node in canvas.elements:
                # A component on a canvas is written once, as its definition
                if node.get("type") == "COMPONENT" and node.get("id") in registry:
                    pending.append(node["id"])
                    continue
                generated = self._unwrap(self._element(node, registry))
                name = unique_name(str(node.get("name", "")), taken)
                if name != generated.name:
                    self.logger.warning(
                        "Element %s renamed from %s to %s to keep file names unique",
                        generated.id, generated.name, name,
                    )
                    generated = dataclasses.replace(generated, name=name)
                taken.add(name)
                package.elements.append(generated)
                pending.extend(generated.components)

        done: set[str] = set()
        while pending:
            component_id = pending.popleft()
            if component_id in done:
                continue
            done.add(component_id)
            if component_id not in registry:
                raise ConversionError(f"Component {component_id} is not registered")
            definition = registry[component_id]
            generated = self._unwrap(self._component(definition.node, registry))
            # File name must match the type name instances refer to
            package.components.append(dataclasses.replace(generated, name=definition.name))
            pending.extend(generated.components)

        self.logger.info(
            "Convert OK: %d element(s), %d component(s)",
            len(package.elements), len(package.components),
        )
        return package

    def write_package(self, package: QmlPackage, output_dir: str | Path) -> List[Path]:
        """Write one ``<Name>.qml`` file per generated element into *output_dir*."""
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
        self.logger.info("Export: writing %d file(s)", len(package))
        self.logger.debug("Destination: %s", output_dir)

        written: List[Path] = []
        for generated in package.files():
            path = output_dir / f"{generated.name}.qml"
            path.write_text(self.render_file(generated, package.document_name), encoding="utf-8")
            written.append(path)
        self.logger.info("Export OK: files_written=%d", len(written))
        return written

    def render_file(self, generated: GeneratedElement, source: str = "") -> str:
        """Return the full contents of the ``.qml`` file for *generated*."""
        header = f"// Generated by figmaqml-toolkit {get_app_version()}"
        if source:
            header += f' from "{source}"'
        header += f" ({generated.type} {generated.id})\n"
        imports = "".join(line + "\n" for line in self.config.get_qml_imports())
        return header + imports + "\n" + generated.text

    # Convenience one-shot -------------------------------------------------
    def convert_and_write(
        self,
        document_path: str | Path,
        output_dir: str | Path,
        canvas_names: Optional[Iterable[str]] = None,
    ) -> List[Path]:
        """Full pipeline: load a document, convert it and write every file."""
        document = self.load_document(document_path)
        package = self.convert(document, canvas_names)
        return self.write_package(package, output_dir)

    # ---------------------------------------------------------------------
    # Internals
    # ---------------------------------------------------------------------
    def _element(self, node: Dict[str, Any], registry: ComponentRegistry) -> OperationResult:
        return element(
            node, self.flags, self.error_sink, self.image_provider, self.font_resolver, registry,
            self.placeholder, self.instance_ignored_keys,
        )

    def _component(self, node: Dict[str, Any], registry: ComponentRegistry) -> OperationResult:
        return component(
            node, self.flags, self.error_sink, self.image_provider, self.font_resolver, registry,
            self.placeholder, self.instance_ignored_keys,
        )

    @staticmethod
    def _unwrap(result: OperationResult) -> Any:
        if not result.success:
            raise ConversionError(result.message, result.kind)
        return result.value

    def _select_canvases(self, all_canvases: List[Canvas], names: Optional[Iterable[str]]) -> List[Canvas]:
        if names is None:
            return list(all_canvases)
        wanted = list(names)
        if not wanted:
            return list(all_canvases)
        by_name = {c.name: c for c in all_canvases}
        unknown = [n for n in wanted if n not in by_name]
        if unknown:
            available = ", ".join(sorted(by_name)) or "none"
            raise ValueError(f"Unknown canvas(es): {', '.join(unknown)}. Available: {available}")
        return [by_name[n] for n in wanted]
