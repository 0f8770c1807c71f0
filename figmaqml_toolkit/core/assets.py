from __future__ import annotations

"""Directory-backed collaborators for running the generator locally.

A host normally supplies its own image provider, node fetcher, font resolver
and error sink. These implementations read everything from an assets folder
laid out as::

    assets/
        images/<imageRef>.<ext>       image fills
        renders/<node id>.<ext>       prerendered node snapshots
        components/<component id>.json  nodes responses of remote components

Characters that are not valid in file names (``:`` in node ids) are replaced
with ``_``.
"""

import base64
import io
import logging
import re
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Tuple

from PIL import Image, UnidentifiedImageError

from figmaqml_toolkit.config import ConfigManager

logger = logging.getLogger(__name__)

__all__ = [
    "safe_stem",
    "to_data_uri",
    "DirectoryImageProvider",
    "DirectoryNodeFetcher",
    "FontMapResolver",
    "LoggingErrorSink",
]

_UNSAFE_RE = re.compile(r'[\\/:*?"<>|]')


def safe_stem(ref: str) -> str:
    return _UNSAFE_RE.sub("_", ref)


def to_data_uri(image_data: bytes) -> bytes:
    """Return *image_data* as a base64 ``data:`` URI.

    Raises:
        UnidentifiedImageError: If Pillow does not recognise the data.
    """
    with Image.open(io.BytesIO(image_data)) as img:
        img_format = img.format.lower() if img.format else "png"
    return f"data:image/{img_format};base64,".encode("ascii") + base64.b64encode(image_data)


class DirectoryImageProvider:
    """Serve image fills from ``images/`` and snapshots from ``renders/``."""

    def __init__(self, assets_dir: str | Path) -> None:
        self.assets_dir = Path(assets_dir)

    def _find(self, folder: Path, ref: str) -> Optional[Path]:
        if not folder.is_dir():
            return None
        stem = safe_stem(ref)
        candidates = sorted(p for p in folder.iterdir() if p.is_file() and p.stem == stem)
        return candidates[0] if candidates else None

    def __call__(self, ref: str, is_rendering: bool) -> bytes:
        folder = self.assets_dir / ("renders" if is_rendering else "images")
        path = self._find(folder, ref)
        if path is None:
            logger.debug("No image for '%s' in %s", ref, folder)
            return b""
        try:
            return to_data_uri(path.read_bytes())
        except (OSError, UnidentifiedImageError) as exc:
            logger.warning("Could not read image %s: %s", path, exc)
            return b""


class DirectoryNodeFetcher:
    """Serve component nodes responses from ``components/<id>.json``."""

    def __init__(self, assets_dir: str | Path) -> None:
        self.components_dir = Path(assets_dir) / "components"

    def __call__(self, component_id: str) -> bytes:
        path = self.components_dir / f"{safe_stem(component_id)}.json"
        try:
            return path.read_bytes()
        except FileNotFoundError:
            logger.debug("No component file %s", path)
            return b""


class FontMapResolver:
    """Substitute font families using the configured ``font_map``.

    Families without an entry are returned unchanged.
    """

    def __init__(self, font_map: Optional[Mapping[str, str]] = None) -> None:
        self.font_map: Dict[str, str] = dict(
            font_map if font_map is not None else ConfigManager().get_font_map()
        )

    def __call__(self, family: str) -> str:
        resolved = self.font_map.get(family, family)
        if resolved != family:
            logger.debug("Font '%s' resolved to '%s'", family, resolved)
        return resolved


class LoggingErrorSink:
    """Log reported errors and keep them for later inspection."""

    def __init__(self) -> None:
        self.errors: List[Tuple[str, bool]] = []

    def __call__(self, message: str, is_fatal: bool) -> None:
        self.errors.append((message, is_fatal))
        if is_fatal:
            logger.error("Fatal: %s", message)
        else:
            logger.warning("%s", message)

    @property
    def has_fatal(self) -> bool:
        return any(fatal for _, fatal in self.errors)

    def clear(self) -> None:
        self.errors.clear()
