"""Shared fixtures: isolated configuration and fake host collaborators."""

import logging
from typing import Callable, Optional

import pytest

from figmaqml_toolkit.config import ConfigManager
from figmaqml_toolkit.core.generators.context import GenerationContext
from figmaqml_toolkit.core.models import ComponentRegistry, Flags

from tests.fakes import FakeFetcher, FakeImages, RecordingSink, identity_font

logging.basicConfig(
    level=logging.DEBUG,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Point the user config directory at a temporary folder."""
    monkeypatch.setenv("FIGMAQML_CONFIG_DIR", str(tmp_path / "user_config"))
    ConfigManager.reset()
    yield tmp_path / "user_config"
    ConfigManager.reset()


@pytest.fixture
def images():
    return FakeImages({"img-1": b"data:image/png;base64,AAAA", "placeholder": b"data:image/png;base64,PPPP"})


@pytest.fixture
def fetcher():
    return FakeFetcher()


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def make_ctx(images) -> Callable[..., GenerationContext]:
    """Factory building a :class:`GenerationContext` with fake collaborators."""

    def _make(flags: Flags = Flags.NONE, registry: Optional[ComponentRegistry] = None,
              image_provider=None, placeholder: str = "placeholder") -> GenerationContext:
        return GenerationContext(
            flags=flags,
            image_provider=image_provider or images,
            font_resolver=identity_font,
            registry=registry or ComponentRegistry(),
            placeholder=placeholder,
        )

    return _make
