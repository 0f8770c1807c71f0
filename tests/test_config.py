import logging

from figmaqml_toolkit.config import ConfigManager
from figmaqml_toolkit.logging_config import setup_logging
from figmaqml_toolkit.version import get_app_version


class TestConfigManager:
    def test_packaged_defaults(self):
        config = ConfigManager()
        assert config.get_default_flags() == ["break_booleans"]
        assert config.get_qml_imports()[0] == "import QtQuick 2.15"
        assert config.get_font_map() == {}
        assert config.get_placeholder_image() == "placeholder"
        assert "absoluteBoundingBox" in config.get_instance_ignored_keys()

    def test_singleton(self):
        assert ConfigManager() is ConfigManager()

    def test_user_files_created(self, isolated_config):
        ConfigManager()
        assert (isolated_config / "generation.yml").exists()
        assert (isolated_config / "logging.yml").exists()

    def test_user_overrides_merged(self, isolated_config):
        isolated_config.mkdir(parents=True)
        (isolated_config / "generation.yml").write_text(
            "flags: [prerender_shapes, antialias_shapes]\nfont_map:\n  SF Pro: Inter\n",
            encoding="utf-8",
        )
        config = ConfigManager()
        assert config.get_default_flags() == ["prerender_shapes", "antialias_shapes"]
        assert config.get_font_map() == {"SF Pro": "Inter"}
        # keys absent from the user file keep their packaged value
        assert config.get_qml_imports()[0] == "import QtQuick 2.15"

    def test_invalid_user_file_ignored(self, isolated_config):
        isolated_config.mkdir(parents=True)
        (isolated_config / "generation.yml").write_text("flags: [unclosed\n", encoding="utf-8")
        assert ConfigManager().get_default_flags() == ["break_booleans"]


class TestLogging:
    def test_setup_logging_writes_file(self, tmp_path, monkeypatch):
        monkeypatch.setenv("FIGMAQML_LOG_DIR", str(tmp_path / "logs"))
        monkeypatch.setenv("FIGMAQML_DEBUG_MODULES", "figmaqml_toolkit.core.parser")
        setup_logging()
        logging.getLogger("figmaqml_toolkit.test").info("hello")
        for handler in logging.getLogger().handlers:
            handler.flush()
        assert (tmp_path / "logs" / "figmaqml.log").exists()
        assert logging.getLogger("figmaqml_toolkit.core.parser").level == logging.DEBUG

    def test_version_string(self):
        assert get_app_version().startswith("v")
