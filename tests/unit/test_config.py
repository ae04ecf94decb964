"""
Tests for configuration system.
"""

import pytest

from headless_recorder.config import (
    CodeOptions,
    ConfigLoader,
    Settings,
    StorageSettings,
    get_settings,
    load_config,
    reset_settings,
)
from headless_recorder.exceptions import ConfigurationError


class TestSettings:
    """Test the Settings classes."""

    def test_default_settings(self):
        """Test default settings are created correctly."""
        settings = Settings()

        assert settings.storage.backend == "file"
        assert settings.code.wrap_async is True
        assert settings.code.show_playwright_first is False
        assert settings.session.drain_on_clean_up is False
        assert settings.logging.level == "INFO"

    def test_override_settings(self):
        """Test overriding settings."""
        settings = Settings(storage=StorageSettings(backend="memory"))

        assert settings.storage.backend == "memory"

    def test_merge_with_overrides(self):
        """Test merging settings with overrides."""
        settings = Settings()
        new_settings = settings.merge_with({
            "storage": {"path": "/tmp/other.json"},
            "session": {"drain_on_clean_up": True},
        })

        assert new_settings.storage.path == "/tmp/other.json"
        assert new_settings.session.drain_on_clean_up is True
        # Other settings should remain default
        assert new_settings.storage.backend == "file"

    def test_invalid_backend(self):
        """Test validation of storage settings."""
        with pytest.raises(ValueError):
            StorageSettings(backend="redis")

    def test_env_variables(self, monkeypatch):
        """Test nested settings from environment variables."""
        monkeypatch.setenv("HEADLESS_RECORDER__STORAGE__BACKEND", "memory")
        monkeypatch.setenv("HEADLESS_RECORDER__CODE__SHOW_PLAYWRIGHT_FIRST", "true")

        settings = Settings()

        assert settings.storage.backend == "memory"
        assert settings.code.show_playwright_first is True


class TestCodeOptions:
    """Test code option merging."""

    def test_camel_case_aliases(self):
        options = CodeOptions.model_validate({"wrapAsync": False, "dataAttribute": "data-test"})

        assert options.wrap_async is False
        assert options.data_attribute == "data-test"

    def test_merged_with_stored_options(self):
        defaults = CodeOptions(headless=False)

        merged = defaults.merged_with({"showPlaywrightFirst": True})

        assert merged.show_playwright_first is True
        assert merged.headless is False

    def test_merged_with_nothing(self):
        defaults = CodeOptions()

        assert defaults.merged_with(None) is defaults
        assert defaults.merged_with({}) is defaults


class TestConfigLoader:
    """Test loading config files."""

    def test_load_yaml_file(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        config = tmp_path / "recorder.yaml"
        config.write_text("storage:\n  backend: memory\ncode:\n  wrap_async: false\n")

        settings = load_config(config_path=config)

        assert settings.storage.backend == "memory"
        assert settings.code.wrap_async is False

    def test_default_path_lookup(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / "headless-recorder.yaml").write_text("session:\n  drain_on_clean_up: true\n")

        assert ConfigLoader().find_config_file().name == "headless-recorder.yaml"
        assert load_config().session.drain_on_clean_up is True

    def test_overrides_win(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        config = tmp_path / "recorder.yaml"
        config.write_text("storage:\n  backend: memory\n")

        settings = load_config(config_path=config, storage={"backend": "file", "path": "x.json"})

        assert settings.storage.backend == "file"
        assert settings.storage.path == "x.json"

    def test_invalid_yaml(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        config = tmp_path / "broken.yaml"
        config.write_text("storage: [unclosed\n")

        with pytest.raises(ConfigurationError):
            load_config(config_path=config)

    def test_non_mapping_yaml(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        config = tmp_path / "list.yaml"
        config.write_text("- a\n- b\n")

        with pytest.raises(ConfigurationError):
            load_config(config_path=config)

    def test_invalid_values(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        config = tmp_path / "bad.yaml"
        config.write_text("storage:\n  backend: redis\n")

        with pytest.raises(ConfigurationError):
            load_config(config_path=config)


class TestGlobalSettings:
    """Test the settings singleton."""

    def test_get_settings_is_cached(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        reset_settings()
        try:
            assert get_settings() is get_settings()
        finally:
            reset_settings()
