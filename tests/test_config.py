"""Tests for config.py module."""

from pathlib import Path
from unittest.mock import patch

import pytest

from storyspark.config import Config, load_config
from storyspark.retry import RetryPolicy
from storyspark.shared.errors import ConfigError


class TestConfigPathResolution:
    """Test configuration file path resolution priority."""

    def test_config_paths_priority_order(self, tmp_path, monkeypatch):
        """Env var path comes first, current directory last."""
        env_config = tmp_path / "env_config.ini"
        monkeypatch.setenv("STORYSPARK_CONFIG", str(env_config))

        paths = Config().get_config_paths()

        assert len(paths) == 4
        assert paths[0] == env_config
        assert paths[-1] == Path("./storyspark.ini")

    def test_find_config_file_env_priority(self, tmp_path, monkeypatch):
        """STORYSPARK_CONFIG wins over the home directory file."""
        env_config = tmp_path / "env.ini"
        env_config.write_text("[images]\nimage_size = 2K\n")
        home_config = tmp_path / ".storyspark.ini"
        home_config.write_text("[images]\nimage_size = 4K\n")
        monkeypatch.setenv("STORYSPARK_CONFIG", str(env_config))

        with patch.object(Path, "home", return_value=tmp_path):
            assert Config().find_config_file() == env_config

    def test_find_config_file_returns_none_when_missing(self):
        config = Config()

        with patch.object(config, "get_config_paths", return_value=[Path("/nonexistent/config.ini")]):
            assert config.find_config_file() is None


class TestConfigLoading:
    """Test configuration loading functionality."""

    def test_load_config_success(self, tmp_path):
        config_file = tmp_path / "test.ini"
        config_file.write_text("[audio]\nvoice = Puck\n")
        config = Config()

        with patch.object(config, "find_config_file", return_value=config_file):
            assert config.load_config(verbose=False) is True

        assert config.config_path == config_file
        assert config.get_field_value("audio", "voice") == "Puck"

    def test_load_config_not_found_keeps_defaults(self):
        config = Config()

        with patch.object(config, "find_config_file", return_value=None):
            assert config.load_config(verbose=False) is False

        assert config.config_path is None
        assert config.get_field_value("images", "image_size") == "1K"

    def test_load_config_malformed_file(self, tmp_path):
        """A file without section headers is a ConfigError."""
        config_file = tmp_path / "bad.ini"
        config_file.write_text("image_size = 2K\n")
        config = Config()

        with patch.object(config, "find_config_file", return_value=config_file):
            with pytest.raises(ConfigError, match="Error reading configuration file"):
                config.load_config()

    def test_load_config_verbose_output(self, tmp_path, capsys):
        config_file = tmp_path / "test.ini"
        config_file.write_text("[system]\nverbose = true\n")
        config = Config()

        with patch.object(config, "find_config_file", return_value=config_file):
            config.load_config(verbose=True)

        assert "Loaded configuration from" in capsys.readouterr().out


class TestFieldValueConversion:
    """Test typed access to configuration values."""

    def test_defaults_without_file(self):
        config = Config()

        assert config.get_field_value("models", "speech_model") == "gemini-2.5-flash-preview-tts"
        assert config.get_field_value("audio", "sample_rate") == 24000
        assert config.get_field_value("system", "buddy_memory") is False

    @pytest.mark.parametrize("raw, expected", [("true", True), ("yes", True), ("on", True), ("false", False)])
    def test_get_field_value_boolean(self, raw, expected):
        config = Config()
        config.config.set("system", "verify_key_after_select", raw)

        assert config.get_field_value("system", "verify_key_after_select") is expected

    def test_get_field_value_integer(self):
        config = Config()
        config.config.set("retry", "retries", "5")

        assert config.get_field_value("retry", "retries") == 5

    def test_get_field_value_returns_default_on_error(self):
        config = Config()
        config.config.set("retry", "retries", "many")

        assert config.get_field_value("retry", "retries") == 3

    def test_get_field_value_unknown_field(self):
        with pytest.raises(ValueError, match="Unknown field"):
            Config().get_field_value("images", "colour")


class TestRetryPolicyFromConfig:
    def test_default_policy(self):
        policy = Config().retry_policy()

        assert isinstance(policy, RetryPolicy)
        assert policy.retries == 3
        assert policy.initial_delay == 1.0

    def test_policy_uses_milliseconds(self):
        config = Config()
        config.config.set("retry", "retries", "1")
        config.config.set("retry", "initial_delay_ms", "250")

        policy = config.retry_policy()

        assert policy.retries == 1
        assert policy.initial_delay == 0.25


class TestConfigValidation:
    """Test configuration validation."""

    def test_validate_config_valid(self):
        assert Config().validate_config() == []

    def test_validate_config_with_errors(self):
        config = Config()
        config.config.set("images", "image_size", "8K")
        config.config.set("retry", "retries", "-1")

        errors = config.validate_config()

        assert len(errors) == 2
        assert any("images.image_size" in error for error in errors)
        assert any("retry.retries" in error for error in errors)


class TestConfigCreation:
    """Test default configuration file creation."""

    def test_create_default_config(self, tmp_path):
        config_path = tmp_path / "storyspark.ini"

        created = Config().create_default_config(config_path)

        assert created == config_path
        content = config_path.read_text()
        for section in ("[images]", "[audio]", "[models]", "[retry]", "[system]"):
            assert section in content
        assert "image_size = 1K" in content
        assert "buddy_memory = false" in content

    def test_created_file_loads_cleanly(self, tmp_path, monkeypatch):
        config_path = Config().create_default_config(tmp_path / "nested" / "storyspark.ini")
        monkeypatch.setenv("STORYSPARK_CONFIG", str(config_path))

        config = load_config()

        assert config.config_path == config_path
        assert config.get_field_value("retry", "initial_delay_ms") == 1000

    def test_get_default_config_path(self):
        path = Config().get_default_config_path()

        assert path.name == "storyspark.ini"
        assert "storyspark" in str(path.parent)


class TestLoadConfigFunction:
    """Test the module-level load_config function."""

    def test_load_config_function_success(self, tmp_path, monkeypatch):
        config_file = tmp_path / "test.ini"
        config_file.write_text("[images]\nimage_size = 4K\n")
        monkeypatch.setenv("STORYSPARK_CONFIG", str(config_file))

        config = load_config()

        assert config.get_field_value("images", "image_size") == "4K"

    def test_load_config_function_validation_error(self, tmp_path, monkeypatch):
        config_file = tmp_path / "test.ini"
        config_file.write_text("[system]\nverbose = sometimes\n")
        monkeypatch.setenv("STORYSPARK_CONFIG", str(config_file))

        with pytest.raises(ConfigError) as exc_info:
            load_config()

        assert "system.verbose" in exc_info.value.message
        assert exc_info.value.details["errors"]
