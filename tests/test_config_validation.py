"""Tests for configuration validation with Pydantic."""

import pytest
import yaml
from pydantic import ValidationError

from deepl_cli.domain.config import AppConfig, ClientConfig, DocumentConfig, RetryConfig
from deepl_cli.domain.errors import ConfigurationError
from deepl_cli.infrastructure.config.config_manager import ConfigManager


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("DEEPL_AUTH_KEY", "DEEPL_SERVER_URL", "DEEPL_TIMEOUT"):
        monkeypatch.delenv(name, raising=False)


class TestRetryConfigValidation:
    """Tests for RetryConfig validation."""

    def test_defaults_match_dispatch_policy(self):
        """Test the default policy: 5 attempts, 1s..120s, factor 1.6, jitter 0.23"""
        config = RetryConfig()
        assert config.max_attempts == 5
        assert config.initial_delay == 1.0
        assert config.max_delay == 120.0
        assert config.backoff_multiplier == 1.6
        assert config.jitter == 0.23

    def test_zero_attempts_allowed(self):
        """Test that zero attempts is a valid (if useless) configuration"""
        assert RetryConfig(max_attempts=0).max_attempts == 0

    def test_negative_attempts(self):
        with pytest.raises(ValidationError, match="max_attempts"):
            RetryConfig(max_attempts=-1)

    def test_multiplier_below_one(self):
        with pytest.raises(ValidationError, match="backoff_multiplier"):
            RetryConfig(backoff_multiplier=0.5)

    def test_jitter_must_be_below_one(self):
        with pytest.raises(ValidationError, match="jitter"):
            RetryConfig(jitter=1.0)

    def test_max_delay_below_initial_delay(self):
        """Test that the cap cannot be lower than the first delay"""
        with pytest.raises(ValidationError, match="max_delay"):
            RetryConfig(initial_delay=10.0, max_delay=1.0)

    def test_frozen(self):
        config = RetryConfig()
        with pytest.raises(ValidationError):
            config.max_attempts = 3


class TestClientConfigValidation:
    """Tests for ClientConfig and DocumentConfig validation."""

    def test_defaults(self):
        config = ClientConfig()
        assert config.auth_key is None
        assert config.server_url is None
        assert config.timeout == 10.0

    def test_timeout_must_be_positive(self):
        with pytest.raises(ValidationError, match="timeout"):
            ClientConfig(timeout=0)

    def test_upload_chunk_size_minimum(self):
        with pytest.raises(ValidationError, match="upload_chunk_size"):
            DocumentConfig(upload_chunk_size=10)


class TestAppConfigValidation:
    """Tests for AppConfig validation."""

    def test_nested_sections(self):
        config = AppConfig(client={"auth_key": "abc:fx"}, retry={"max_attempts": 2})
        assert config.client.auth_key == "abc:fx"
        assert config.retry.max_attempts == 2
        assert config.document.poll_interval == 5.0

    def test_unknown_section_rejected(self):
        """Test that typos in section names are reported"""
        with pytest.raises(ValidationError, match="extra"):
            AppConfig(retries={"max_attempts": 2})


class TestConfigManager:
    """Tests for ConfigManager loading."""

    def _write(self, path, data):
        path.write_text(yaml.safe_dump(data), encoding="utf-8")
        return path

    def test_defaults_without_file(self, tmp_path):
        manager = ConfigManager(config_path=tmp_path / "missing.yml")
        assert manager.get_retry_config() == RetryConfig()
        assert manager.get_client_config().auth_key is None

    def test_loads_explicit_file(self, tmp_path):
        config_file = self._write(
            tmp_path / "custom.yml",
            {"client": {"auth_key": "key-1", "timeout": 30}, "retry": {"max_attempts": 3}},
        )
        manager = ConfigManager(config_path=str(config_file))

        assert manager.get_client_config().auth_key == "key-1"
        assert manager.get_client_config().timeout == 30.0
        assert manager.get_retry_config().max_attempts == 3
        # Untouched values keep their defaults
        assert manager.get_retry_config().backoff_multiplier == 1.6

    def test_finds_file_in_parent_directory(self, tmp_path, monkeypatch):
        self._write(tmp_path / ".deepl.yml", {"document": {"poll_interval": 2}})
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        monkeypatch.chdir(nested)

        manager = ConfigManager()

        assert manager.config_path == tmp_path / ".deepl.yml"
        assert manager.get_document_config().poll_interval == 2.0

    def test_env_overrides_file(self, tmp_path, monkeypatch):
        config_file = self._write(tmp_path / "c.yml", {"client": {"auth_key": "from-file"}})
        monkeypatch.setenv("DEEPL_AUTH_KEY", "from-env:fx")
        monkeypatch.setenv("DEEPL_SERVER_URL", "http://localhost:3000")
        monkeypatch.setenv("DEEPL_TIMEOUT", "2.5")

        client_config = ConfigManager(config_path=config_file).get_client_config()

        assert client_config.auth_key == "from-env:fx"
        assert client_config.server_url == "http://localhost:3000"
        assert client_config.timeout == 2.5

    def test_empty_section_keeps_defaults(self, tmp_path, monkeypatch):
        """Test that a bare `client:` section still takes env overrides"""
        config_file = tmp_path / "c.yml"
        config_file.write_text("client:\nretry:\n", encoding="utf-8")
        monkeypatch.setenv("DEEPL_AUTH_KEY", "k")

        manager = ConfigManager(config_path=config_file)

        assert manager.get_client_config().auth_key == "k"
        assert manager.get_client_config().timeout == 10.0
        assert manager.get_retry_config() == RetryConfig()

    def test_malformed_section_with_env_override(self, tmp_path, monkeypatch):
        config_file = tmp_path / "c.yml"
        config_file.write_text("client: 5\n", encoding="utf-8")
        monkeypatch.setenv("DEEPL_AUTH_KEY", "k")

        with pytest.raises(ConfigurationError, match="client"):
            ConfigManager(config_path=config_file)

    def test_invalid_value_reports_field(self, tmp_path):
        config_file = self._write(tmp_path / "c.yml", {"retry": {"jitter": 5}})
        with pytest.raises(ConfigurationError, match="retry.jitter"):
            ConfigManager(config_path=config_file)

    def test_invalid_yaml(self, tmp_path):
        config_file = tmp_path / "c.yml"
        config_file.write_text("client: [unclosed", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="Failed to load config"):
            ConfigManager(config_path=config_file)

    def test_non_mapping_file(self, tmp_path):
        config_file = tmp_path / "c.yml"
        config_file.write_text("- just\n- a list\n", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="mapping"):
            ConfigManager(config_path=config_file)

    def test_get_with_dot_notation(self, tmp_path):
        manager = ConfigManager(config_path=tmp_path / "missing.yml")
        assert manager.get("retry.max_attempts") == 5
        assert manager.get("retry.nope", "fallback") == "fallback"
        assert manager.get("document")["upload_chunk_size"] == 65536
