"""Configuration manager for loading and validating .deepl.yml"""

import copy
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from pydantic import ValidationError

from deepl_cli.domain.config import AppConfig, ClientConfig, DocumentConfig, RetryConfig
from deepl_cli.domain.errors import ConfigurationError

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = ".deepl.yml"

# Environment variable -> (section, key)
ENV_OVERRIDES = {
    "DEEPL_AUTH_KEY": ("client", "auth_key"),
    "DEEPL_SERVER_URL": ("client", "server_url"),
    "DEEPL_TIMEOUT": ("client", "timeout"),
}


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Merge ``override`` into a copy of ``base``, section by section

    An empty section (``client:`` with nothing below) keeps its defaults.
    """
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and (value is None or isinstance(value, dict)):
            merged[key] = deep_merge(current, value or {})
        else:
            merged[key] = value
    return merged


def find_config_file(start: Optional[Path] = None) -> Optional[Path]:
    """Search ``start`` (default: cwd) and its parents for .deepl.yml"""
    start = start or Path.cwd()
    for directory in (start, *start.parents):
        candidate = directory / CONFIG_FILE_NAME
        if candidate.is_file():
            logger.info(f"Found config file: {candidate}")
            return candidate
    logger.debug(f"No {CONFIG_FILE_NAME} found, using defaults")
    return None


def _describe_validation_error(error: ValidationError) -> str:
    lines = ["Configuration validation failed:"]
    for item in error.errors():
        location = ".".join(str(part) for part in item["loc"])
        lines.append(f"  - {location}: {item['msg']}")
    return "\n".join(lines)


class ConfigManager:
    """Manages configuration from .deepl.yml and environment variables

    Configuration priority:
    1. Default values (defined in Pydantic models)
    2. .deepl.yml file (searched from current directory upwards)
    3. Environment variables (DEEPL_AUTH_KEY, DEEPL_SERVER_URL, DEEPL_TIMEOUT)
    4. CLI arguments (handled by CLI layer)
    """

    DEFAULT_CONFIG = {
        "client": {
            "auth_key": None,
            "server_url": None,
            "timeout": 10.0,
        },
        "retry": {
            "max_attempts": 5,
            "initial_delay": 1.0,
            "max_delay": 120.0,
            "backoff_multiplier": 1.6,
            "jitter": 0.23,
        },
        "document": {
            "poll_interval": 5.0,
            "max_poll_interval": 60.0,
            "upload_chunk_size": 64 * 1024,
        },
    }

    def __init__(self, config_path: Optional[Union[str, Path]] = None):
        """Initialize config manager

        Args:
            config_path: Path to .deepl.yml (searches from current dir if None)

        Raises:
            ConfigurationError: If the file cannot be parsed or validation fails
        """
        self.config_path = Path(config_path) if config_path else find_config_file()
        settings = self._apply_env_overrides(deep_merge(self.DEFAULT_CONFIG, self._read_file()))
        try:
            self.config = AppConfig(**settings)
        except ValidationError as e:
            raise ConfigurationError(_describe_validation_error(e)) from e

    def _read_file(self) -> Dict[str, Any]:
        """Read the YAML file, an absent file yields no overrides

        Raises:
            ConfigurationError: If the file is unreadable, not YAML or not a mapping
        """
        if self.config_path is None or not self.config_path.exists():
            return {}
        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Failed to load config from {self.config_path}: {e}") from e
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigurationError(f"{self.config_path} must contain a mapping")
        logger.info(f"Loaded configuration from {self.config_path}")
        return data

    def _apply_env_overrides(self, settings: Dict[str, Any]) -> Dict[str, Any]:
        settings = copy.deepcopy(settings)
        for variable, (section, key) in ENV_OVERRIDES.items():
            value = os.getenv(variable)
            if not value:
                continue
            values = settings.get(section)
            if values is None:
                values = settings[section] = {}
            # A malformed section is left for validation to report
            if isinstance(values, dict):
                values[key] = value
                logger.debug(f"{section}.{key} overridden by {variable}")
        return settings

    def get_client_config(self) -> ClientConfig:
        return self.config.client

    def get_retry_config(self) -> RetryConfig:
        return self.config.retry

    def get_document_config(self) -> DocumentConfig:
        return self.config.document

    def get(self, key: str, default: Any = None) -> Any:
        """Get a configuration value by dotted key, e.g. "retry.max_attempts" """
        node: Any = self.config.model_dump()
        for part in key.split("."):
            if not isinstance(node, dict) or part not in node:
                return default
            node = node[part]
        return node
