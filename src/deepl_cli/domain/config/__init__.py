"""Configuration models with Pydantic validation."""

from deepl_cli.domain.config.app import AppConfig
from deepl_cli.domain.config.client import ClientConfig
from deepl_cli.domain.config.document import DocumentConfig
from deepl_cli.domain.config.retry import RetryConfig

__all__ = [
    "AppConfig",
    "ClientConfig",
    "DocumentConfig",
    "RetryConfig",
]
