"""Main application configuration model."""

from pydantic import BaseModel, ConfigDict, Field

from deepl_cli.domain.config.client import ClientConfig
from deepl_cli.domain.config.document import DocumentConfig
from deepl_cli.domain.config.retry import RetryConfig


class AppConfig(BaseModel):
    """Main application configuration.

    Root model aggregating all configuration sections. Validation is performed
    at load time to fail fast on configuration errors.

    Attributes:
        client: API client configuration
        retry: Retry logic configuration
        document: Document translation configuration
    """

    client: ClientConfig = Field(default_factory=ClientConfig)
    retry: RetryConfig = Field(default_factory=RetryConfig)
    document: DocumentConfig = Field(default_factory=DocumentConfig)

    model_config = ConfigDict(
        validate_assignment=True,
        extra="forbid",
        json_schema_extra={
            "example": {
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
                    "upload_chunk_size": 65536,
                },
            }
        },
    )
