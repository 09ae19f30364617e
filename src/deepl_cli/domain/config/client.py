"""API client configuration model."""

from typing import Optional

from pydantic import BaseModel, Field


class ClientConfig(BaseModel):
    """Configuration for the DeepL API client.

    Attributes:
        auth_key: DeepL authentication key (keys ending in ":fx" use the free API)
        server_url: Explicit server URL, overrides the key-based selection
        timeout: Per-request timeout in seconds
    """

    auth_key: Optional[str] = None
    server_url: Optional[str] = None
    timeout: float = Field(10.0, gt=0.0, le=600.0)
