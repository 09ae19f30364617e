"""Document translation configuration model."""

from pydantic import BaseModel, Field


class DocumentConfig(BaseModel):
    """Configuration for document translation workflows.

    Attributes:
        poll_interval: Seconds between status checks when the server gives no estimate
        max_poll_interval: Upper bound on a single status wait in seconds
        upload_chunk_size: Bytes read from the source file per chunk
    """

    poll_interval: float = Field(5.0, gt=0.0)
    max_poll_interval: float = Field(60.0, gt=0.0)
    upload_chunk_size: int = Field(64 * 1024, ge=1024)
