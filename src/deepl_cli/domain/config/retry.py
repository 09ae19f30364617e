"""Retry configuration model."""

from pydantic import BaseModel, ConfigDict, Field, model_validator


class RetryConfig(BaseModel):
    """Configuration for retry logic.

    Defaults are the dispatcher's fixed policy.

    Attributes:
        max_attempts: Maximum number of attempts (0 disables the call entirely)
        initial_delay: Delay before the first retry in seconds
        max_delay: Upper bound on the un-jittered delay in seconds
        backoff_multiplier: Exponential backoff growth factor
        jitter: Random jitter fraction, delays vary by +/- this share
    """

    model_config = ConfigDict(frozen=True)

    max_attempts: int = Field(5, ge=0, le=20)
    initial_delay: float = Field(1.0, ge=0.0)  # Allow 0 for tests
    max_delay: float = Field(120.0, ge=0.0)
    backoff_multiplier: float = Field(1.6, ge=1.0, le=10.0)
    jitter: float = Field(0.23, ge=0.0, lt=1.0)

    @model_validator(mode="after")
    def _check_delay_bounds(self) -> "RetryConfig":
        if self.max_delay < self.initial_delay:
            raise ValueError("max_delay must not be lower than initial_delay")
        return self
