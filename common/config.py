"""Job progress configuration.

Reads the ``.env`` file and the process environment.
"""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class JobSyncSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    jobs_collection: str = Field(default="document_jobs")
    job_store_backend: Literal["firestore", "memory"] = Field(default="firestore")
    ticker_interval_seconds: float = Field(default=4.0)
    ticker_max_messages: int = Field(default=5)
    feed_max_messages: int = Field(default=8)
    highlight_history_limit: int = Field(default=20)
    stream_heartbeat_seconds: float = Field(default=15.0)
    log_level: str = Field(default="INFO")

    @field_validator(
        "ticker_interval_seconds",
        "ticker_max_messages",
        "feed_max_messages",
        "highlight_history_limit",
        "stream_heartbeat_seconds",
    )
    @classmethod
    def must_be_positive(cls, v):
        if v <= 0:
            raise ValueError("must be > 0")
        return v


settings = JobSyncSettings()
