"""Settings and logging setup for the JSON record tools."""
from __future__ import annotations

import logging
from typing import Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ApiLimit(BaseModel):
    max_calls: int = Field(gt=0)
    window_ms: int = Field(gt=0)


class Settings(BaseSettings):
    schema_sample_size: int = Field(default=100, gt=0)
    max_file_size_mb: int = Field(default=100, gt=0)

    sql_table_name: str = "artists"
    sql_batch_size: int = Field(default=100, gt=0)

    courtesy_delay_ms: int = Field(default=100, ge=0)

    # External API call budgets
    musicbrainz_limit: ApiLimit = ApiLimit(max_calls=1, window_ms=1000)
    theaudiodb_limit: ApiLimit = ApiLimit(max_calls=2, window_ms=1000)
    youtube_limit: ApiLimit = ApiLimit(max_calls=10, window_ms=1000)

    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="JSON_TOOLS_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    @property
    def max_file_size_bytes(self) -> int:
        return self.max_file_size_mb * 1024 * 1024


settings = Settings()


def configure_logging(level: Optional[str] = None):
    """
    Configure application logging with standard format

    Returns:
        Logger instance for the config module
    """
    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    return logging.getLogger(__name__)
