"""Application configuration.

Values load from `.env` and `INFRALYZE_*` environment variables so the CLI
and the API share one source of truth.
"""
from __future__ import annotations

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime settings loaded from .env and environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="INFRALYZE_",
        extra="ignore",
    )

    max_upload_bytes: int = 5 * 1024 * 1024
    preview_chars: int = 500
    max_depth: int = 100  # deeper subtrees are treated as opaque leaves
    max_tree_nodes: int = 100_000  # floor; the budget grows with input length
    sensitive_keys_case_sensitive: bool = False
    diagram_direction: str = "TD"
    output_dir: str = "outputs"
    log_level: str = Field(
        default="WARNING",
        validation_alias=AliasChoices("INFRALYZE_LOG_LEVEL", "LOG_LEVEL"),
    )


settings = Settings()
