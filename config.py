"""
Configuration settings for the lesson migration engine.

Uses Pydantic Settings for environment variable management with .env file support.
Every field can be overridden with a LESSONS_ prefixed environment variable,
e.g. LESSONS_MIGRATION_VERSION=1.1.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="LESSONS_",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Migration
    # ========================================
    migration_version: str = Field(
        default="1.0",
        description="Version stamped into migrationMetadata.version",
    )
    forced_slides_ids: list[str] = Field(
        default=["history-of-ai"],
        description="Lesson ids always classified as slides, whatever their shape",
    )
    sandbox_language: str = Field(
        default="javascript",
        description="Language of generated code-sandbox blocks",
    )
    placeholder_code: str = Field(
        default="// Write your code here",
        description="Starting code for sandboxes that ship none",
    )

    # ========================================
    # Validation thresholds
    # ========================================
    min_text_length: int = Field(
        default=10,
        description="Text blocks shorter than this are flagged",
    )
    max_text_length: int = Field(
        default=2000,
        description="Text blocks longer than this are flagged",
    )
    min_estimated_minutes: int = Field(
        default=5,
        description="Lower bound for a sensible estimatedTimeMinutes",
    )
    max_estimated_minutes: int = Field(
        default=120,
        description="Upper bound for a sensible estimatedTimeMinutes",
    )
    max_content_blocks: int = Field(
        default=20,
        description="Lessons with more blocks are flagged for splitting",
    )
    min_title_length: int = Field(
        default=3,
        description="Titles shorter than this are flagged",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging verbosity level",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
