"""Nested-set hierarchy settings."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class HierarchySettings(BaseSettings):
    """Settings for category, comment and menu trees.

    Environment variables use TREE_ prefix.
    Example: TREE_LOCK_TIMEOUT_MS=2000
    """

    lock_timeout_ms: int | None = Field(
        default=5000,
        ge=1,
        le=600_000,
        description=(
            "Maximum time (milliseconds) a structural operation waits for the "
            "forest lock before failing with ConcurrentModificationError. "
            "None waits indefinitely. Only enforced on PostgreSQL."
        ),
    )

    model_config = SettingsConfigDict(
        env_prefix="TREE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
        env_ignore_empty=True,
    )
