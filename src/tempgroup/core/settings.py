"""Centralized configuration for tempgroup.

All fields can be set through ``TEMPGROUP_*`` environment variables
(e.g. ``TEMPGROUP_CHUNK_SIZE=5000``) or a ``.env`` file in the working
directory.  Explicit CLI options override settings; settings override the
defaults declared here.

Examples:
    >>> from tempgroup.core.settings import get_settings
    >>> settings = get_settings()
    >>> settings.chunk_size
    1000

Tags:
    settings, configuration, pydantic, environment, tempgroup
"""

from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic import ValidationError as PydanticValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from tempgroup.core.errors import ConfigError


class TempGroupSettings(BaseSettings):
    """Runtime settings for the grouping job and its record store."""

    model_config = SettingsConfigDict(
        env_prefix="TEMPGROUP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Database ─────────────────────────────────────────────────
    database_url: str = Field(default="sqlite:///data/tempgroup.db")
    database_echo: bool = Field(default=False)

    # ── Job parameters ───────────────────────────────────────────
    chunk_size: int = Field(default=1000, description="Records per chunk transaction")
    page_size: int = Field(default=10000, description="Records per reader page")
    max_threads: int = Field(default=4, description="Worker pool size for chunk processing")
    log_frequency: int = Field(default=10000, description="Log progress every N processed records")

    # ── Grouper cache warm-up ────────────────────────────────────
    preload_known_accounts: bool = Field(default=False)
    preload_threshold: int = Field(default=100_000)

    # ── Writer ───────────────────────────────────────────────────
    writer_mode: Literal["batch", "upsert"] = Field(default="batch")

    # ── Logging ──────────────────────────────────────────────────
    log_level: str = Field(default="INFO")
    log_format: Literal["json", "console"] = Field(default="console")


_settings_cache: dict[str, TempGroupSettings] = {}


def get_settings(*, _force_reload: bool = False) -> TempGroupSettings:
    """Load, validate, and cache a :class:`TempGroupSettings` instance.

    Raises:
        ConfigError: An environment variable or ``.env`` entry is invalid.
    """
    if not _force_reload and "default" in _settings_cache:
        return _settings_cache["default"]

    try:
        settings = TempGroupSettings()
    except PydanticValidationError as e:
        fields = sorted({".".join(str(p) for p in err["loc"]) for err in e.errors()})
        raise ConfigError(f"Invalid settings: {', '.join(fields)}", cause=e) from e
    _settings_cache["default"] = settings
    return settings


def clear_settings_cache() -> None:
    """Drop the cached settings (tests and long-lived processes)."""
    _settings_cache.clear()
