"""Settings for file-spine.

``FileSpineSettings`` gathers the knobs the default handler set and the
worker pool need: pool size, text encoding, JSON indentation, the default
text write mode and logging.  Values come from ``FILESPINE_*`` environment
variables and an optional ``.env`` file.

Manifesto:
    Configuration should be explicit, validated, and environment-driven.

    - **Pydantic validation:** Type-checked at startup, not at first write
    - **Environment-driven:** ``FILESPINE_ENCODING=latin-1`` just works
    - **Sensible defaults:** UTF-8, 4 workers, indented JSON

Examples:
    >>> from filespine.core.settings import FileSpineSettings
    >>> settings = FileSpineSettings(max_workers=8)
    >>> settings.encoding
    'utf-8'

Tags:
    settings, configuration, pydantic, environment, file-spine
"""

from __future__ import annotations

import codecs

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from filespine.handlers.base import WriteMode


class FileSpineSettings(BaseSettings):
    """Runtime configuration.

    Fields
    ──────
    max_workers         : Worker threads for ``worker_pool()``
    thread_name_prefix  : Name prefix for worker threads (shows up in logs)
    encoding            : Text encoding used by the text and YAML handlers
    json_indent         : Indentation for written JSON (None = compact)
    default_write_mode  : Text write mode used when a write passes no option
    log_level           : Structlog log level
    json_logs           : True for JSON, False for console, None for auto
    """

    model_config = SettingsConfigDict(
        env_prefix="FILESPINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Execution ────────────────────────────────────────────────
    max_workers: int = Field(default=4, ge=1)
    thread_name_prefix: str = "filespine"

    # ── Codecs ───────────────────────────────────────────────────
    encoding: str = "utf-8"
    json_indent: int | None = Field(default=2, ge=0)
    default_write_mode: WriteMode = WriteMode.OVERWRITE

    # ── Observability ────────────────────────────────────────────
    log_level: str = "INFO"
    json_logs: bool | None = None

    @field_validator("encoding")
    @classmethod
    def _known_encoding(cls, value: str) -> str:
        try:
            codecs.lookup(value)
        except LookupError as e:
            raise ValueError(f"unknown encoding: {value}") from e
        return value

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level: {value}")
        return level

    @field_validator("default_write_mode", mode="before")
    @classmethod
    def _lower_write_mode(cls, value: object) -> object:
        # Same spelling rules as WriteMode strings passed to a write.
        return value.lower() if isinstance(value, str) else value
