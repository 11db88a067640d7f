"""Unified configuration schema for inspection_sync.

Defines Pydantic models for the YAML config structure with dedicated
sections for the remote service, sync behaviour and logging, plus an
adapter that flattens them into ``load_config()`` fallbacks.

Usage:
    from inspection_sync.config_schema import build_config, to_yaml_fallbacks

    raw = load_hierarchical_config()
    unified = build_config(raw)
    config = load_config(yaml_fallbacks=to_yaml_fallbacks(unified))
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

# ---------------------------------------------------------------------------
# Section models
# ---------------------------------------------------------------------------


class RemoteConfig(BaseModel):
    """Remote inspection service connection settings.

    All fields are optional to support zero-config: env vars and CLI args
    can supply them at runtime instead.
    """

    url: str | None = Field(default=None, description="Service base URL")
    token: str | None = Field(default=None, description="Bearer token")
    insecure: bool = Field(
        default=False,
        description="Disable SSL verification (development only)",
    )
    timeout: int = Field(
        default=60,
        ge=1,
        le=600,
        description="Read timeout for each remote call in seconds (1-600)",
    )

    model_config = {"frozen": True}


class SyncConfig(BaseModel):
    """Repository and upload behaviour."""

    serialize_uploads: bool = Field(
        default=True,
        description="Run at most one upload per project id at a time",
    )
    sample_data: bool = Field(
        default=False, description="Seed the repository with sample projects"
    )
    analytics: Literal["console", "log", "none"] = Field(
        default="log", description="Where tracking events are sent"
    )

    model_config = {"frozen": True}


class LoggingConfig(BaseModel):
    """Logging configuration.

    Attributes:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        file: Optional log file path.
        format: ``text`` or ``json``.
    """

    level: str = Field(default="INFO", description="Log level")
    file: str | None = Field(default=None, description="Log file path")
    format: Literal["text", "json"] = Field(
        default="text", description="Log record format"
    )

    model_config = {"frozen": True}


# ---------------------------------------------------------------------------
# Top-level unified config
# ---------------------------------------------------------------------------


class UnifiedConfig(BaseModel):
    """Top-level unified configuration.

    Every section has sensible defaults, so ``UnifiedConfig()`` is valid.
    """

    remote: RemoteConfig = Field(default_factory=RemoteConfig)
    sync: SyncConfig = Field(default_factory=SyncConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {"frozen": True}


def build_config(raw_data: dict) -> UnifiedConfig:
    """Construct a ``UnifiedConfig`` from the merged YAML dict.

    Missing sections get defaults.
    """
    if not raw_data:
        return UnifiedConfig()

    return UnifiedConfig(**raw_data)


def to_yaml_fallbacks(unified: UnifiedConfig) -> dict:
    """Flatten the ``remote`` and ``sync`` sections for ``load_config()``.

    ``None`` values are dropped so they never mask a built-in default.
    """
    merged = {
        **unified.remote.model_dump(),
        **unified.sync.model_dump(),
    }
    return {k: v for k, v in merged.items() if v is not None}
