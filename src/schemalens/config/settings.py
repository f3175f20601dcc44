"""Engine settings and loading."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from schemalens.errors import ConfigError, ErrorCode, ErrorContext

_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


class EngineSettings(BaseSettings):
    """Tunables for resolution, synthesis and rendering.

    The depth ceilings bound recursion over cyclic or pathologically deep
    schema graphs. Reaching one degrades the result (``None`` value, a
    "max depth" view) instead of raising.
    """

    model_config = SettingsConfigDict(
        env_prefix="SCHEMALENS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    render_max_depth: int = 4
    synthesis_max_depth: int = 10
    resolve_max_depth: int = 32
    max_pointer_hops: int = 64
    placeholder_string: str = "string"
    example_email: str = "user@example.com"
    example_url: str = "https://example.com"
    log_level: str = "INFO"

    @field_validator(
        "render_max_depth",
        "synthesis_max_depth",
        "resolve_max_depth",
        "max_pointer_hops",
    )
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("depth limits must be at least 1")
        return v

    @field_validator("placeholder_string")
    @classmethod
    def validate_placeholder(cls, v: str) -> str:
        if not v:
            raise ValueError("placeholder_string must not be empty")
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = str(v).upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"Invalid log level: {v}. Valid: {sorted(_LOG_LEVELS)}")
        return level


def load_settings(config_path: str | Path | None = None) -> EngineSettings:
    """Load settings from a YAML file and the environment.

    Priority: env vars > config file > defaults
    """
    config_data: dict[str, Any] = {}

    if config_path is not None:
        config_path = Path(config_path)
        if not config_path.exists():
            raise ConfigError(
                f"Config file not found: {config_path}",
                error_code=ErrorCode.CONFIG_NOT_FOUND,
                context=ErrorContext(source=str(config_path)),
            )
        try:
            with open(config_path, encoding="utf-8") as f:
                config_data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(
                f"Invalid YAML in config file: {exc}",
                context=ErrorContext(source=str(config_path)),
                cause=exc,
            ) from exc
        if not isinstance(config_data, dict):
            raise ConfigError(
                "Config file must contain a mapping",
                context=ErrorContext(source=str(config_path)),
            )

    config_data.update(_get_env_overrides())

    try:
        return EngineSettings(**config_data)
    except ValidationError as exc:
        raise ConfigError(
            f"Invalid configuration: {exc.error_count()} error(s)",
            context=ErrorContext(source=str(config_path) if config_path else None),
            cause=exc,
            suggestions=[
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
                for err in exc.errors()
            ],
        ) from exc


@lru_cache(maxsize=1)
def get_settings() -> EngineSettings:
    """Default settings shared by callers that do not pass their own."""
    return EngineSettings()


def _get_env_overrides() -> dict[str, Any]:
    """Get configuration overrides from environment variables.

    File values reach EngineSettings as init arguments, which outrank the
    environment, so every field is re-read here to keep env on top.
    """
    overrides: dict[str, Any] = {}

    env_mappings = {
        "SCHEMALENS_RENDER_MAX_DEPTH": ("render_max_depth", int),
        "SCHEMALENS_SYNTHESIS_MAX_DEPTH": ("synthesis_max_depth", int),
        "SCHEMALENS_RESOLVE_MAX_DEPTH": ("resolve_max_depth", int),
        "SCHEMALENS_MAX_POINTER_HOPS": ("max_pointer_hops", int),
        "SCHEMALENS_PLACEHOLDER_STRING": "placeholder_string",
        "SCHEMALENS_EXAMPLE_EMAIL": "example_email",
        "SCHEMALENS_EXAMPLE_URL": "example_url",
        "SCHEMALENS_LOG_LEVEL": "log_level",
    }

    for env_key, config_key in env_mappings.items():
        value = os.environ.get(env_key)
        if value is not None:
            if isinstance(config_key, tuple):
                key, converter = config_key
                try:
                    overrides[key] = converter(value)
                except ValueError as exc:
                    raise ConfigError(
                        f"{env_key} must be an integer, got {value!r}",
                        cause=exc,
                    ) from exc
            else:
                overrides[config_key] = value

    return overrides
