"""
Configuration management.

Uses Pydantic Settings for environment variable handling and validation,
with an optional YAML file providing defaults that the environment overrides.
"""

import codecs
import os
from functools import lru_cache
from typing import Any, Dict, Optional

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

CONFIG_PATH_ENV = "NGINXLOG_CONFIG"

DECODE_ERROR_HANDLERS = {"strict", "replace", "ignore", "surrogateescape", "backslashreplace"}


def load_config_file(config_path: Optional[str] = None) -> Dict[str, Any]:
    """Load configuration from YAML file."""
    if config_path is None:
        config_path = os.environ.get(CONFIG_PATH_ENV)

    if config_path is None:
        # Look for nginxlog.yaml in common locations
        possible_paths = [
            "nginxlog.yaml",
            "nginxlog.yml",
        ]

        for path in possible_paths:
            if os.path.exists(path):
                config_path = path
                break
        else:
            return {}

    if os.path.exists(config_path):
        with open(config_path, "r") as f:
            config_data = yaml.safe_load(f) or {}
            return config_data
    return {}


class ReaderSettings(BaseSettings):
    """Settings that control how log sources and nginx configs are read."""

    encoding: str = Field(default="utf-8", description="Encoding used to decode byte sources")
    decode_errors: str = Field(
        default="surrogateescape",
        description="Codec error handler for undecodable bytes",
    )
    skip_blank_lines: bool = Field(default=True, description="Skip whitespace-only log lines")
    mismatch_preview_chars: int = Field(
        default=120,
        ge=0,
        description="Maximum characters of a log line quoted in mismatch errors (0 disables truncation)",
    )
    directive: str = Field(default="log_format", description="Directive keyword declaring a named format")
    log_level: str = Field(default="INFO", description="Log level")

    @field_validator("encoding")
    def validate_encoding(cls, v: str) -> str:
        """Reject encodings Python has no codec for."""
        try:
            codecs.lookup(v)
        except LookupError:
            raise ValueError(f"Unknown encoding: {v}")
        return v

    @field_validator("decode_errors")
    def validate_decode_errors(cls, v: str) -> str:
        if v not in DECODE_ERROR_HANDLERS:
            raise ValueError(f"decode_errors must be one of {sorted(DECODE_ERROR_HANDLERS)}")
        return v

    @field_validator("directive")
    def validate_directive(cls, v: str) -> str:
        v = v.strip()
        if not v or any(ch.isspace() for ch in v):
            raise ValueError("directive must be a single non-empty word")
        return v

    class Config:
        env_prefix = "NGINXLOG_"
        case_sensitive = False


@lru_cache()
def get_settings() -> ReaderSettings:
    """Get cached settings instance with config file and env support."""

    config_data = load_config_file()

    # Config file provides defaults, env vars override
    if config_data:
        _set_env_from_config(config_data)

    return ReaderSettings()


def _set_env_from_config(config_data: Dict[str, Any]) -> None:
    """Set environment variables from config file if not already set."""
    mappings = {
        ("reader", "encoding"): "NGINXLOG_ENCODING",
        ("reader", "decode_errors"): "NGINXLOG_DECODE_ERRORS",
        ("reader", "skip_blank_lines"): "NGINXLOG_SKIP_BLANK_LINES",
        ("reader", "mismatch_preview_chars"): "NGINXLOG_MISMATCH_PREVIEW_CHARS",
        ("nginx", "directive"): "NGINXLOG_DIRECTIVE",
        ("logging", "level"): "NGINXLOG_LOG_LEVEL",
    }

    for (section, key), env_var in mappings.items():
        if env_var not in os.environ:
            value = (config_data.get(section) or {}).get(key)
            if value is not None:
                os.environ[env_var] = str(value)


def reload_settings() -> ReaderSettings:
    """Reload settings (clears cache)."""
    get_settings.cache_clear()
    return get_settings()
