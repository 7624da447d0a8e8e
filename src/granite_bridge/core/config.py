"""Configuration management for granite-bridge.

Handles the TOML config file, environment variables and configuration
precedence resolution.

Precedence order (highest to lowest):
1. CLI flags (--format)
2. Environment variables (GRANITE_BRIDGE_FORMAT, GRANITE_BRIDGE_TIMEOUT)
3. Config file
4. Built-in defaults

The granitectl location is not configured here: it is resolved from
GRANITECTL_PATH and the install layout by core.resolver.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any

from pydantic import BaseModel, field_validator

from granite_bridge.core.exceptions import ConfigError
from granite_bridge.core.invoker import QUERY_TIMEOUT

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "granite-bridge" / "config.toml"

_OUTPUT_FORMATS = {"table", "json", "csv"}

_ENV_VARS: dict[str, str] = {
    "GRANITE_BRIDGE_FORMAT": "default_format",
    "GRANITE_BRIDGE_TIMEOUT": "query_timeout",
}


def _check_format(v: str) -> str:
    if v not in _OUTPUT_FORMATS:
        msg = f"Invalid format: '{v}'. Must be one of: {', '.join(sorted(_OUTPUT_FORMATS))}"
        raise ValueError(msg)
    return v


def _check_timeout(v: float) -> float:
    if v <= 0:
        msg = f"Invalid query_timeout: {v}. Must be greater than 0"
        raise ValueError(msg)
    return v


class AppConfig(BaseModel):
    default_format: str = "table"
    query_timeout: float = QUERY_TIMEOUT

    @field_validator("default_format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        return _check_format(v)

    @field_validator("query_timeout")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        return _check_timeout(v)


class ResolvedConfig(BaseModel):
    default_format: str = "table"
    query_timeout: float = QUERY_TIMEOUT
    sources: dict[str, str] = {}


def load_config(config_path: Path | None = None) -> AppConfig:
    """Load configuration from TOML file.

    Returns default AppConfig if file doesn't exist.
    Raises ConfigError on malformed TOML or invalid config.
    """
    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH

    if not config_path.exists():
        return AppConfig()

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        msg = f"Malformed TOML in {config_path}: {e}"
        raise ConfigError(msg) from e

    try:
        return AppConfig.model_validate(data)
    except Exception as e:
        msg = f"Invalid configuration in {config_path}: {e}"
        raise ConfigError(msg) from e


def resolve_config(config: AppConfig, **cli_overrides: Any) -> ResolvedConfig:
    """Resolve configuration using precedence chain.

    CLI > env > config file > built-in defaults.
    """
    sources: dict[str, str] = {}
    resolved: dict[str, Any] = {
        "default_format": "table",
        "query_timeout": QUERY_TIMEOUT,
    }
    for key in resolved:
        sources[key] = "default"

    # Layer 2: Config file
    for key in config.model_fields_set:
        if key in resolved:
            resolved[key] = getattr(config, key)
            sources[key] = "config"

    # Layer 3: Environment variables
    for env_var, field_name in _ENV_VARS.items():
        value = os.environ.get(env_var)
        if not value:
            continue
        try:
            if field_name == "query_timeout":
                resolved[field_name] = _check_timeout(float(value))
            else:
                resolved[field_name] = _check_format(value)
        except ValueError as e:
            msg = f"Invalid {env_var} value: '{value}'. {e}"
            raise ConfigError(msg) from None
        sources[field_name] = f"env: {env_var}"

    # Layer 4: CLI flags (highest priority)
    cli_to_field = {
        "format": "default_format",
        "timeout": "query_timeout",
    }
    for cli_name, field_name in cli_to_field.items():
        value = cli_overrides.get(cli_name)
        if value is not None:
            resolved[field_name] = value
            sources[field_name] = f"cli: --{cli_name}"

    resolved["sources"] = sources
    return ResolvedConfig(**resolved)
