"""Application configuration management.

Handles loading and validating configuration from multiple sources:
    - TOML/JSON config files
    - Environment variables (HELLO_MCP_* prefix, plus the bare PORT variable)
    - Default values

Key components:
    - AppConfig: Main configuration model
    - load_config(): Safe config loading with fallback
    - ConfigLoadResult: Metadata about config source
"""

from __future__ import annotations

import json
import os
import tomllib
from collections.abc import Mapping
from contextlib import nullcontext
from dataclasses import dataclass
from pathlib import Path
from typing import Any
from unittest.mock import patch

from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from hellomcp import __version__
from hellomcp.core.result import ConfigurationError

CONFIG_ENV_VAR = "HELLO_MCP_CONFIG"
PORT_ENV_VAR = "PORT"


# -----------------------------------------------------------------------------
# Sub-configuration Models
# -----------------------------------------------------------------------------


class ServerConfig(BaseModel):
    """Identity advertised to clients during initialization."""

    name: str = Field(default="hello-mcp", description="Server name reported in serverInfo.")
    version: str = Field(default=__version__, description="Server version reported in serverInfo.")
    instructions: str | None = Field(
        default=None, description="Optional usage instructions returned from initialize."
    )


class HttpConfig(BaseModel):
    """Request/response network transport configuration."""

    host: str = Field(default="127.0.0.1", description="Interface the HTTP listener binds to.")
    port: int = Field(default=3000, ge=0, le=65535, description="TCP port for the HTTP listener.")
    path: str = Field(default="/mcp", description="Endpoint that accepts MCP POST requests.")
    json_response: bool = Field(
        default=False,
        description="Answer with plain JSON instead of an event stream (log events are dropped).",
    )
    max_body_bytes: int = Field(
        default=4 * 1024 * 1024, gt=0, description="Largest accepted request body."
    )

    @field_validator("path")
    @classmethod
    def ensure_leading_slash(cls, v: str) -> str:
        return v if v.startswith("/") else f"/{v}"


@dataclass
class ConfigLoadResult:
    path: Path
    file_loaded: bool
    env_overrides: set[str]
    error: str | None = None


class AppConfig(BaseSettings):
    """Application-wide configuration with nested sub-configs."""

    model_config = SettingsConfigDict(
        env_prefix="HELLO_MCP_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    server: ServerConfig = Field(default_factory=ServerConfig)
    http: HttpConfig = Field(default_factory=HttpConfig)
    log_level: str = Field(default="INFO", description="Log level for server output.")

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[
        PydanticBaseSettingsSource,
        PydanticBaseSettingsSource,
        PydanticBaseSettingsSource,
        PydanticBaseSettingsSource,
    ]:
        # Ensure environment variables override config file entries.
        return (env_settings, init_settings, dotenv_settings, file_secret_settings)


def _resolve_config_path(config_path: Path | None, env_vars: Mapping[str, str]) -> Path:
    candidate = config_path or env_vars.get(CONFIG_ENV_VAR) or (Path.home() / ".hellomcp.toml")
    return Path(candidate).expanduser()


def _read_config_file(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}

    raw = path.read_text(encoding="utf-8")
    suffix = path.suffix.lower()
    parser = json.loads if suffix == ".json" else tomllib.loads

    try:
        data = parser(raw)
    except (json.JSONDecodeError, tomllib.TOMLDecodeError) as exc:
        raise ConfigurationError(f"Syntax error in {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigurationError(f"Config root in {path} must be a mapping.")

    return data


def _env_key(group: str, field: str) -> str:
    prefix = AppConfig.model_config.get("env_prefix", "")
    delimiter = AppConfig.model_config.get("env_nested_delimiter", "__")
    return f"{prefix}{group}{delimiter}{field}".upper()


def _detect_env_overrides(env_vars: Mapping[str, str]) -> set[str]:
    """Detect which fields are overridden by environment variables.

    For nested models, detects vars like HELLO_MCP_HTTP__PORT, HELLO_MCP_SERVER__NAME.
    """
    prefix = AppConfig.model_config.get("env_prefix", "")
    overrides: set[str] = set()

    nested_models: dict[str, type[BaseModel]] = {
        "server": ServerConfig,
        "http": HttpConfig,
    }

    for group_name, model_cls in nested_models.items():
        for field in model_cls.model_fields:
            if _env_key(group_name, field) in env_vars:
                overrides.add(f"{group_name}.{field}")

    if f"{prefix}LOG_LEVEL" in env_vars:
        overrides.add("log_level")

    if PORT_ENV_VAR in env_vars and _env_key("http", "port") not in env_vars:
        overrides.add("http.port")

    return overrides


def _apply_port_fallback(config: AppConfig, env_vars: Mapping[str, str]) -> AppConfig:
    """Honour the bare PORT variable unless the prefixed one is set."""
    raw = env_vars.get(PORT_ENV_VAR)
    if raw is None or _env_key("http", "port") in env_vars:
        return config
    try:
        http = HttpConfig.model_validate({**config.http.model_dump(), "port": raw})
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid {PORT_ENV_VAR} value {raw!r}: {exc}") from exc
    return config.model_copy(update={"http": http})


def load_config(
    config_path: Path | None = None,
    env: Mapping[str, str] | None = None,
) -> tuple[AppConfig, ConfigLoadResult]:
    """
    Load configuration with Safe Mode fallback.
    If the file is invalid, returns default config + error message.
    """
    env_vars: Mapping[str, str] = os.environ if env is None else {**os.environ, **env}
    resolved_path = _resolve_config_path(config_path, env_vars)
    env_overrides = _detect_env_overrides(env_vars)

    error: str | None = None
    file_loaded = False
    file_data: dict[str, Any] = {}

    try:
        file_data = _read_config_file(resolved_path)
        file_loaded = resolved_path.exists()
    except ConfigurationError as exc:
        error = str(exc)

    context_manager = (
        patch.dict(os.environ, env_vars, clear=False) if env is not None else nullcontext()
    )

    try:
        with context_manager:
            config = AppConfig(**file_data)
    except ValidationError as exc:
        error = str(exc)
        config = AppConfig()

    try:
        config = _apply_port_fallback(config, env_vars)
    except ConfigurationError as exc:
        error = f"{error}; {exc}" if error else str(exc)

    load_result = ConfigLoadResult(
        path=resolved_path,
        file_loaded=file_loaded,
        env_overrides=env_overrides,
        error=error,
    )

    return config, load_result
