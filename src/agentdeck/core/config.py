"""Application configuration management.

Handles loading and validating configuration from multiple sources:
    - TOML/JSON config files
    - Environment variables (AGENTDECK_* prefix)
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
from pathlib import Path, PurePosixPath
from typing import Any
from unittest.mock import patch

from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

CONFIG_ENV_VAR = "AGENTDECK_CONFIG"


class ConfigError(RuntimeError):
    """Raised when a configuration file cannot be parsed."""


# -----------------------------------------------------------------------------
# Sub-configuration Models
# -----------------------------------------------------------------------------


class WorktreeConfig(BaseModel):
    """Where task worktrees live and how their branches are named."""

    dir_name: str = Field(
        default=".worktrees",
        description="Directory under the project root that holds task worktrees.",
    )
    branch_prefix: str = Field(default="task", description="Prefix for task branch names.")
    symlink_dirs: list[str] = Field(
        default_factory=list,
        description="Repo-relative directories (e.g. node_modules) symlinked into new worktrees.",
    )

    @field_validator("dir_name")
    @classmethod
    def validate_dir_name(cls, v: str) -> str:
        name = v.strip()
        if not name or "/" in name or "\\" in name or name in {".", ".."}:
            raise ValueError(f"worktree dir_name must be a single directory name, got {v!r}")
        return name

    @field_validator("symlink_dirs")
    @classmethod
    def validate_symlink_dirs(cls, v: list[str]) -> list[str]:
        cleaned: list[str] = []
        for entry in v:
            rel = PurePosixPath(entry.strip().replace("\\", "/"))
            if not str(rel) or rel.is_absolute() or ".." in rel.parts:
                raise ValueError(f"symlink dir must be a relative path inside the repo: {entry!r}")
            cleaned.append(str(rel))
        return cleaned


class SessionConfig(BaseModel):
    """Agent process handling."""

    kill_timeout: float = Field(
        default=3.0,
        ge=0.0,
        description="Seconds to wait after SIGTERM before sending SIGKILL to an agent process.",
    )


@dataclass
class ConfigLoadResult:
    path: Path
    file_loaded: bool
    env_overrides: set[str]
    error: str | None = None


class AppConfig(BaseSettings):
    """Application-wide configuration with nested sub-configs."""

    model_config = SettingsConfigDict(
        env_prefix="AGENTDECK_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    project_root: Path | None = Field(
        default=None, description="Initial project root; can be replaced at runtime."
    )
    log_level: str = Field(default="INFO", description="Log level for agentdeck output.")
    worktrees: WorktreeConfig = Field(default_factory=WorktreeConfig)
    sessions: SessionConfig = Field(default_factory=SessionConfig)

    @field_validator("project_root", mode="after")
    @classmethod
    def expand_project_root(cls, v: Path | None) -> Path | None:
        return v.expanduser() if v is not None else None

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
    candidate = config_path or env_vars.get(CONFIG_ENV_VAR) or (Path.home() / ".agentdeck.toml")
    return Path(candidate).expanduser()


def _read_config_file(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}

    try:
        raw = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"Could not read {path}: {exc}") from exc

    suffix = path.suffix.lower()
    parser = json.loads if suffix == ".json" else tomllib.loads

    try:
        data = parser(raw)
    except (json.JSONDecodeError, tomllib.TOMLDecodeError) as exc:
        raise ConfigError(f"Syntax error in {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigError(f"Config root in {path} must be a mapping.")

    return data


def _detect_env_overrides(env_vars: Mapping[str, str]) -> set[str]:
    """Detect which fields are overridden by environment variables.

    Top-level fields map to AGENTDECK_LOG_LEVEL, nested ones to
    AGENTDECK_WORKTREES__BRANCH_PREFIX and friends.
    """
    prefix = AppConfig.model_config.get("env_prefix", "")
    delimiter = AppConfig.model_config.get("env_nested_delimiter", "__")
    overrides: set[str] = set()

    nested_models: dict[str, type[BaseModel]] = {
        "worktrees": WorktreeConfig,
        "sessions": SessionConfig,
    }

    for field in AppConfig.model_fields:
        if field in nested_models:
            continue
        if f"{prefix}{field}".upper() in env_vars:
            overrides.add(field)

    for group_name, model_cls in nested_models.items():
        for field in model_cls.model_fields:
            env_key = f"{prefix}{group_name}{delimiter}{field}".upper()
            if env_key in env_vars:
                overrides.add(f"{group_name}.{field}")

    return overrides


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
    except ConfigError as exc:
        error = str(exc)

    context_manager = (
        patch.dict(os.environ, env_vars, clear=False) if env is not None else nullcontext()
    )

    try:
        with context_manager:
            config = AppConfig(**file_data)
    except ValidationError as exc:
        error = str(exc)
        # Bypass every source: the bad value may come from the environment.
        config = AppConfig.model_construct()

    load_result = ConfigLoadResult(
        path=resolved_path,
        file_loaded=file_loaded,
        env_overrides=env_overrides,
        error=error,
    )

    return config, load_result
