"""
Centralized configuration for buildmanifest.

Process-level settings use Pydantic BaseSettings for environment
variable integration. Per-project manifest options live in a YAML file
(default .buildmanifest.yaml) and are loaded into ManifestOptions.

Configuration sources (in order of precedence):
1. Explicit constructor arguments / CLI flags
2. Environment variables (BUILDMANIFEST_*)
3. .env file
4. Default values

Example:
    from buildmanifest.config import get_config, load_options

    config = get_config()
    options = load_options(config.options_file)
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Literal, Optional, Union

import yaml
from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from buildmanifest.constants import DEFAULT_OPTIONS_FILE, GIT_COMMAND_TIMEOUT_S
from buildmanifest.models import ManifestOptions


class OptionsFileError(Exception):
    """Raised when a manifest options file cannot be used."""

    def __init__(self, path: Path, message: str):
        self.path = path
        super().__init__(f"{path}: {message}")


class BuildManifestConfig(BaseSettings):
    """
    Process configuration for buildmanifest.

    Example:
        export BUILDMANIFEST_LOG_LEVEL=debug
        export BUILDMANIFEST_GIT_TIMEOUT_S=10
    """

    model_config = SettingsConfigDict(
        env_prefix="BUILDMANIFEST_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Logging
    log_level: Literal["debug", "info", "warning", "error"] = Field(
        default="warning",
        description="Logging level for buildmanifest",
    )
    log_format: Literal["json", "text"] = Field(
        default="text",
        description="Log output format (json lines or plain text)",
    )

    # Git
    git_executable: str = Field(
        default="git",
        description="git executable used to read repository state",
    )
    git_timeout_s: float = Field(
        default=GIT_COMMAND_TIMEOUT_S,
        gt=0,
        description="Timeout for a single git command",
    )

    # Options
    options_file: str = Field(
        default=DEFAULT_OPTIONS_FILE,
        description="YAML file with manifest options, relative to the project dir",
    )

    @field_validator("options_file")
    @classmethod
    def expand_path(cls, v: str) -> str:
        """Expand ~ and environment variables in paths."""
        return os.path.expanduser(os.path.expandvars(v))


# Global singleton
_config: Optional[BuildManifestConfig] = None


def get_config(**overrides) -> BuildManifestConfig:
    """
    Get the global configuration instance.

    Creates a singleton on first call. Subsequent calls return
    the same instance unless overrides are provided.
    """
    global _config

    if overrides or _config is None:
        _config = BuildManifestConfig(**overrides)

    return _config


def reset_config() -> None:
    """Reset the global configuration (for testing)."""
    global _config
    _config = None


def load_options(path: Union[str, Path]) -> ManifestOptions:
    """
    Load manifest options from a YAML file.

    A missing file yields default options. An empty file is treated
    the same way.

    Raises:
        OptionsFileError: If the file is not valid YAML, not a mapping,
            or contains invalid option values
    """
    path = Path(path)
    if not path.exists():
        return ManifestOptions()

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise OptionsFileError(path, f"invalid YAML: {e}") from e

    if data is None:
        return ManifestOptions()
    if not isinstance(data, dict):
        raise OptionsFileError(path, "expected a mapping of options")

    try:
        return ManifestOptions.model_validate(data)
    except ValidationError as e:
        raise OptionsFileError(path, str(e)) from e
