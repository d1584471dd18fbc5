"""Configuration for the quality gate using pydantic-settings."""

from pathlib import Path
from typing import Any

import yaml  # type: ignore[import-untyped]
from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """Raised when the gate is misconfigured; fatal before any file is processed."""

    pass


class RulesSettings(BaseSettings):
    """Which rules run and with which parameters."""

    model_config = SettingsConfigDict(
        env_prefix="TSGATE_RULES_",
    )

    enabled: list[str] = Field(
        default_factory=list,
        description="Rule names to run (empty = every built-in rule)",
    )
    disabled: list[str] = Field(
        default_factory=list,
        description="Rule names to skip",
    )
    params: dict[str, dict[str, Any]] = Field(
        default_factory=dict,
        description="Rule-specific parameters keyed by rule name",
    )


class SuppressionSettings(BaseSettings):
    """Settings for inline suppression directives."""

    model_config = SettingsConfigDict(
        env_prefix="TSGATE_SUPPRESSION_",
    )

    marker: str = Field(
        default="@checkstyle",
        min_length=1,
        description="Keyword that starts a suppression directive inside a comment",
    )


class GateSettings(BaseSettings):
    """Global settings for the entire run."""

    model_config = SettingsConfigDict(
        env_prefix="TSGATE_",
    )

    rules: RulesSettings = Field(default_factory=RulesSettings)
    suppression: SuppressionSettings = Field(default_factory=SuppressionSettings)
    jobs: int = Field(
        default=1,
        ge=1,
        description="Number of files analysed concurrently",
    )
    ignore_patterns: list[str] = Field(
        default_factory=list,
        description="Glob patterns of files to skip",
    )
    ignore_file_patterns: list[str] = Field(
        default_factory=lambda: ["**/.*ignore"],
        description="Glob patterns used to find ignore files",
    )


def load_settings_file(file_path: Path) -> GateSettings:
    """Load settings from a YAML file.

    The top-level keys mirror ``GateSettings``::

        jobs: 4
        rules:
          disabled: [NonStaticMethod]
          params:
            CurlyBracketsStructure: {indent: 2}
        suppression:
          marker: "@checkstyle"

    Raises:
        ConfigurationError: If the file is missing, not YAML, or has invalid values
    """
    if not file_path.exists():
        raise ConfigurationError(f"Configuration file not found: {file_path}")

    with open(file_path, "r") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {file_path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration file {file_path} must contain a mapping")

    try:
        return GateSettings.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration in {file_path}: {e}") from e


# Global settings instance that can be accessed throughout the application
_settings: GateSettings | None = None


def get_settings() -> GateSettings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = GateSettings()
    return _settings


def set_settings(settings: GateSettings) -> None:
    """Set the global settings instance."""
    global _settings
    _settings = settings
