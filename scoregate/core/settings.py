"""scoregate runtime settings.

Settings are loaded from the following sources (highest priority first):
1. Explicit overrides (CLI options)
2. Environment variables (with SCOREGATE_ prefix)
3. Settings file (scoregate.yaml / scoregate.yml, searched upwards from cwd)
4. Default values

Pipelines usually hand the quality gates over through the environment:
    SCOREGATE_QUALITY_GATES='{"qualityGates": [{"metric": "line", "threshold": 80}]}'

or name another variable holding them:
    SCOREGATE_QUALITY_GATES_ENV=QUALITY_GATES
"""

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

SETTINGS_FILE_NAMES = ["scoregate.yaml", "scoregate.yml"]


def _find_settings_file(start_dir: Path | None = None) -> Path | None:
    """Find a settings file in the given directory or one of its parents."""
    search_dir = start_dir or Path.cwd()

    for _ in range(10):
        for filename in SETTINGS_FILE_NAMES:
            settings_path = search_dir / filename
            if settings_path.exists():
                return settings_path

        parent = search_dir.parent
        if parent == search_dir:
            break
        search_dir = parent

    return None


def _load_yaml_settings(settings_path: Path) -> dict[str, Any]:
    """Load settings from a YAML file; unreadable files yield no settings."""
    try:
        with open(settings_path) as f:
            data = yaml.safe_load(f) or {}
            return data if isinstance(data, dict) else {}
    except yaml.YAMLError as e:
        logger.warning("Failed to parse settings file %s: %s", settings_path, e)
        return {}
    except OSError as e:
        logger.warning("Failed to read settings file %s: %s", settings_path, e)
        return {}


class ScoreGateSettings(BaseSettings):
    """Settings of a grading run."""

    model_config = SettingsConfigDict(
        env_prefix="SCOREGATE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        validate_default=True,
    )

    log_level: str = Field(
        default="INFO",
        description="Application log level",
    )
    log_json: bool | None = Field(
        default=None,
        description="Render logs as JSON; auto-detected from the terminal if unset",
    )
    config: str | None = Field(
        default=None,
        description="Grading configuration as JSON document",
    )
    quality_gates: str | None = Field(
        default=None,
        description="Quality gate configuration as JSON document",
    )
    quality_gates_env: str | None = Field(
        default=None,
        description="Name of an environment variable holding the quality gates",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a valid Python logging level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_v = v.upper()
        if upper_v not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return upper_v

    @model_validator(mode="before")
    @classmethod
    def load_from_settings_file(cls, data: Any) -> Any:
        """Merge values of a settings file below the explicitly provided ones."""
        if not isinstance(data, dict):
            return data
        if data.pop("_skip_file_loading", False):
            return data

        settings_path = _find_settings_file()
        if settings_path:
            file_settings = _load_yaml_settings(settings_path)
            if file_settings:
                logger.debug("Loaded settings from %s", settings_path)
                return {**file_settings, **data}
        return data

    def resolve_quality_gates(self) -> str | None:
        """Return the quality gate JSON document of this run, if any.

        A variable named by ``quality_gates_env`` takes precedence over
        ``quality_gates``.
        """
        if self.quality_gates_env:
            value = os.environ.get(self.quality_gates_env)
            if value and value.strip():
                return value
            logger.info(
                "Environment variable '%s' not found or empty", self.quality_gates_env
            )
        if self.quality_gates and self.quality_gates.strip():
            return self.quality_gates
        return None


def get_settings(
    settings_file: Path | None = None,
    **overrides: Any,
) -> ScoreGateSettings:
    """Create a settings instance.

    Args:
        settings_file: Optional explicit path to a YAML settings file.
        **overrides: Explicit setting overrides.

    Returns:
        Configured ScoreGateSettings instance.
    """
    if settings_file and settings_file.exists():
        file_settings = _load_yaml_settings(settings_file)
        return ScoreGateSettings(**{**file_settings, **overrides})

    return ScoreGateSettings(**overrides)


@lru_cache
def get_cached_settings() -> ScoreGateSettings:
    """Get the cached settings instance.

    The cache can be cleared with ``get_cached_settings.cache_clear()``.
    """
    return get_settings()
