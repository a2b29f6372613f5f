import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field, PrivateAttr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from vellum.constants import (
    VALID_LOG_LEVELS,
    VELLUM_DEFAULT_FILTERS_DIR,
    VELLUM_DEFAULT_LOG_LEVEL,
    VELLUM_DEFAULT_SETTINGS_FILE,
    VELLUM_SETTINGS_ENV_PREFIX,
    VELLUM_SETTINGS_ENV_VAR,
)
from vellum.exceptions import SettingsError


class VellumSettings(BaseSettings):
    """
    Vellum settings management using Pydantic.

    Settings are loaded with the following priority (highest to lowest):
    1. Values from the settings YAML file and programmatic overrides
    2. Environment variables (prefixed with VELLUM_SETTINGS_)
    3. Default values defined in the model

    Environment variable examples:
    - VELLUM_SETTINGS_LOCAL_FILTERS=["filters", "more_filters"]
    - VELLUM_SETTINGS_AUTOESCAPE=false
    - VELLUM_SETTINGS_LOG_LEVEL=DEBUG
    """

    model_config = SettingsConfigDict(
        env_prefix=VELLUM_SETTINGS_ENV_PREFIX,
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    local_filters: list[str] = Field(
        default=[VELLUM_DEFAULT_FILTERS_DIR],
        description="List of directories containing custom filter functions",
    )
    imported_packages: list[str] = Field(
        default_factory=list, description="List of Python modules whose public functions become filters"
    )
    filters: dict[str, str] = Field(
        default_factory=dict, description="Mapping of filter name to callback import string"
    )
    autoescape: bool = Field(default=True, description="Whether templates autoescape their output")
    strict_undefined: bool = Field(default=True, description="Whether undefined template variables raise")
    log_level: str = Field(default=VELLUM_DEFAULT_LOG_LEVEL, description="Logging level")
    log_dir: str | None = Field(default=None, description="Directory for log files; no file logging if unset")

    _base_dir: Path | None = PrivateAttr(default=None)
    _settings_file: str | None = PrivateAttr(default=None)

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: Any) -> str:
        """Normalize the log level name and reject unknown ones."""
        if not isinstance(v, str) or v.upper() not in VALID_LOG_LEVELS:
            raise ValueError(f"Invalid log level: {v}. Must be one of: {', '.join(VALID_LOG_LEVELS)}")
        return v.upper()

    @field_validator("filters", mode="before")
    @classmethod
    def validate_filters(cls, v: Any) -> dict[str, str]:
        """Lowercase filter names; values must be import strings."""
        if not v:
            return {}
        if not isinstance(v, dict):
            raise ValueError("filters must be a mapping of name to callback import string")
        return {str(name).lower(): callback for name, callback in v.items()}

    def resolve_relative_paths(self) -> "VellumSettings":
        """Resolve relative directories against the base directory."""
        base_dir = self.base_dir
        if not base_dir:
            return self

        self.local_filters = [
            str(path) if (path := Path(dir_path)).is_absolute() else str(base_dir / path)
            for dir_path in self.local_filters
        ]
        if self.log_dir and not Path(self.log_dir).is_absolute():
            self.log_dir = str(base_dir / self.log_dir)

        return self

    @classmethod
    def load(
        cls, settings_file: str | None = None, base_dir: Path | None = None, **overrides: Any
    ) -> "VellumSettings":
        """
        Load settings from a YAML file with automatic resolution and overrides.

        Settings file resolution priority (highest to lowest):
        1. Explicit settings_file parameter
        2. VELLUM_SETTINGS environment variable
        3. Default "vellum.yaml" in current directory

        Args:
            settings_file: Path to settings YAML file.
            base_dir: Base directory for resolving relative paths. If None, uses the
                     directory containing the resolved settings file.
            **overrides: Additional settings to override YAML values.

        Returns:
            VellumSettings instance with all paths resolved.

        Raises:
            SettingsError: If settings file not found or contains invalid data.
        """
        resolved_file = settings_file or os.getenv(VELLUM_SETTINGS_ENV_VAR) or VELLUM_DEFAULT_SETTINGS_FILE

        settings_path = Path(resolved_file).resolve()

        if not settings_path.exists():
            raise SettingsError(
                f"Settings file not found: {resolved_file}\n"
                f"Resolved to absolute path: {settings_path}\n"
                f"Current working directory: {Path.cwd()}"
            )

        if not base_dir:
            base_dir = settings_path.parent

        try:
            with settings_path.open() as f:
                yaml_data = yaml.safe_load(f) or {}
        except Exception as e:
            raise SettingsError(f"Failed to load settings from {resolved_file}: {e}") from e

        if not isinstance(yaml_data, dict):
            raise SettingsError(
                f"Settings file must contain a YAML dictionary, got {type(yaml_data).__name__}"
            )

        instance = cls(**{**yaml_data, **overrides})
        instance._base_dir = base_dir
        instance._settings_file = str(settings_path)

        return instance.resolve_relative_paths()

    @property
    def as_dict(self) -> dict[str, Any]:
        """Get settings as a dictionary."""
        return self.model_dump()

    @property
    def base_dir(self) -> Path | None:
        """Get the base directory for resolving relative paths if available."""
        if self._base_dir:
            return self._base_dir
        if self._settings_file:
            return Path(self._settings_file).parent
        return None

    @property
    def settings_file(self) -> str | None:
        """Path of the YAML file these settings were loaded from, if any."""
        return self._settings_file

    def __str__(self) -> str:
        return str(self.as_dict)
