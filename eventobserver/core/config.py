"""Configuration management for EventObserver."""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
import yaml

from eventobserver.core.exceptions import ConfigurationError

ENV_PREFIX = "EVENTOBSERVER_"


class ObserverConfig(BaseSettings):
    """
    Configuration for EventObserver instances.

    Can be loaded from:
    - Environment variables (prefix: EVENTOBSERVER_)
    - YAML file
    - Direct initialization

    Example:
        >>> config = ObserverConfig(id_cache_limit=500)
        >>> config = ObserverConfig.from_yaml("eventobserver.yaml")
        >>> config = ObserverConfig()
    """

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        extra="ignore",
        validate_default=True,
    )

    id_cache_limit: int = Field(
        default=1000,
        description="Maximum number of event ids remembered (<= 0 means unlimited)",
    )
    default_relay_flags: int = Field(
        default=3,
        ge=0,
        le=3,
        description="Relay direction used by bind() when none is given (0=none, 1=to, 2=from, 3=all)",
    )
    isolate_listener_errors: bool = Field(
        default=False,
        description="Log listener exceptions and keep dispatching instead of raising",
    )
    log_level: str = Field(
        default="WARNING",
        description="Log level applied by setup_logging()",
    )

    @field_validator("default_relay_flags", mode="before")
    @classmethod
    def validate_relay_flags(cls, v: object) -> object:
        """Accept flag names (e.g. 'to', 'ALL') as well as integers."""
        if isinstance(v, str) and not v.strip().isdigit():
            names = {"none": 0, "to": 1, "from": 2, "all": 3}
            try:
                return names[v.strip().lower()]
            except KeyError:
                raise ValueError(f"unknown relay flags: {v!r}") from None
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize log level name."""
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"invalid log level: {v!r}")
        return level

    @classmethod
    def find_config_yaml(cls) -> Path | None:
        """
        Search for eventobserver.yaml in standard locations.

        Search order:
        1. Current working directory
        2. User config directory (~/.config/eventobserver/)

        Returns:
            Path to the file if found, None otherwise
        """
        search_paths = [
            Path.cwd() / "eventobserver.yaml",
            Path.home() / ".config" / "eventobserver" / "eventobserver.yaml",
        ]

        for path in search_paths:
            if path.exists():
                return path

        return None

    @classmethod
    def from_yaml(cls, path: Path | str | None = None) -> ObserverConfig:
        """
        Load configuration from YAML file.

        Environment variables win over values found in the file.

        Args:
            path: Path to YAML configuration file. If None, searches standard locations.

        Returns:
            ObserverConfig instance

        Raises:
            FileNotFoundError: If no configuration file can be found
            ConfigurationError: If the file is not a mapping or holds invalid values
        """
        if path is None:
            path = cls.find_config_yaml()
            if path is None:
                raise FileNotFoundError(
                    "Config file not found. Searched:\n"
                    "  1. ./eventobserver.yaml\n"
                    "  2. ~/.config/eventobserver/eventobserver.yaml"
                )
        else:
            path = Path(path)
            if not path.exists():
                raise FileNotFoundError(f"Config file not found: {path}")

        with open(path, encoding="utf-8") as f:
            yaml_data = yaml.safe_load(f) or {}

        if not isinstance(yaml_data, dict):
            raise ConfigurationError(f"Config file must contain a mapping: {path}")

        bad_keys = [key for key in yaml_data if not isinstance(key, str)]
        if bad_keys:
            raise ConfigurationError(f"Config keys must be strings, got {bad_keys!r} in {path}")

        result_data = {
            key: value
            for key, value in yaml_data.items()
            if f"{ENV_PREFIX}{key.upper()}" not in os.environ
        }

        try:
            return cls(**result_data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration in {path}: {e}") from e

    def to_yaml(self, path: Path | str) -> None:
        """
        Save configuration to YAML file.

        Args:
            path: Path to save YAML configuration
        """
        path = Path(path)
        with open(path, "w", encoding="utf-8") as f:
            yaml.dump(
                self.model_dump(mode="json"),
                f,
                default_flow_style=False,
                sort_keys=False,
            )

    def __repr__(self) -> str:
        """String representation of config."""
        return (
            f"ObserverConfig(id_cache_limit={self.id_cache_limit}, "
            f"default_relay_flags={self.default_relay_flags})"
        )
