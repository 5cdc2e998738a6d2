"""Configuration loader with 3-tier parameter precedence."""

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Optional

import yaml

from ..errors import MalformedDataError
from .defaults import (
    ChallengeConfig,
    LoggingParams,
    NotificationParams,
    StorageParams,
    TimeParams,
    get_default_config,
)

CONFIG_FILENAME = "challenge.yaml"

_SECTIONS = {
    "time": TimeParams,
    "storage": StorageParams,
    "notification": NotificationParams,
    "logging": LoggingParams,
}


@dataclass(frozen=True)
class ConfigLoader:
    """Manages configuration loading with 3-tier precedence."""

    config_dir: Path
    defaults: ChallengeConfig

    @classmethod
    def create(cls, config_dir: Optional[Path] = None) -> "ConfigLoader":
        """Create a ConfigLoader instance."""
        if config_dir is None:
            config_dir = Path(__file__).parent.parent.parent / "config"

        return cls(
            config_dir=Path(config_dir),
            defaults=get_default_config(),
        )

    def load_file_config(self) -> dict[str, Any]:
        """Load overrides from challenge.yaml, if present."""
        config_file = self.config_dir / CONFIG_FILENAME

        if not config_file.exists():
            return {}

        with open(config_file) as f:
            file_config = yaml.safe_load(f)

        if file_config is None:
            return {}
        if not isinstance(file_config, dict):
            raise MalformedDataError(
                f"{config_file} must contain a mapping",
                raw_data=str(file_config),
                expected_format="mapping",
            )
        return file_config

    def merge_config(self, overrides: Optional[dict[str, Any]] = None) -> dict[str, Any]:
        """
        Merge configuration with 3-tier precedence.

        Priority order:
        1. Explicit overrides (highest priority)
        2. challenge.yaml in the config directory
        3. Built-in defaults (lowest priority)
        """
        config = self._dataclass_to_dict(self.defaults)

        config = self._deep_merge(config, self.load_file_config())

        if overrides:
            config = self._deep_merge(config, overrides)

        return config

    def load(self, overrides: Optional[dict[str, Any]] = None) -> ChallengeConfig:
        """Merge all tiers and build the typed configuration."""
        return self.from_dict(self.merge_config(overrides))

    @staticmethod
    def from_dict(config: dict[str, Any]) -> ChallengeConfig:
        """Build a ChallengeConfig, ignoring unknown keys."""
        sections = {}
        for name, params_cls in _SECTIONS.items():
            section = config.get(name) or {}
            known = {f.name for f in fields(params_cls)}
            sections[name] = params_cls(**{k: v for k, v in section.items() if k in known})
        return ChallengeConfig(**sections)

    def _dataclass_to_dict(self, obj: Any) -> dict[str, Any]:
        """Convert nested dataclasses to dictionary."""
        if hasattr(obj, '__dataclass_fields__'):
            result = {}
            for field_name in obj.__dataclass_fields__:
                value = getattr(obj, field_name)
                if hasattr(value, '__dataclass_fields__'):
                    result[field_name] = self._dataclass_to_dict(value)
                else:
                    result[field_name] = value
            return result
        return obj  # type: ignore[no-any-return]

    def _deep_merge(self, base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
        """Deep merge two dictionaries."""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result
