from __future__ import annotations

"""Configuration utilities for wavebase.

This module defines a hierarchical configuration schema using Pydantic models.
The :class:`Settings` container groups the specialised sub-sections used by
the sequence container, the transformers and the command line interface.
Instances can be populated from environment variables or from YAML/JSON files
with matching nested keys.
"""

import json
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic_settings.sources import EnvSettingsSource

try:  # pragma: no cover - optional dependency
    import yaml  # type: ignore
except Exception:  # pragma: no cover
    yaml = None

from .utils.logging import DEFAULT_FORMAT


class SectionModel(BaseModel):
    """Base model for configuration subsections that ignores unknown fields."""

    model_config = ConfigDict(extra="ignore", validate_assignment=True)


# ---------------------------------------------------------------------------
# Settings schema
# ---------------------------------------------------------------------------


class SequenceSettings(SectionModel):
    """Sampling metadata attached to raw buffers."""

    sampling_frequency: float = 1.0
    time_offset: float = 0.0

    @field_validator("sampling_frequency")
    @classmethod
    def _positive_frequency(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("sampling_frequency must be positive")
        return value


class SmootherSettings(SectionModel):
    """Parameters of the exponential envelope smoother."""

    alpha: float = 0.5

    @field_validator("alpha")
    @classmethod
    def _alpha_range(cls, value: float) -> float:
        if not 0.0 < value <= 1.0:
            raise ValueError("alpha must lie in (0, 1]")
        return value


class FitSettings(SectionModel):
    """Parameters controlling the time-offset least-squares fit."""

    sigma: float = 1.0
    initial_offset: float = 0.0
    xtol: float = 1e-8
    ftol: float = 1e-8
    max_nfev: Optional[int] = None

    @field_validator("sigma", "xtol", "ftol")
    @classmethod
    def _positive(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("value must be positive")
        return value


class LoggingSettings(SectionModel):
    """Logger level and format used by the command line interface."""

    level: str = "INFO"
    format: str = DEFAULT_FORMAT

    @field_validator("level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        value = value.upper()
        if value not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown logging level: {value}")
        return value


class Settings(BaseSettings):
    """Container for all runtime configuration sections."""

    sequence: SequenceSettings = Field(default_factory=SequenceSettings)
    smoother: SmootherSettings = Field(default_factory=SmootherSettings)
    fit: FitSettings = Field(default_factory=FitSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    model_config = SettingsConfigDict(
        env_prefix="WAVEBASE_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from ``WAVEBASE_*`` environment variables."""

        return cls()

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        class LegacyEnvSettingsSource(EnvSettingsSource):
            def decode_complex_value(self, field_name, target_field, value):  # type: ignore[override]
                try:
                    return super().decode_complex_value(field_name, target_field, value)
                except json.JSONDecodeError:
                    return value

        env_settings.__class__ = LegacyEnvSettingsSource
        return init_settings, env_settings, dotenv_settings, file_secret_settings


# ---------------------------------------------------------------------------
# Loading utilities
# ---------------------------------------------------------------------------


def load_settings(path: str | Path) -> Settings:
    """Load settings from a JSON or YAML file."""

    p = Path(path)
    text = p.read_text()
    if p.suffix.lower() in {".yaml", ".yml"}:
        if yaml is None:
            raise RuntimeError("PyYAML is required to load YAML files")
        data: Any = yaml.safe_load(text) or {}
    else:
        data = json.loads(text)
    if not isinstance(data, dict):
        raise TypeError("Configuration file must define a mapping")
    return Settings.model_validate(data)
