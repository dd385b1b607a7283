"""Configuration management.

Loads from TOML config files + environment variables.
Uses pydantic-settings for validation; environment variables take
precedence over the file.
"""

from __future__ import annotations

import os
from contextvars import ContextVar
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError
from pydantic.fields import FieldInfo
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from .errors import ConfigError


# ---------------------------------------------------------------------------
# Sub-configs
# ---------------------------------------------------------------------------

class StorageConfig(BaseModel):
    snapshot_path: str = "data/trade_journal.json"


class AnalysisConfig(BaseModel):
    enabled: bool = True
    api_key_env: str = "GEMINI_API_KEY"  # Name of env var holding the API key
    model: str = "gemini-2.5-flash"
    base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    timeout_seconds: float = 120.0

    @property
    def api_key(self) -> str:
        return os.environ.get(self.api_key_env, "")


class ObservabilityConfig(BaseModel):
    log_level: str = "WARNING"
    log_format: str = "console"  # "json" or "console"


# ---------------------------------------------------------------------------
# Top-level settings
# ---------------------------------------------------------------------------

# Values read from the TOML file for the settings build in progress.
_file_values: ContextVar[dict[str, Any]] = ContextVar("file_values", default={})


class TomlValuesSource(PydanticBaseSettingsSource):
    """Settings source for values already parsed from a TOML file."""

    def __init__(self, settings_cls: type[BaseSettings], values: dict[str, Any]) -> None:
        super().__init__(settings_cls)
        self._values = values

    def get_field_value(self, field: FieldInfo, field_name: str) -> tuple[Any, str, bool]:
        return self._values.get(field_name), field_name, False

    def __call__(self) -> dict[str, Any]:
        return dict(self._values)


class Settings(BaseSettings):
    """Top-level application settings.

    Precedence, highest first: explicit overrides, environment variables,
    the TOML file, then the defaults below.
    """

    storage: StorageConfig = Field(default_factory=StorageConfig)
    analysis: AnalysisConfig = Field(default_factory=AnalysisConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)

    model_config = {"env_prefix": "TRADE_JOURNAL_", "env_nested_delimiter": "__"}

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            TomlValuesSource(settings_cls, _file_values.get()),
            dotenv_settings,
            file_secret_settings,
        )


def load_settings(
    config_path: str | Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> Settings:
    """Load settings from TOML file + env vars.

    A missing config file is not an error; the defaults apply.  Nested
    sections are merged key by key across file, env and overrides.

    Args:
        config_path: Path to TOML config file (optional).
        overrides: Dict of overrides to apply on top.

    Raises:
        ConfigError: the file exists but is not valid TOML, or the merged
            values fail validation.
    """
    data: dict[str, Any] = {}

    if config_path:
        path = Path(config_path)
        if path.exists():
            import tomli

            try:
                with open(path, "rb") as f:
                    data = tomli.load(f)
            except (OSError, tomli.TOMLDecodeError) as exc:
                raise ConfigError(f"Cannot read config {path}: {exc}") from exc

    token = _file_values.set(data)
    try:
        return Settings(**(overrides or {}))
    except ValidationError as exc:
        raise ConfigError(str(exc)) from exc
    finally:
        _file_values.reset(token)
