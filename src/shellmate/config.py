"""Configuration for shellmate.

Settings Loading Priority (highest to lowest):
    1. Constructor arguments
    2. Environment variables (SHELLMATE_* prefix, plus OPENAI_API_KEY)
    3. Project config (./.shellmate/settings.json)
    4. User config (~/.shellmate/settings.json)
    5. User config (~/.shellmate/config.yaml)
    6. .env file
    7. Default values

Usage:
    settings = get_settings()
    validate_settings(settings)
"""

from pathlib import Path
from typing import Tuple, Type
from urllib.parse import urlparse

from pydantic import field_validator
from pydantic_settings import (
    BaseSettings,
    JsonConfigSettingsSource,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

from shellmate.settings_mixins import (
    CLISettingsMixin,
    ProviderSettingsMixin,
    SessionSettingsMixin,
)

__all__ = [
    "CONFIG_DIR_NAME",
    "Settings",
    "SettingsValidationError",
    "get_settings",
    "set_settings",
    "reload_settings",
    "validate_settings",
    "user_config_dir",
]

CONFIG_DIR_NAME = ".shellmate"


def user_config_dir() -> Path:
    """Directory holding user-level configuration (~/.shellmate)."""
    return Path.home() / CONFIG_DIR_NAME


class Settings(ProviderSettingsMixin, SessionSettingsMixin, CLISettingsMixin, BaseSettings):
    """Runtime settings for shellmate.

    Mixins provide organized settings:
    - ProviderSettingsMixin: backend, model, hosts, API key
    - SessionSettingsMixin: timeouts, history cap, capture limits
    - CLISettingsMixin: logging
    """

    model_config = SettingsConfigDict(
        env_prefix="SHELLMATE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("ollama_host", "openai_host")
    @classmethod
    def validate_host(cls, v: str) -> str:
        """Require an absolute http(s) URL and drop any trailing slash."""
        value = v.strip()
        parsed = urlparse(value)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError(f"invalid host URL {v!r} (expected http:// or https://)")
        return value.rstrip("/")

    @field_validator("model")
    @classmethod
    def validate_model(cls, v: str) -> str:
        """Reject blank model names."""
        if not v.strip():
            raise ValueError("model cannot be empty")
        return v.strip()

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        """Layer JSON and YAML config files between env vars and .env.

        File sources are only included when the file exists.
        """
        sources: list[PydanticBaseSettingsSource] = [
            init_settings,
            env_settings,
        ]

        project_json = Path.cwd() / CONFIG_DIR_NAME / "settings.json"
        if project_json.is_file():
            sources.append(JsonConfigSettingsSource(settings_cls, json_file=project_json))

        user_json = user_config_dir() / "settings.json"
        if user_json.is_file():
            sources.append(JsonConfigSettingsSource(settings_cls, json_file=user_json))

        user_yaml = user_config_dir() / "config.yaml"
        if user_yaml.is_file():
            sources.append(YamlConfigSettingsSource(settings_cls, yaml_file=user_yaml))

        sources.append(dotenv_settings)

        return tuple(sources)


# Global settings instance holder
_settings_instance: Settings | None = None


def get_settings() -> Settings:
    """Get the process-wide settings instance, creating it on first access."""
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance


def set_settings(settings: Settings) -> None:
    """Replace the process-wide settings instance.

    Args:
        settings: Settings instance to use globally
    """
    global _settings_instance
    _settings_instance = settings


def reload_settings() -> Settings:
    """Discard the cached instance and load settings again.

    Returns:
        Fresh Settings instance
    """
    global _settings_instance
    _settings_instance = None
    return get_settings()


class SettingsValidationError(Exception):
    """Raised when settings validation fails."""

    pass


def validate_settings(settings: Settings) -> None:
    """Validate settings for runtime use.

    Performs checks that depend on the selected provider rather than on
    individual field values.

    Args:
        settings: Settings to validate

    Raises:
        SettingsValidationError: If validation fails
    """
    errors = []

    if settings.provider == "openai" and not (settings.openai_api_key or "").strip():
        errors.append("openai provider selected but no API key configured. Set OPENAI_API_KEY.")

    if errors:
        raise SettingsValidationError("\n".join(errors))
