"""Tests for configuration module."""

import json
import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from shellmate.config import (
    Settings,
    SettingsValidationError,
    get_settings,
    reload_settings,
    set_settings,
    user_config_dir,
    validate_settings,
)
from tests.conftest import MockContext


class TestSettings:
    """Tests for Settings defaults and validation."""

    def test_default_values(self, mock_context):
        """Test default settings values."""
        settings = Settings()

        assert settings.provider == "ollama"
        assert settings.model == "llama3.2:latest"
        assert settings.ollama_host == "http://localhost:11434"
        assert settings.openai_host == "https://api.openai.com/v1"
        assert settings.openai_api_key is None
        assert settings.chat_timeout == 120.0
        assert settings.query_timeout == 120.0
        assert settings.max_history == 50
        assert settings.env_probe_timeout == 2.0
        assert settings.max_dir_entries == 50
        assert settings.max_git_log_lines == 5
        assert settings.max_output_bytes == 8192
        assert settings.log_level == "warning"
        assert settings.log_format == "console"

    def test_host_trailing_slash_removed(self, mock_context):
        """Test host normalization."""
        settings = Settings(ollama_host="http://gpu-box:11434/")

        assert settings.ollama_host == "http://gpu-box:11434"

    @pytest.mark.parametrize("host", ["localhost:11434", "ftp://example.com", "http://", ""])
    def test_invalid_host(self, mock_context, host):
        """Test that hosts must be absolute http(s) URLs."""
        with pytest.raises(ValidationError):
            Settings(ollama_host=host)

    def test_blank_model(self, mock_context):
        """Test that the model cannot be blank."""
        with pytest.raises(ValidationError):
            Settings(model="   ")

    @pytest.mark.parametrize(
        "field", ["chat_timeout", "max_history", "max_dir_entries", "max_output_bytes"]
    )
    def test_limits_must_be_positive(self, mock_context, field):
        """Test that numeric limits reject zero."""
        with pytest.raises(ValidationError):
            Settings(**{field: 0})

    def test_unknown_provider(self, mock_context):
        """Test that only known providers are accepted."""
        with pytest.raises(ValidationError):
            Settings(provider="gemini")


class TestSettingsSources:
    """Tests for layered settings sources."""

    def test_env_prefix(self, mock_context):
        """Test SHELLMATE_* environment variables."""
        with patch.dict(os.environ, {"SHELLMATE_MODEL": "mistral", "SHELLMATE_MAX_HISTORY": "10"}):
            settings = Settings()

        assert settings.model == "mistral"
        assert settings.max_history == 10

    def test_openai_key_unprefixed(self, mock_context):
        """Test that OPENAI_API_KEY is read without the prefix."""
        with patch.dict(os.environ, {"OPENAI_API_KEY": "sk-env"}):
            settings = Settings()

        assert settings.openai_api_key == "sk-env"

    def test_project_json(self, mock_context):
        """Test ./.shellmate/settings.json."""
        config_dir = mock_context.project_dir / ".shellmate"
        config_dir.mkdir()
        (config_dir / "settings.json").write_text(json.dumps({"model": "project-model"}))

        assert Settings().model == "project-model"

    def test_user_yaml(self, mock_context):
        """Test ~/.shellmate/config.yaml."""
        user_config_dir().mkdir()
        (user_config_dir() / "config.yaml").write_text("provider: openai\nchat_timeout: 30\n")

        settings = Settings()

        assert settings.provider == "openai"
        assert settings.chat_timeout == 30.0

    def test_priority(self, mock_context):
        """Test init > env > project JSON > user JSON > user YAML."""
        user_config_dir().mkdir()
        (user_config_dir() / "config.yaml").write_text("model: yaml-model\nmax_history: 7\n")
        (user_config_dir() / "settings.json").write_text(
            json.dumps({"model": "user-model", "max_history": 8, "max_dir_entries": 9})
        )
        project_dir = mock_context.project_dir / ".shellmate"
        project_dir.mkdir()
        (project_dir / "settings.json").write_text(json.dumps({"model": "project-model"}))

        settings = Settings()
        assert settings.model == "project-model"
        assert settings.max_dir_entries == 9

        with patch.dict(os.environ, {"SHELLMATE_MODEL": "env-model"}):
            assert Settings().model == "env-model"
            assert Settings(model="init-model").model == "init-model"

    def test_dotenv(self, mock_context):
        """Test that .env in the working directory is read last."""
        (mock_context.project_dir / ".env").write_text("SHELLMATE_MAX_OUTPUT_BYTES=1024\n")

        assert Settings().max_output_bytes == 1024

    def test_user_config_dir(self, mock_context):
        """Test that user config lives under HOME."""
        assert user_config_dir() == mock_context.home_dir / ".shellmate"


class TestValidateSettings:
    """Tests for validate_settings()."""

    def test_ollama_needs_no_key(self, mock_context):
        """Test that the default setup validates."""
        validate_settings(Settings())

    def test_openai_requires_key(self, mock_context):
        """Test that the OpenAI backend needs an API key."""
        with pytest.raises(SettingsValidationError, match="OPENAI_API_KEY"):
            validate_settings(Settings(provider="openai"))

    def test_openai_with_key(self, mock_context):
        """Test that a configured key passes."""
        validate_settings(Settings(provider="openai", openai_api_key="sk-test"))


class TestGlobalSettings:
    """Tests for the process-wide settings instance."""

    def test_set_and_get(self):
        """Test that set_settings replaces the global instance."""
        with MockContext(model="ctx-model") as ctx:
            assert get_settings() is ctx.settings
            assert get_settings().model == "ctx-model"

            replacement = Settings(model="other")
            set_settings(replacement)
            assert get_settings() is replacement

    def test_reload(self):
        """Test that reload_settings builds a fresh instance."""
        with MockContext(model="ctx-model") as ctx:
            fresh = reload_settings()

            assert fresh is not ctx.settings
            assert fresh.model == "llama3.2:latest"
