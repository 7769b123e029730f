"""Settings mixins grouping shellmate configuration by concern.

ProviderSettingsMixin: which model backend to talk to and how.
SessionSettingsMixin: turn engine limits (history, timeouts, capture size).
CLISettingsMixin: logging output.

These are mixins, not BaseSettings subclasses, so config.py can compose
them into a single Settings class without MRO issues.
"""

from typing import Literal

from pydantic import AliasChoices, Field


class ProviderSettingsMixin:
    """Settings for the model backend."""

    provider: Literal["ollama", "openai"] = Field(
        default="ollama",
        title="Provider",
        description="Model backend to use",
    )
    model: str = Field(
        default="llama3.2:latest",
        title="Model",
        description="Model name passed to the backend",
    )
    ollama_host: str = Field(
        default="http://localhost:11434",
        title="Ollama Host",
        description="Base URL of the Ollama server",
    )
    openai_host: str = Field(
        default="https://api.openai.com/v1",
        title="OpenAI Host",
        description="Base URL of an OpenAI-compatible API",
    )

    # Never written to settings files; read from the conventional env var
    openai_api_key: str | None = Field(
        default=None,
        description="API key for the OpenAI-compatible backend",
        validation_alias=AliasChoices("openai_api_key", "OPENAI_API_KEY"),
    )


class SessionSettingsMixin:
    """Limits applied by the turn engine and the environment gatherer."""

    chat_timeout: float = Field(
        default=120.0,
        gt=0,
        title="Chat Timeout",
        description="Deadline in seconds for one provider call in chat mode",
    )
    query_timeout: float = Field(
        default=120.0,
        gt=0,
        title="Query Timeout",
        description="Deadline in seconds for the provider call in one-shot mode",
    )
    max_history: int = Field(
        default=50,
        gt=0,
        title="Max History",
        description="Maximum number of conversation messages kept in a chat session",
    )
    env_probe_timeout: float = Field(
        default=2.0,
        gt=0,
        title="Environment Probe Timeout",
        description="Timeout in seconds for each environment probe (git, etc.)",
    )
    max_dir_entries: int = Field(
        default=50,
        gt=0,
        title="Max Directory Entries",
        description="Directory entries included in the model context",
    )
    max_git_log_lines: int = Field(
        default=5,
        gt=0,
        title="Max Git Log Lines",
        description="Recent commits included in the model context",
    )
    max_output_bytes: int = Field(
        default=8192,
        gt=0,
        title="Max Output Bytes",
        description="Captured command output kept for conversation context",
    )


class CLISettingsMixin:
    """Settings for CLI output."""

    log_level: Literal["debug", "info", "warning", "error"] = Field(
        default="warning",
        title="Log Level",
        description="Logging verbosity level",
    )
    log_format: Literal["console", "json"] = Field(
        default="console",
        title="Log Format",
        description="Log output format (console for dev, json for production)",
    )
