"""Provider interface shared by all model backends.

Messages and responses are plain dataclasses so the turn engine never
imports backend-specific types.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Literal

Role = Literal["system", "user", "assistant"]

DEFAULT_CHAT_TIMEOUT = 120.0


class ProviderError(Exception):
    """A model call failed (transport, HTTP status, empty or undecodable reply)."""


class ProviderTimeoutError(ProviderError):
    """A model call exceeded its deadline."""


class ProviderConfigError(ProviderError):
    """A provider could not be built from the given configuration."""


@dataclass(frozen=True)
class Message:
    """A single conversation message."""

    role: Role
    content: str

    def to_dict(self) -> dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass
class ChatRequest:
    """A normalized model request.

    Attributes:
        messages: Conversation, system message first.
        model: Model override; empty means the provider default.
        expect_json: Ask the backend for JSON-mode output.
        timeout: Deadline in seconds for the whole call.
    """

    messages: list[Message]
    model: str | None = None
    expect_json: bool = True
    timeout: float = DEFAULT_CHAT_TIMEOUT


@dataclass
class Usage:
    """Token usage metadata, when the backend reports it."""

    input_tokens: int = 0
    output_tokens: int = 0
    total_tokens: int = 0


@dataclass
class ChatResponse:
    """A normalized model response.

    Attributes:
        text: Assistant content, used for display and reply parsing.
        raw: Backend-native payload for debugging.
        structured: True when JSON was requested and text decodes as JSON.
        finish_reason: Backend stop reason, when available.
        usage: Token usage, when available.
        warning: Provider-level notice (e.g. context was trimmed). Shown
            separately from text so it never corrupts reply parsing.
    """

    text: str
    raw: str = ""
    structured: bool = False
    finish_reason: str = ""
    usage: Usage = field(default_factory=Usage)
    warning: str = ""


class Provider(ABC):
    """Sends conversations to a model backend."""

    name: str = ""

    def __init__(self, model: str):
        if not model.strip():
            raise ProviderConfigError("model cannot be empty")
        self.model = model

    @abstractmethod
    def chat(self, request: ChatRequest) -> ChatResponse:
        """Send a request and return the normalized response.

        Raises:
            ProviderError: On any failure, including timeouts.
        """
        ...

    def resolve_model(self, request: ChatRequest) -> str:
        """The request's model override, or the provider default."""
        if request.model and request.model.strip():
            return request.model.strip()
        return self.model


def is_structured_json(expect_json: bool, text: str) -> bool:
    """Whether text decodes as JSON, only meaningful when JSON was requested."""
    if not expect_json:
        return False
    try:
        json.loads(text)
    except ValueError:
        return False
    return True


def trim_to_latest_turn(messages: list[Message]) -> list[Message]:
    """Keep only system messages and the most recent user message."""
    system = [m for m in messages if m.role == "system"]
    latest_user = next((m for m in reversed(messages) if m.role == "user"), None)
    return system + ([latest_user] if latest_user is not None else [])


def error_excerpt(body: str, limit: int = 512) -> str:
    """Single-line, length-limited excerpt of an error body."""
    text = " ".join(body.split())
    if not text:
        return "unknown error"
    if len(text) > limit:
        return f"{text[:limit]}..."
    return text


def token_count(value: object) -> int:
    """Token counter from a decoded reply; missing counts are zero.

    Raises:
        TypeError: If the value is present but not an integer.
    """
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"token count must be an integer, got {type(value).__name__}")
    return value
