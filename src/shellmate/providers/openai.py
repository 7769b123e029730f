"""OpenAI-compatible Chat Completions backend."""

from __future__ import annotations

import json

import httpx

from shellmate.logging import Loggers
from shellmate.providers.base import (
    ChatRequest,
    ChatResponse,
    Message,
    Provider,
    ProviderConfigError,
    ProviderError,
    Usage,
    error_excerpt,
    is_structured_json,
    token_count,
    trim_to_latest_turn,
)
from shellmate.providers.http import post_json

logger = Loggers.providers()

CONTEXT_TRIMMED_WARNING = "conversation context was trimmed to fit the model's context window"

_CONTEXT_LENGTH_MARKERS = ("context_length_exceeded", "maximum context length")


class ContextLengthExceededError(ProviderError):
    """The backend rejected the request because the conversation is too long."""


class OpenAIProvider(Provider):
    """Provider for the OpenAI Chat Completions API and compatible servers.

    JSON mode is requested with ``response_format={"type": "json_object"}``.
    When the backend reports that the context window is exceeded, the
    request is retried once with only the system prompt and the latest
    user message, and the response carries a warning saying so.
    """

    name = "openai"

    def __init__(
        self,
        host: str,
        model: str,
        api_key: str | None,
        client: httpx.Client | None = None,
    ):
        super().__init__(model)
        if not host.strip():
            raise ProviderConfigError("openai host cannot be empty")
        if not (api_key or "").strip():
            raise ProviderConfigError("openai api key is required (set OPENAI_API_KEY)")
        self.host = host.strip().rstrip("/")
        self._api_key = api_key
        self._client = client or httpx.Client()

    def chat(self, request: ChatRequest) -> ChatResponse:
        try:
            return self._send(request, request.messages)
        except ContextLengthExceededError:
            trimmed = trim_to_latest_turn(request.messages)
            if len(trimmed) >= len(request.messages):
                raise
            logger.warning(
                "provider_context_trimmed",
                provider=self.name,
                messages_before=len(request.messages),
                messages_after=len(trimmed),
            )
            response = self._send(request, trimmed)
            response.warning = CONTEXT_TRIMMED_WARNING
            return response

    def _send(self, request: ChatRequest, messages: list[Message]) -> ChatResponse:
        model = self.resolve_model(request)
        body: dict[str, object] = {
            "model": model,
            "messages": [m.to_dict() for m in messages],
        }
        if request.expect_json:
            body["response_format"] = {"type": "json_object"}

        logger.debug(
            "provider_request_prepared",
            provider=self.name,
            model=model,
            messages=len(messages),
        )

        reply = post_json(
            self._client,
            self.name,
            f"{self.host}/chat/completions",
            body,
            timeout=request.timeout,
            headers={"Authorization": f"Bearer {self._api_key}"},
        )

        if reply.status_code >= 400:
            detail = error_excerpt(reply.text)
            logger.error(
                "provider_request_failed",
                provider=self.name,
                status=reply.status_code,
                detail=detail,
            )
            if any(marker in detail.lower() for marker in _CONTEXT_LENGTH_MARKERS):
                raise ContextLengthExceededError(f"openai chat failed: {detail}")
            raise ProviderError(f"openai chat failed ({reply.status_code}): {detail}")

        try:
            decoded = json.loads(reply.text)
            choice = decoded["choices"][0]
            content = choice["message"]["content"] or ""
            if not isinstance(content, str):
                raise TypeError(f"message content is {type(content).__name__}, not a string")
            raw_usage = decoded.get("usage") or {}
            if not isinstance(raw_usage, dict):
                raise TypeError(f"usage is {type(raw_usage).__name__}, not an object")
            usage = Usage(
                input_tokens=token_count(raw_usage.get("prompt_tokens")),
                output_tokens=token_count(raw_usage.get("completion_tokens")),
                total_tokens=token_count(raw_usage.get("total_tokens")),
            )
            finish_reason = choice.get("finish_reason") or ""
        except (ValueError, KeyError, IndexError, TypeError, AttributeError) as e:
            raise ProviderError(f"decoding openai chat response: {e}") from e

        text = content.strip()
        if not text:
            raise ProviderError("empty response from model")

        if usage.total_tokens == 0:
            usage.total_tokens = usage.input_tokens + usage.output_tokens

        return ChatResponse(
            text=text,
            raw=reply.text,
            structured=is_structured_json(request.expect_json, text),
            finish_reason=str(finish_reason),
            usage=usage,
        )
