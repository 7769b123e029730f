"""Ollama backend using the local /api/chat endpoint."""

from __future__ import annotations

import json

import httpx

from shellmate.logging import Loggers
from shellmate.providers.base import (
    ChatRequest,
    ChatResponse,
    Provider,
    ProviderConfigError,
    ProviderError,
    Usage,
    error_excerpt,
    is_structured_json,
    token_count,
)
from shellmate.providers.http import post_json

logger = Loggers.providers()


class OllamaProvider(Provider):
    """Provider for a local Ollama server."""

    name = "ollama"

    def __init__(self, host: str, model: str, client: httpx.Client | None = None):
        super().__init__(model)
        if not host.strip():
            raise ProviderConfigError("ollama host cannot be empty")
        self.host = host.strip().rstrip("/")
        self._client = client or httpx.Client()

    def chat(self, request: ChatRequest) -> ChatResponse:
        model = self.resolve_model(request)
        body: dict[str, object] = {
            "model": model,
            "messages": [m.to_dict() for m in request.messages],
            "stream": False,
        }
        if request.expect_json:
            body["format"] = "json"

        reply = post_json(
            self._client, self.name, f"{self.host}/api/chat", body, timeout=request.timeout
        )

        if reply.status_code >= 400:
            detail = error_excerpt(reply.text)
            logger.error(
                "provider_request_failed",
                provider=self.name,
                status=reply.status_code,
                detail=detail,
            )
            raise ProviderError(f"ollama chat failed ({reply.status_code}): {detail}")

        try:
            decoded = json.loads(reply.text)
            content = decoded["message"]["content"] or ""
            if not isinstance(content, str):
                raise TypeError(f"message content is {type(content).__name__}, not a string")
            input_tokens = token_count(decoded.get("prompt_eval_count"))
            output_tokens = token_count(decoded.get("eval_count"))
            finish_reason = decoded.get("done_reason") or ""
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            raise ProviderError(f"decoding ollama chat response: {e}") from e

        text = content.strip()
        if not text:
            raise ProviderError("empty response from model")

        return ChatResponse(
            text=text,
            raw=reply.text,
            structured=is_structured_json(request.expect_json, text),
            finish_reason=str(finish_reason),
            usage=Usage(
                input_tokens=input_tokens,
                output_tokens=output_tokens,
                total_tokens=input_tokens + output_tokens,
            ),
        )
