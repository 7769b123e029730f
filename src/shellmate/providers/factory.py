"""Build the configured provider."""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx

from shellmate.providers.base import Provider, ProviderConfigError
from shellmate.providers.ollama import OllamaProvider
from shellmate.providers.openai import OpenAIProvider

if TYPE_CHECKING:
    from shellmate.config import Settings

SUPPORTED_PROVIDERS = ("ollama", "openai")


def create_provider(
    settings: "Settings",
    model: str | None = None,
    client: httpx.Client | None = None,
) -> Provider:
    """Create the provider selected in settings.

    Args:
        settings: Application settings.
        model: Model override (e.g. from --model).
        client: HTTP client to use instead of a fresh one.

    Raises:
        ProviderConfigError: Unknown provider or invalid provider settings.
    """
    name = settings.provider.strip().lower()
    selected_model = (model or "").strip() or settings.model

    if name == "ollama":
        return OllamaProvider(settings.ollama_host, selected_model, client=client)
    if name == "openai":
        return OpenAIProvider(
            settings.openai_host,
            selected_model,
            settings.openai_api_key,
            client=client,
        )
    raise ProviderConfigError(
        f"unsupported provider {settings.provider!r} (valid: {', '.join(SUPPORTED_PROVIDERS)})"
    )
