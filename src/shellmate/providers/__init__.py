"""Model backends behind a common Provider interface.

Usage:
    from shellmate.providers import ChatRequest, Message, create_provider

    provider = create_provider(settings)
    response = provider.chat(ChatRequest(messages=[Message("user", "hi")]))
"""

from shellmate.providers.base import (
    ChatRequest,
    ChatResponse,
    Message,
    Provider,
    ProviderConfigError,
    ProviderError,
    ProviderTimeoutError,
    Usage,
)
from shellmate.providers.factory import SUPPORTED_PROVIDERS, create_provider
from shellmate.providers.ollama import OllamaProvider
from shellmate.providers.openai import (
    CONTEXT_TRIMMED_WARNING,
    ContextLengthExceededError,
    OpenAIProvider,
)

__all__ = [
    "CONTEXT_TRIMMED_WARNING",
    "SUPPORTED_PROVIDERS",
    "ChatRequest",
    "ChatResponse",
    "ContextLengthExceededError",
    "Message",
    "OllamaProvider",
    "OpenAIProvider",
    "Provider",
    "ProviderConfigError",
    "ProviderError",
    "ProviderTimeoutError",
    "Usage",
    "create_provider",
]
