"""LLM provider layer."""

from .base import (
    AsyncLLMProvider,
    LLMConfig,
    LLMMessage,
    LLMResponse,
    normalize_llm_config,
)
from .providers import (
    AnthropicProvider,
    EchoProvider,
    LLMProviderFactory,
    create_llm_provider,
)

__all__ = [
    # Base classes
    "AsyncLLMProvider",
    "LLMConfig",
    "LLMMessage",
    "LLMResponse",
    "normalize_llm_config",
    # Providers
    "AnthropicProvider",
    "EchoProvider",
    "LLMProviderFactory",
    "create_llm_provider",
]
