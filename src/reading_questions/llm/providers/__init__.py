"""LLM provider implementations and factory."""

from typing import Any, Dict, Type, Union

from reading_questions.exceptions import ConfigurationError
from ..base import AsyncLLMProvider, LLMConfig, normalize_llm_config
from .anthropic import AnthropicProvider
from .echo import EchoProvider


class LLMProviderFactory:
    """Factory for creating LLM providers from configuration.

    Example:
        ```python
        factory = LLMProviderFactory()
        provider = factory.create({"provider": "echo", "model": "echo-model"})
        ```
    """

    # Registry of provider classes
    _providers: Dict[str, Type[AsyncLLMProvider]] = {
        'anthropic': AnthropicProvider,
        'echo': EchoProvider,
    }

    def create(self, config: Union[LLMConfig, Dict[str, Any]]) -> AsyncLLMProvider:
        """Create an LLM provider from configuration.

        Args:
            config: Configuration (LLMConfig or dict)

        Returns:
            LLM provider instance

        Raises:
            ConfigurationError: If provider type is unknown
        """
        llm_config = normalize_llm_config(config)
        provider_class = self._providers.get(llm_config.provider.lower())
        if not provider_class:
            raise ConfigurationError(
                f"Unknown provider: {llm_config.provider}. "
                f"Available providers: {self.available_providers()}",
                context={"provider": llm_config.provider}
            )
        return provider_class(llm_config)

    @classmethod
    def available_providers(cls) -> list[str]:
        """Names of the registered providers."""
        return sorted(cls._providers)

    @classmethod
    def register_provider(cls, name: str, provider_class: Type[AsyncLLMProvider]) -> None:
        """Register a custom provider class.

        Args:
            name: Provider name (e.g., 'custom')
            provider_class: Provider class (must inherit from AsyncLLMProvider)
        """
        cls._providers[name.lower()] = provider_class

    def __call__(self, config: Union[LLMConfig, Dict[str, Any]]) -> AsyncLLMProvider:
        """Allow factory to be called directly."""
        return self.create(config)


def create_llm_provider(config: Union[LLMConfig, Dict[str, Any]]) -> AsyncLLMProvider:
    """Create the LLM provider named by ``config.provider``.

    Example:
        ```python
        provider = create_llm_provider({
            "provider": "anthropic",
            "model": "claude-sonnet-4-5-20250929",
            "api_key": "..."
        })
        ```
    """
    return LLMProviderFactory().create(config)


__all__ = [
    'AnthropicProvider',
    'EchoProvider',
    'LLMProviderFactory',
    'create_llm_provider',
]
