"""Anthropic Claude LLM provider implementation.

Uses the official Anthropic Python SDK (``anthropic.AsyncAnthropic``) and the
Messages API. The API key is taken from the provider config only; reading it
from the environment is the job of the application's configuration layer at
startup.

Example:
    ```python
    from reading_questions.llm import LLMConfig
    from reading_questions.llm.providers import AnthropicProvider

    config = LLMConfig(
        provider="anthropic",
        model="claude-sonnet-4-5-20250929",
        api_key="sk-ant-...",
        temperature=0.7,
        max_tokens=4096
    )

    async with AnthropicProvider(config) as llm:
        response = await llm.complete("Posez trois questions sur ce texte : ...")
        print(response.content)
    ```

See Also:
    - Anthropic API Documentation: https://docs.anthropic.com/
    - anthropic Python package: https://github.com/anthropics/anthropic-sdk-python
"""

import logging
from typing import Any, Dict, List, Union

from reading_questions.exceptions import (
    ConfigurationError,
    GenerationError,
    ProviderResponseError,
)
from ..base import AsyncLLMProvider, LLMConfig, LLMMessage, LLMResponse

logger = logging.getLogger(__name__)

DEFAULT_MAX_TOKENS = 1024


class AnthropicProvider(AsyncLLMProvider):
    """Anthropic Claude LLM provider.

    Args:
        config: LLMConfig or dict with provider settings

    Attributes:
        _client: Anthropic AsyncAnthropic client instance
    """

    def __init__(self, config: Union[LLMConfig, Dict[str, Any]]):
        super().__init__(config)

    async def initialize(self) -> None:
        """Initialize Anthropic client.

        Raises:
            ConfigurationError: If no API key is configured
        """
        try:
            import anthropic
        except ImportError as e:
            raise ImportError("anthropic package not installed. Install with: pip install anthropic") from e

        if not self.config.api_key:
            raise ConfigurationError(
                "Anthropic API key not provided",
                context={"provider": "anthropic", "model": self.config.model}
            )

        self._client = anthropic.AsyncAnthropic(
            api_key=self.config.api_key,
            base_url=self.config.api_base,
            timeout=self.config.timeout
        )
        self._is_initialized = True

    async def close(self) -> None:
        """Close Anthropic client."""
        if self._client is not None:
            await self._client.close()
            self._client = None
        self._is_initialized = False

    def _request_params(self, messages: List[LLMMessage], **kwargs: Any) -> Dict[str, Any]:
        """Build Messages API parameters, leaving out anything unset."""
        system_parts = [self.config.system_prompt] if self.config.system_prompt else []
        api_messages = []
        for msg in messages:
            if msg.role == 'system':
                # Anthropic uses the system parameter, not system messages
                system_parts.append(msg.content)
            else:
                api_messages.append({'role': msg.role, 'content': msg.content})

        params: Dict[str, Any] = {
            'model': self.config.model,
            'messages': api_messages,
            'max_tokens': kwargs.get('max_tokens') or self.config.max_tokens or DEFAULT_MAX_TOKENS,
            'temperature': kwargs.get('temperature', self.config.temperature),
        }
        if system_parts:
            params['system'] = "\n\n".join(system_parts)
        if self.config.top_p is not None:
            params['top_p'] = self.config.top_p
        if self.config.stop_sequences:
            params['stop_sequences'] = self.config.stop_sequences
        return params

    async def complete(
        self,
        messages: Union[str, List[LLMMessage]],
        **kwargs: Any
    ) -> LLMResponse:
        """Generate completion.

        Raises:
            GenerationError: If the API call fails
            ProviderResponseError: If the response holds no text
        """
        if not self._is_initialized:
            await self.initialize()

        import anthropic

        params = self._request_params(self._to_messages(messages), **kwargs)
        logger.debug(f"Anthropic request: model={params['model']}, max_tokens={params['max_tokens']}")

        try:
            response = await self._client.messages.create(**params)
        except anthropic.APIError as e:
            raise GenerationError(
                f"Anthropic API request failed: {e}",
                context={"model": self.config.model, "error_type": type(e).__name__}
            ) from e

        text_blocks = [block.text for block in response.content if block.type == 'text']
        if not text_blocks:
            block_types = [block.type for block in response.content]
            raise ProviderResponseError(
                "Unexpected response type from Claude",
                context={"model": response.model, "block_types": block_types}
            )

        usage = None
        if getattr(response, 'usage', None) is not None:
            usage = {
                'prompt_tokens': response.usage.input_tokens,
                'completion_tokens': response.usage.output_tokens,
                'total_tokens': response.usage.input_tokens + response.usage.output_tokens
            }

        return LLMResponse(
            content="".join(text_blocks),
            model=response.model,
            finish_reason=response.stop_reason,
            usage=usage,
            metadata={'id': response.id}
        )
