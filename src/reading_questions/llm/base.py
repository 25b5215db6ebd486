"""Base LLM abstraction components.

Standard data structures and the async provider interface shared by every
generation backend. The question generator only depends on these types, so a
provider can be swapped (Anthropic for real runs, echo for offline runs and
tests) without touching it.

Key Components:
    - LLMConfig: Provider, model and generation parameters
    - LLMMessage: Standard message format
    - LLMResponse: Generated content with usage metadata
    - AsyncLLMProvider: Provider interface with initialize/complete/close

Example:
    ```python
    from reading_questions.llm import LLMConfig, create_llm_provider

    config = LLMConfig(
        provider="anthropic",
        model="claude-sonnet-4-5-20250929",
        api_key=api_key,
        max_tokens=4096
    )

    async with create_llm_provider(config) as llm:
        response = await llm.complete("Écrivez trois questions sur ce texte")
        print(response.content)
    ```
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Dict, List, Union


@dataclass
class LLMMessage:
    """A message in an LLM conversation.

    Attributes:
        role: Message role - 'system', 'user' or 'assistant'
        content: Message content text
        metadata: Additional metadata
    """
    role: str
    content: str
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class LLMResponse:
    """Response from an LLM provider.

    Attributes:
        content: Generated text content
        model: Model identifier that generated the response
        finish_reason: Why generation stopped - 'stop', 'end_turn', 'max_tokens', ...
        usage: Token usage stats (prompt_tokens, completion_tokens, total_tokens)
        metadata: Provider-specific metadata
        created_at: Response timestamp
    """
    content: str
    model: str
    finish_reason: str | None = None
    usage: Dict[str, int] | None = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=datetime.now)


@dataclass
class LLMConfig:
    """Configuration for LLM operations.

    Example:
        ```python
        config = LLMConfig(provider="anthropic", model="claude-sonnet-4-5-20250929")

        # From dictionary (YAML config section)
        config = LLMConfig.from_dict({
            "provider": "echo",
            "model": "echo-model",
            "options": {"echo_prefix": ""}
        })

        # Clone with overrides
        hotter = config.clone(temperature=1.0)
        ```
    """
    provider: str  # 'anthropic', 'echo'
    model: str
    api_key: str | None = None
    api_base: str | None = None  # Custom API endpoint

    # Generation parameters
    temperature: float = 0.7
    max_tokens: int | None = None
    top_p: float | None = None
    stop_sequences: List[str] | None = None
    system_prompt: str | None = None

    timeout: float = 60.0

    # Provider-specific options
    options: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> "LLMConfig":
        """Create LLMConfig from a dictionary, ignoring unknown keys.

        Args:
            config_dict: Configuration dictionary

        Returns:
            LLMConfig instance
        """
        valid_fields = {f.name for f in cls.__dataclass_fields__.values()}
        filtered_data = {k: v for k, v in config_dict.items() if k in valid_fields}
        return cls(**filtered_data)

    def to_dict(self) -> Dict[str, Any]:
        """Convert LLMConfig to a dictionary, skipping unset optional values.

        The API key is never included.
        """
        result = {}
        for field_info in self.__dataclass_fields__.values():
            if field_info.name == 'api_key':
                continue
            value = getattr(self, field_info.name)
            if value is not None:
                result[field_info.name] = value
        return result

    def clone(self, **overrides: Any) -> "LLMConfig":
        """Create a copy of this config with optional overrides."""
        return replace(self, **overrides)


def normalize_llm_config(config: Union[LLMConfig, Dict[str, Any]]) -> LLMConfig:
    """Normalize an LLMConfig or dictionary to LLMConfig.

    Raises:
        TypeError: If config type is not supported
    """
    if isinstance(config, LLMConfig):
        return config
    if isinstance(config, dict):
        return LLMConfig.from_dict(config)
    raise TypeError(
        f"Unsupported config type: {type(config).__name__}. "
        f"Expected LLMConfig or dict."
    )


class AsyncLLMProvider(ABC):
    """Async LLM provider interface."""

    def __init__(self, config: Union[LLMConfig, Dict[str, Any]]):
        """Initialize provider with configuration.

        Args:
            config: Configuration as LLMConfig or dict
        """
        self.config = normalize_llm_config(config)
        self._client: Any = None
        self._is_initialized = False

    @abstractmethod
    async def complete(
        self,
        messages: Union[str, List[LLMMessage]],
        **kwargs: Any
    ) -> LLMResponse:
        """Generate a completion.

        Args:
            messages: A prompt string or a list of messages
            **kwargs: Provider-specific overrides

        Returns:
            LLMResponse with the generated content
        """
        pass

    async def initialize(self) -> None:
        """Initialize the async LLM client."""
        self._is_initialized = True

    async def close(self) -> None:
        """Close the async LLM client."""
        self._is_initialized = False

    @property
    def is_initialized(self) -> bool:
        """Check if provider is initialized."""
        return self._is_initialized

    @staticmethod
    def _to_messages(messages: Union[str, List[LLMMessage]]) -> List[LLMMessage]:
        if isinstance(messages, str):
            return [LLMMessage(role='user', content=messages)]
        return list(messages)

    async def __aenter__(self):
        """Async context manager entry."""
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()
