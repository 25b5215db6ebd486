"""Echo provider for offline runs and tests."""

from collections import deque
from typing import Any, Deque, Dict, List, Union

from ..base import AsyncLLMProvider, LLMConfig, LLMMessage, LLMResponse


class EchoProvider(AsyncLLMProvider):
    """Echo provider for testing and debugging.

    Echoes back the last user message with a configurable prefix, or returns
    queued canned responses. No network access and no API key.

    Options (``LLMConfig.options``):
        echo_prefix: Text prepended to the echoed message (default "Echo: ")
        mock_tokens: Whether to report mock token usage (default True)

    Example:
        ```python
        provider = EchoProvider({"provider": "echo", "model": "test"})
        provider.set_responses(["questions:\\n  - id: 1\\n"])
        response = await provider.complete("prompt")
        ```
    """

    def __init__(self, config: Union[LLMConfig, Dict[str, Any]]):
        super().__init__(config)
        self.echo_prefix = self.config.options.get('echo_prefix', 'Echo: ')
        self.mock_tokens = self.config.options.get('mock_tokens', True)
        self._responses: Deque[Union[str, LLMResponse]] = deque()
        self.calls: List[List[LLMMessage]] = []

    def set_responses(self, responses: List[Union[str, LLMResponse]]) -> None:
        """Queue responses returned, in order, by the next ``complete`` calls."""
        self._responses = deque(responses)

    @staticmethod
    def _count_tokens(text: str) -> int:
        # Rough approximation: 1 token ~= 4 characters
        return max(1, len(text) // 4)

    async def complete(
        self,
        messages: Union[str, List[LLMMessage]],
        **kwargs: Any
    ) -> LLMResponse:
        """Return the next queued response, or echo the last user message."""
        if not self._is_initialized:
            await self.initialize()

        messages = self._to_messages(messages)
        self.calls.append(messages)

        if self._responses:
            queued = self._responses.popleft()
            if isinstance(queued, LLMResponse):
                return queued
            content = queued
        else:
            user_messages = [msg for msg in messages if msg.role == 'user']
            if user_messages:
                content = self.echo_prefix + user_messages[-1].content
            else:
                content = self.echo_prefix + "(no user message)"

        prompt_tokens = sum(self._count_tokens(msg.content) for msg in messages)
        completion_tokens = self._count_tokens(content)

        return LLMResponse(
            content=content,
            model=self.config.model or 'echo-model',
            finish_reason='stop',
            usage={
                'prompt_tokens': prompt_tokens,
                'completion_tokens': completion_tokens,
                'total_tokens': prompt_tokens + completion_tokens
            } if self.mock_tokens else None
        )
