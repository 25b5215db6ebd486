"""Question generation: render the prompt and ask the LLM for questions.

Example:
    ```python
    from reading_questions.generator import QuestionGenerator
    from reading_questions.llm import create_llm_provider
    from reading_questions.questions import QuestionRequest

    async with create_llm_provider(config.to_llm_config()) as llm:
        generator = QuestionGenerator(llm)
        result = await generator.generate(QuestionRequest(text=french_text))
        print(result.content)
    ```
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict

from reading_questions.exceptions import (
    ConfigurationError,
    GenerationError,
    ReadingQuestionsError,
)
from reading_questions.llm import AsyncLLMProvider
from reading_questions.questions import QuestionRequest, build_prompt_context
from reading_questions.templates import TemplateRenderer, load_template

logger = logging.getLogger(__name__)


@dataclass
class GenerationResult:
    """Generated questions and what produced them.

    Attributes:
        content: Questions text returned by the model (YAML)
        prompt: Rendered prompt sent to the model
        model: Model that produced the content
        usage: Token usage reported by the provider
    """
    content: str
    prompt: str
    model: str
    usage: Dict[str, int] | None = None


class QuestionGenerator:
    """Generate comprehension questions for a French text.

    Args:
        provider: LLM provider used for generation; may be omitted when only
            prompts are built
        template: Prompt template text; the bundled template when None
        renderer: Template renderer (a new one when None)
    """

    def __init__(
        self,
        provider: AsyncLLMProvider | None = None,
        template: str | None = None,
        renderer: TemplateRenderer | None = None
    ):
        self.provider = provider
        self.template = template if template is not None else load_template()
        self.renderer = renderer or TemplateRenderer()

    def build_context(self, request: QuestionRequest, today: date | None = None) -> Dict[str, Any]:
        """Validate the request and build its render context."""
        request.validate()
        return build_prompt_context(request, today=today)

    def build_prompt(self, request: QuestionRequest, today: date | None = None) -> str:
        """Render the prompt for a request."""
        context = self.build_context(request, today=today)

        missing = self.renderer.missing_variables(self.template, context)
        if missing:
            logger.warning(f"Template references values not supplied: {', '.join(missing)}")

        return self.renderer.render(self.template, context)

    async def generate(self, request: QuestionRequest, today: date | None = None) -> GenerationResult:
        """Render the prompt and generate questions.

        Raises:
            InputError: If the request text is empty
            ValidationError: If the request is out of range
            ConfigurationError: If no provider was given
            GenerationError: If the provider fails or returns no content
        """
        if self.provider is None:
            raise ConfigurationError("No LLM provider configured for question generation")

        prompt = self.build_prompt(request, today=today)

        logger.info(
            f"Generating {request.question_count} {request.difficulty.value} questions "
            f"with {self.provider.config.provider}/{self.provider.config.model}"
        )
        try:
            response = await self.provider.complete(prompt)
        except ReadingQuestionsError:
            raise
        except Exception as e:
            raise GenerationError(
                f"Question generation failed: {e}",
                context={"provider": self.provider.config.provider, "model": self.provider.config.model}
            ) from e

        if not response.content.strip():
            raise GenerationError(
                "Generation service returned an empty response",
                context={"model": response.model, "finish_reason": response.finish_reason}
            )

        if response.finish_reason in ("max_tokens", "length"):
            logger.warning("Response was truncated by the max_tokens limit")
        if response.usage:
            logger.info(f"Tokens used: {response.usage.get('total_tokens')}")

        return GenerationResult(
            content=response.content,
            prompt=prompt,
            model=response.model,
            usage=response.usage,
        )
