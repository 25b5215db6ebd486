"""Exception hierarchy for reading-questions.

The template renderer never raises; everything around it (loading files,
building configuration, calling the generation service, writing results)
reports failures through the classes below. Each class carries the exit status
the CLI uses when the error ends an invocation.

Example:
    ```python
    from reading_questions.exceptions import InputError, ReadingQuestionsError

    raise InputError(
        "Input file is empty",
        context={"path": "article.txt"}
    )

    try:
        run()
    except ReadingQuestionsError as e:
        logger.error(f"Error: {e}")
        if e.context:
            logger.error(f"Context: {e.context}")
    ```
"""

from typing import Any, Dict


class ReadingQuestionsError(Exception):
    """Base exception for the package.

    Attributes:
        context: Dictionary containing contextual information about the error
        exit_code: Process exit status used by the CLI

    Args:
        message: Human-readable error message
        context: Optional dictionary with error context (paths, keys, etc.)
    """

    exit_code: int = 1

    def __init__(self, message: str, context: Dict[str, Any] | None = None):
        super().__init__(message)
        self.context = context or {}


class ConfigurationError(ReadingQuestionsError):
    """Raised when required configuration is missing or invalid.

    Covers a missing API key, an unreadable template or config file, and an
    unknown provider name.
    """

    exit_code = 2


class ValidationError(ConfigurationError):
    """Raised when a request parameter is outside its accepted values.

    Example:
        ```python
        raise ValidationError(
            "Invalid question count: 40. Must be 1-20",
            context={"question_count": 40}
        )
        ```
    """

    pass


class InputError(ReadingQuestionsError):
    """Raised when the source text cannot be read or is empty."""

    exit_code = 3


class GenerationError(ReadingQuestionsError):
    """Raised when the generation service call fails."""

    exit_code = 4


class ProviderResponseError(GenerationError):
    """Raised when the generation service answers with an unexpected shape."""

    pass


class OutputError(ReadingQuestionsError):
    """Raised when the generated questions cannot be written."""

    exit_code = 5


__all__ = [
    "ReadingQuestionsError",
    "ConfigurationError",
    "ValidationError",
    "InputError",
    "GenerationError",
    "ProviderResponseError",
    "OutputError",
]
