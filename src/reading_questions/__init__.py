"""French reading-comprehension question generation."""

from reading_questions.exceptions import (
    ConfigurationError,
    GenerationError,
    InputError,
    OutputError,
    ProviderResponseError,
    ReadingQuestionsError,
    ValidationError,
)
from reading_questions.templates import TemplateRenderer, render_template

__version__ = "0.1.0"

__all__ = [
    # Rendering
    "TemplateRenderer",
    "render_template",
    # Errors
    "ReadingQuestionsError",
    "ConfigurationError",
    "ValidationError",
    "InputError",
    "GenerationError",
    "ProviderResponseError",
    "OutputError",
]
