"""Question vocabulary and prompt context construction.

Builds the dictionary the comprehension template is rendered with. Context
keys are camelCase because they are the names the template uses.
"""

import math
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any, Dict, List

from reading_questions.exceptions import InputError, ValidationError

DEFAULT_QUESTION_COUNT = 8
MIN_QUESTION_COUNT = 1
MAX_QUESTION_COUNT = 20


class Difficulty(Enum):
    """Reader level the questions are written for."""
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"

    @classmethod
    def from_string(cls, value: str) -> "Difficulty":
        """Parse a difficulty name (case-insensitive).

        Raises:
            ValidationError: If the name is not a known difficulty
        """
        try:
            return cls(value.strip().lower())
        except ValueError as e:
            choices = ", ".join(d.value for d in cls)
            raise ValidationError(
                f"Invalid difficulty: {value}. Must be one of: {choices}",
                context={"difficulty": value}
            ) from e


DEFAULT_DIFFICULTY = Difficulty.INTERMEDIATE


class QuestionType(Enum):
    """Kinds of comprehension question, in the order the prompt lists them."""
    VOCABULARY = "vocabulary"
    MAIN_IDEA = "main_idea"
    DETAIL = "detail"
    INFERENCE = "inference"


QUESTION_TYPES: List[QuestionType] = list(QuestionType)


@dataclass
class QuestionRequest:
    """What to generate questions about.

    Attributes:
        text: French source text
        difficulty: Reader level
        question_count: Number of questions to ask for
        focus: Optional grammar point to emphasize (e.g. "passé_composé")
    """
    text: str
    difficulty: Difficulty = DEFAULT_DIFFICULTY
    question_count: int = DEFAULT_QUESTION_COUNT
    focus: str | None = None

    def validate(self) -> None:
        """Check the request.

        Raises:
            InputError: If the text is blank
            ValidationError: If the question count is out of range
        """
        if not self.text.strip():
            raise InputError("Input text is empty")
        validate_question_count(self.question_count)


def validate_question_count(count: int) -> int:
    """Return ``count`` if it lies in the accepted range.

    Raises:
        ValidationError: If it does not
    """
    if not MIN_QUESTION_COUNT <= count <= MAX_QUESTION_COUNT:
        raise ValidationError(
            f"Invalid question count: {count}. "
            f"Must be {MIN_QUESTION_COUNT}-{MAX_QUESTION_COUNT}",
            context={"question_count": count}
        )
    return count


def count_words(text: str) -> int:
    """Number of whitespace-separated words in ``text``."""
    return len(text.split())


def focus_question_count(question_count: int, focus: str | None) -> int:
    """How many questions should target the focus grammar point (a third, rounded up)."""
    return math.ceil(question_count / 3) if focus else 0


def build_prompt_context(
    request: QuestionRequest,
    today: date | None = None
) -> Dict[str, Any]:
    """Build the render context for a request.

    Args:
        request: The generation request
        today: Date stamped into the prompt (defaults to today)

    Returns:
        Context dictionary for the comprehension template
    """
    today = today or date.today()
    return {
        "text": request.text,
        "difficulty": request.difficulty.value,
        "questionCount": request.question_count,
        "wordCount": count_words(request.text),
        "questionTypes": [t.value for t in QUESTION_TYPES],
        "currentDate": today.isoformat(),
        "focusCategory": request.focus or "",
        "focusQuestionCount": focus_question_count(request.question_count, request.focus),
    }
