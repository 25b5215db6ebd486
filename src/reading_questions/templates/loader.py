"""Loading of prompt templates from disk."""

import logging
from pathlib import Path
from typing import Union

from reading_questions.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).parent / "data"
DEFAULT_TEMPLATE_NAME = "french_reading_comprehension.hbs"


def default_template_path() -> Path:
    """Path of the template bundled with the package."""
    return TEMPLATE_DIR / DEFAULT_TEMPLATE_NAME


def load_template(path: Union[str, Path, None] = None) -> str:
    """Read a template file.

    Args:
        path: Template file to read; the bundled template when omitted

    Returns:
        Template text

    Raises:
        ConfigurationError: If the file is missing, unreadable or empty
    """
    template_path = Path(path).expanduser() if path is not None else default_template_path()
    logger.debug(f"Loading template from {template_path}")

    try:
        template = template_path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise ConfigurationError(
            f"Template not found: {template_path}",
            context={"path": str(template_path)}
        ) from e
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigurationError(
            f"Cannot read template {template_path}: {e}",
            context={"path": str(template_path)}
        ) from e

    if not template.strip():
        raise ConfigurationError(
            f"Template is empty: {template_path}",
            context={"path": str(template_path)}
        )

    return template
