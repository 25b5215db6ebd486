"""Generator configuration.

Settings are collected once at startup, from defaults, an optional YAML file,
the environment and command-line overrides (later sources win), and are then
passed explicitly to the code that needs them.

YAML format:
    provider: anthropic
    model: claude-sonnet-4-5-20250929
    max_tokens: 4096
    temperature: 0.7
    timeout: 60
    template_path: ~/templates/my_prompt.hbs
"""

import logging
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Union

import yaml

from reading_questions.exceptions import ConfigurationError
from reading_questions.llm import LLMConfig

logger = logging.getLogger(__name__)

API_KEY_ENV_VAR = "ANTHROPIC_API_KEY"

# Providers that talk to a remote service and need a key
_KEYED_PROVIDERS = {"anthropic"}


@dataclass(frozen=True)
class GeneratorConfig:
    """Settings for a question generation run.

    Attributes:
        provider: LLM provider name ('anthropic' or 'echo')
        model: Model identifier
        api_key: Provider API key
        max_tokens: Maximum tokens to generate
        temperature: Sampling temperature
        timeout: Request timeout in seconds
        template_path: Prompt template file; the bundled template when None
    """
    provider: str = "anthropic"
    model: str = "claude-sonnet-4-5-20250929"
    api_key: str | None = None
    max_tokens: int = 4096
    temperature: float = 0.7
    timeout: float = 60.0
    template_path: Path | None = None

    def __post_init__(self) -> None:
        if self.template_path is not None and not isinstance(self.template_path, Path):
            object.__setattr__(self, "template_path", Path(self.template_path).expanduser())

    def __repr__(self) -> str:
        key = "***" if self.api_key else None
        return (
            f"GeneratorConfig(provider={self.provider!r}, model={self.model!r}, "
            f"api_key={key!r}, max_tokens={self.max_tokens}, "
            f"temperature={self.temperature}, timeout={self.timeout}, "
            f"template_path={self.template_path!r})"
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "GeneratorConfig":
        """Create a config from a dictionary, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            logger.warning(f"Ignoring unknown config keys: {', '.join(unknown)}")
        return cls(**{k: v for k, v in data.items() if k in known})

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "GeneratorConfig":
        """Create a config from a YAML file.

        Raises:
            ConfigurationError: If the file is missing, unreadable or not a mapping
        """
        config_path = Path(path).expanduser()
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except OSError as e:
            raise ConfigurationError(
                f"Cannot read config file {config_path}: {e}",
                context={"path": str(config_path)}
            ) from e
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"Invalid YAML in config file {config_path}: {e}",
                context={"path": str(config_path)}
            ) from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Config file {config_path} must contain a mapping",
                context={"path": str(config_path)}
            )
        return cls.from_dict(data)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "GeneratorConfig":
        """Create a config holding the API key found in the environment."""
        environ = os.environ if environ is None else environ
        return cls(api_key=environ.get(API_KEY_ENV_VAR) or None)

    def merge(self, **overrides: Any) -> "GeneratorConfig":
        """Return a copy with every non-None override applied."""
        applied = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **applied) if applied else self

    def require_api_key(self) -> str | None:
        """Check that a key is present when the provider needs one.

        Raises:
            ConfigurationError: If the provider needs a key and none is set
        """
        if self.provider.lower() in _KEYED_PROVIDERS and not self.api_key:
            raise ConfigurationError(
                f"Missing {API_KEY_ENV_VAR} environment variable.\n"
                "Get your API key from: https://console.anthropic.com/\n"
                f"Set it with: export {API_KEY_ENV_VAR}='your-key-here'",
                context={"provider": self.provider}
            )
        return self.api_key

    def to_llm_config(self) -> LLMConfig:
        """LLM provider settings for this run."""
        options: Dict[str, Any] = {}
        if self.provider.lower() == "echo":
            options["echo_prefix"] = ""
        return LLMConfig(
            provider=self.provider,
            model=self.model,
            api_key=self.api_key,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
            timeout=self.timeout,
            options=options,
        )
