"""Command-line interface for generating French reading-comprehension questions.

This module provides commands for:
- Generating questions for a French text with an LLM
- Printing the rendered prompt without calling the LLM
- Checking a prompt template for syntax problems

Example:
    reading-questions generate --input article.txt
    reading-questions generate --input article.txt --question-count 10 --difficulty advanced
    reading-questions generate --input article.txt --focus passé_composé --output /tmp/questions.yaml
    reading-questions render --input article.txt
    reading-questions check-template my_prompt.hbs
"""

import asyncio
import functools
import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn

from . import __version__
from .config import API_KEY_ENV_VAR, GeneratorConfig
from .exceptions import InputError, OutputError, ReadingQuestionsError
from .generator import GenerationResult, QuestionGenerator
from .llm import LLMProviderFactory, create_llm_provider
from .questions import (
    DEFAULT_DIFFICULTY,
    DEFAULT_QUESTION_COUNT,
    MAX_QUESTION_COUNT,
    MIN_QUESTION_COUNT,
    Difficulty,
    QuestionRequest,
)
from .templates import TemplateRenderer, default_template_path, load_template

DEFAULT_OUTPUT = "questions.yaml"

console = Console()
logger = logging.getLogger(__name__)


@click.group()
@click.version_option(version=__version__)
@click.option('--verbose', '-v', is_flag=True, help='Show progress logging')
def cli(verbose: bool):
    """French reading-comprehension question generator.

    Generates questions that expose areas of weakness and build systematic
    reading skills, following Karl Sandberg's "French for Reading" approach.
    """
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _request_options(command):
    """Options shared by commands that build a prompt from a text."""
    options = [
        click.option('--input', '-i', 'input_file', required=True,
                     type=click.Path(dir_okay=False, path_type=Path),
                     help='Path to French text file'),
        click.option('--difficulty', '-d', default=DEFAULT_DIFFICULTY.value, show_default=True,
                     type=click.Choice([d.value for d in Difficulty], case_sensitive=False),
                     help='Reader level'),
        click.option('--question-count', '-n', default=DEFAULT_QUESTION_COUNT, show_default=True,
                     type=click.IntRange(MIN_QUESTION_COUNT, MAX_QUESTION_COUNT),
                     help='Number of questions'),
        click.option('--focus', '-f', default=None,
                     help='Grammar point to focus on (e.g. passé_composé, subjunctive)'),
        click.option('--template', '-t', 'template_file', default=None,
                     type=click.Path(dir_okay=False, path_type=Path),
                     help='Prompt template (default: bundled template)'),
        click.option('--config', '-c', 'config_file', default=None,
                     type=click.Path(dir_okay=False, path_type=Path),
                     help='YAML file with generator settings'),
    ]
    for option in reversed(options):
        command = option(command)
    return command


def _handle_errors(command):
    """Turn package errors into a message and the matching exit status."""
    @functools.wraps(command)
    def wrapper(*args, **kwargs):
        try:
            return command(*args, **kwargs)
        except ReadingQuestionsError as e:
            logger.debug(f"Error context: {e.context}")
            console.print(f"[red]Error: {escape(str(e))}[/red]")
            sys.exit(e.exit_code)
        except Exception as e:
            logger.debug("Unexpected error", exc_info=True)
            console.print(f"[red]Unexpected error: {escape(str(e))}[/red]")
            sys.exit(1)
    return wrapper


def read_source_text(path: Path) -> str:
    """Read the French source text.

    Raises:
        InputError: If the file is missing, unreadable or empty
    """
    path = path.expanduser()
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise InputError(f"Input file not found: {path}", context={"path": str(path)}) from e
    except (OSError, UnicodeDecodeError) as e:
        raise InputError(f"Cannot read input file {path}: {e}", context={"path": str(path)}) from e

    if not text.strip():
        raise InputError("Input file is empty", context={"path": str(path)})
    return text


def write_output(path: Path, content: str) -> Path:
    """Write generated content, creating parent directories.

    Raises:
        OutputError: If the file cannot be written
    """
    path = path.expanduser().resolve()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    except OSError as e:
        raise OutputError(f"Cannot write output file {path}: {e}", context={"path": str(path)}) from e
    return path


def _load_config(config_file: Path | None, **overrides) -> GeneratorConfig:
    """Settings from defaults, the config file, the environment and the options, later winning."""
    config = GeneratorConfig.from_yaml(config_file) if config_file else GeneratorConfig()
    config = config.merge(api_key=GeneratorConfig.from_env().api_key)
    return config.merge(**overrides)


def _build_request(input_file: Path, difficulty: str, question_count: int, focus: str | None) -> QuestionRequest:
    return QuestionRequest(
        text=read_source_text(input_file),
        difficulty=Difficulty.from_string(difficulty),
        question_count=question_count,
        focus=focus or None,
    )


async def _generate(config: GeneratorConfig, template: str, request: QuestionRequest) -> GenerationResult:
    async with create_llm_provider(config.to_llm_config()) as llm:
        generator = QuestionGenerator(llm, template=template)
        return await generator.generate(request)


@cli.command()
@_request_options
@click.option('--output', '-o', default=DEFAULT_OUTPUT, show_default=True,
              type=click.Path(dir_okay=False, path_type=Path),
              help='Output YAML file')
@click.option('--provider', default=None,
              type=click.Choice(LLMProviderFactory.available_providers()),
              help='LLM provider (default: anthropic)')
@click.option('--model', '-m', default=None, help='Model identifier')
@click.option('--api-key', default=None,
              help=f'Anthropic API key (default: ${API_KEY_ENV_VAR})')
@_handle_errors
def generate(input_file: Path, difficulty: str, question_count: int, focus: str | None,
             template_file: Path | None, config_file: Path | None, output: Path,
             provider: str | None, model: str | None, api_key: str | None):
    """Generate reading-comprehension questions for a French text"""
    config = _load_config(
        config_file, provider=provider, model=model, api_key=api_key, template_path=template_file
    )
    config.require_api_key()

    console.print(f"Reading French text from: {escape(str(input_file))}")
    request = _build_request(input_file, difficulty, question_count, focus)
    template = load_template(config.template_path)

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True
    ) as progress:
        progress.add_task(
            f"Generating {request.question_count} {request.difficulty.value} questions...",
            total=None
        )
        result = asyncio.run(_generate(config, template, request))

    output_path = write_output(output, result.content)

    console.print("\n[green]✓[/green] Questions generated successfully!")
    console.print(f"  Output: {escape(str(output_path))}")
    console.print(f"  Questions: {request.question_count}")
    console.print(f"  Difficulty: {request.difficulty.value}")
    if request.focus:
        console.print(f"  Focus: {escape(request.focus)}")
    console.print("\n[bold]Next steps:[/bold]")
    console.print(f"  1. Read the French text: {escape(str(input_file))}")
    console.print(f"  2. Answer the questions from: {escape(str(output_path))}")
    console.print("  3. Check your answers against the provided explanations")


@cli.command()
@_request_options
@click.option('--output', '-o', default=None,
              type=click.Path(dir_okay=False, path_type=Path),
              help='Write the prompt to this file instead of stdout')
@_handle_errors
def render(input_file: Path, difficulty: str, question_count: int, focus: str | None,
           template_file: Path | None, config_file: Path | None, output: Path | None):
    """Print the prompt that would be sent to the LLM"""
    config = _load_config(config_file, template_path=template_file)
    request = _build_request(input_file, difficulty, question_count, focus)
    generator = QuestionGenerator(template=load_template(config.template_path))
    prompt = generator.build_prompt(request)

    if output is None:
        click.echo(prompt, nl=False)
    else:
        output_path = write_output(output, prompt)
        console.print(f"[green]✓[/green] Prompt written to {escape(str(output_path))}")


@cli.command('check-template')
@click.argument('template_file', required=False,
                type=click.Path(dir_okay=False, path_type=Path))
@_handle_errors
def check_template(template_file: Path | None):
    """Check a prompt template for syntax problems"""
    template = load_template(template_file)
    name = template_file or default_template_path()
    issues = TemplateRenderer.validate_template_syntax_detailed(template)

    if issues:
        console.print(f"[red]✗[/red] {len(issues)} problem(s) in {escape(str(name))}:")
        for issue in issues:
            console.print(f"  {escape(str(issue))}")
        sys.exit(1)

    variables = sorted(TemplateRenderer.extract_variables(template))
    console.print(f"[green]✓[/green] Template is valid: {escape(str(name))}")
    console.print(f"  Variables: {escape(', '.join(variables)) or '(none)'}")


def main():
    """Entry point for the reading-questions command."""
    cli()


if __name__ == '__main__':
    main()
