"""Typer-based CLI for oasagent."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated, Optional

import typer

from .cli import run_chat, run_init, run_validate
from .config import ConfigError, Settings, load_settings
from .log import get_logger, setup_logging

logger = get_logger(__name__)

app = typer.Typer(
    name="oasagent",
    help="Generate OpenAPI definitions from API descriptions with an LLM agent.",
    no_args_is_help=True,
    add_completion=False,
)

# Global context for settings
_settings: Settings | None = None


def get_settings(
    model: Optional[str] = None,
    base_url: Optional[str] = None,
    api_key: Optional[str] = None,
) -> Settings:
    """Load settings with CLI overrides."""
    global _settings
    if _settings is None:
        _settings = load_settings()

    if model:
        _settings.model = model
    if base_url:
        _settings.base_url = base_url
    if api_key:
        _settings.api_key = api_key

    return _settings


@app.command()
def init() -> None:
    """
    Interactive configuration wizard.

    Guides you through setting up your LLM provider, API credentials,
    and model selection.
    """
    run_init()


@app.command()
def chat(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable verbose logging")] = False,
    no_tools: Annotated[bool, typer.Option("--no-tools", help="Run without the validation tool")] = False,
    model: Annotated[Optional[str], typer.Option(help="Override LLM model")] = None,
    base_url: Annotated[Optional[str], typer.Option(help="Override API base URL")] = None,
    api_key: Annotated[Optional[str], typer.Option(help="Override API key")] = None,
) -> None:
    """
    Interactive OpenAPI design session.

    Describe an API in plain language; the agent drafts an OpenAPI
    definition, validates it and returns the corrected YAML.
    """
    settings = get_settings(model, base_url, api_key)
    setup_logging(settings.debug)

    try:
        run_chat(settings, verbose=verbose, use_tools=not no_tools)
    except ConfigError as exc:
        logger.error("Chat failed: %s", exc)
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(1)


@app.command()
def validate(
    document: Annotated[Path, typer.Argument(help="OpenAPI YAML file to check")],
) -> None:
    """
    Validate an OpenAPI definition with the built-in checker.
    """
    path = document.expanduser().resolve()
    if not path.exists():
        typer.echo(f"Error: File not found: {path}", err=True)
        raise typer.Exit(1)

    result = run_validate(path)
    typer.echo(json.dumps(result, indent=2))
    if result.get("status") == "error":
        raise typer.Exit(1)


def main() -> None:
    """Entry point for the CLI application."""
    app()


if __name__ == "__main__":
    main()
