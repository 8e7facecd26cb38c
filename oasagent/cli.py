"""oasagent command implementations."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict

import httpx

from .client import LLMAgentClient
from .config import Settings, get_config_path, require_api_key
from .llm_client import LLMClient
from .log import get_logger
from .prompts import AGENT_DESCRIPTION, TOOLS
from .session import SessionLoop
from .tools import build_tool_map, validate_openapi

logger = get_logger(__name__)

# ============================================================================
# ASCII Banner
# ============================================================================

OASAGENT_BANNER = r"""
                                            _
   ___   __ _ ___  __ _  __ _  ___ _ __ | |_
  / _ \ / _` / __|/ _` |/ _` |/ _ \ '_ \| __|
 | (_) | (_| \__ \ (_| | (_| |  __/ | | | |_
  \___/ \__,_|___/\__,_|\__, |\___|_| |_|\__|
                        |___/
"""

# ============================================================================
# Helper Functions
# ============================================================================


def _fetch_models(base_url: str, api_key: str) -> list[str]:
    """Query endpoint for available models."""
    try:
        headers = {"Authorization": f"Bearer {api_key}"} if api_key else {}
        with httpx.Client(timeout=10) as client:
            resp = client.get(f"{base_url.rstrip('/')}/models", headers=headers)
            resp.raise_for_status()
            data = resp.json()
            # Handle both {data: [...]} and {models: [...]} formats
            models = data.get("data") or data.get("models") or []
            return [m.get("id", m.get("name", "")) for m in models if isinstance(m, dict)]
    except Exception as exc:
        logger.debug("Could not list models at %s: %s", base_url, exc)
        return []


def _write_config(path: Path, api_key: str, base_url: str, model: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        f.write(f"OPENAI_API_KEY={api_key}\n")
        f.write(f"OPENAI_BASE_URL={base_url}\n")
        f.write(f"OPENAI_MODEL={model}\n")
        f.write("DEBUG=false\n")
    path.chmod(0o600)


def build_client(settings: Settings, verbose: bool = False, use_tools: bool = True) -> LLMAgentClient:
    """Wire the LLM, tools and streaming options into an agent client."""
    require_api_key(settings)
    llm = LLMClient(settings)
    return LLMAgentClient(
        llm,
        TOOLS if use_tools else [],
        build_tool_map() if use_tools else {},
        max_tool_rounds=settings.max_tool_rounds,
        stream_timeout=settings.stream_timeout,
        verbose=verbose,
    )


# ============================================================================
# Command Implementations
# ============================================================================


def run_init() -> None:
    """Interactive configuration wizard."""
    from rich.console import Console
    from rich.panel import Panel
    from rich.prompt import Prompt
    from rich.table import Table

    console = Console()
    console.print(Panel.fit(
        OASAGENT_BANNER + "\n[dim]OpenAPI Definition Assistant[/dim]",
        border_style="blue",
        padding=(1, 2)
    ))
    console.print("\n[bold cyan]Welcome![/bold cyan] Let's configure your LLM provider.\n")

    providers = {
        "1": ("Google (Gemini)", "https://generativelanguage.googleapis.com/v1beta/openai/", "gemini-2.5-flash"),
        "2": ("OpenAI", "https://api.openai.com/v1", "gpt-4o"),
        "3": ("Local (Ollama/LM Studio)", "http://localhost:11434/v1", ""),
        "4": ("Custom endpoint", "", ""),
    }

    table = Table(title="Available LLM Providers", show_header=True, header_style="bold magenta")
    table.add_column("Choice", style="cyan", width=8)
    table.add_column("Provider", style="green")
    table.add_column("Endpoint", style="dim")
    for key, (name, url, _) in providers.items():
        table.add_row(key, name, url or "[dim]Custom[/dim]")
    console.print(table)

    choice = Prompt.ask("\n[bold]Select provider[/bold]", default="1", choices=list(providers.keys()))
    name, default_url, default_model = providers[choice]

    base_url = ""
    while not base_url:
        base_url = Prompt.ask("[cyan]Base URL[/cyan]", default=default_url or None) or ""

    if choice in ("1", "2"):  # Hosted providers require a key
        api_key = ""
        while not api_key:
            api_key = Prompt.ask("[cyan]API Key[/cyan] (required)", password=True)
    else:
        api_key = Prompt.ask("[cyan]API Key[/cyan] (optional)", default="not-needed", password=True)

    console.print("\n[yellow]⚙[/yellow]  Fetching available models...")
    models = _fetch_models(base_url, api_key)
    if models:
        console.print(f"[green]✓[/green] Found {len(models)} models")
        for i, m in enumerate(models[:15], 1):
            marker = " [green]*[/green]" if m == default_model else ""
            console.print(f"  [cyan]{i:2}[/cyan]) {m}{marker}")
        choice_str = Prompt.ask("\n[bold]Select model number or type custom[/bold]", default=default_model or "1")
        if choice_str.isdigit() and 1 <= int(choice_str) <= min(len(models), 15):
            model = models[int(choice_str) - 1]
        else:
            model = choice_str
    else:
        console.print("[yellow]⚠[/yellow]  Could not fetch models (check API key or endpoint)")
        model = ""
        while not model:
            model = Prompt.ask("[cyan]Model name[/cyan]", default=default_model or None) or ""

    config_path = get_config_path()
    _write_config(config_path, api_key, base_url, model)

    console.print(Panel.fit(
        f"[green]✓ Configuration Complete![/green]\n\n"
        f"[cyan]Provider:[/cyan] {name}\n"
        f"[cyan]Model:[/cyan]    {model}\n"
        f"[cyan]Config:[/cyan]   {config_path}",
        border_style="green",
        padding=(1, 2)
    ))
    console.print("\nStart a session with [cyan]oasagent chat[/cyan]\n")


def run_chat(settings: Settings, verbose: bool = False, use_tools: bool = True) -> None:
    """Interactive session: describe an API, get an OpenAPI definition."""
    from rich.console import Console
    from rich.panel import Panel

    console = Console()
    client = build_client(settings, verbose=verbose, use_tools=use_tools)

    tools_line = ", ".join(client.tool_map) if client.tool_map else "none"
    console.print(Panel.fit(
        f"[bold cyan]{AGENT_DESCRIPTION}[/bold cyan]\n\n"
        f"[dim]Model: {settings.model}\n"
        f"Tools: {tools_line}\n"
        f"Type 'quit' or Ctrl+D to exit[/dim]",
        border_style="cyan"
    ))

    SessionLoop(client, console=console).run()


def run_validate(path: Path) -> Dict[str, Any]:
    """Validate an OpenAPI YAML file with the built-in tool."""
    return validate_openapi(path.read_text(encoding="utf-8"))
