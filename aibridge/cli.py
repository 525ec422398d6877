"""
AI Bridge - command line entry point.

Inspect the configured providers, probe the default one and send a
single chat completion from the shell.

    aibridge providers --config config/ai_bridge.yaml
    aibridge health
    aibridge chat "Say hi" --provider Ollama --model llama3.2
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from aibridge.bootstrap import AIBridge, create_ai_bridge
from aibridge.config.loader import load_options
from aibridge.config.schema import AIServiceOptions
from aibridge.exceptions import AIBridgeError
from aibridge.observability.logging_config import configure_logging

load_dotenv()

app = typer.Typer(
    name="aibridge",
    help="AI Bridge - one facade over several AI providers",
)
console = Console()

logger = logging.getLogger("aibridge")

DEFAULT_CONFIG = Path("config/ai_bridge.yaml")

ConfigOption = typer.Option(DEFAULT_CONFIG, "--config", "-c", help="Path to the YAML config")


def _get_options(config: Path) -> AIServiceOptions:
    """Load options, with a friendly error on failure."""
    try:
        return load_options(config)
    except FileNotFoundError:
        console.print(Panel(
            f"[red]Config not found:[/] [bold]{config}[/]\n\n"
            f"Copy the sample and edit it:\n"
            f"  [dim]cp config/ai_bridge.yaml my_config.yaml[/]",
            title="⚠ Configuration Error",
            border_style="red",
        ))
        raise typer.Exit(code=1)
    except ValueError as e:
        console.print(Panel(f"[red]{e}[/]", title="⚠ Configuration Error", border_style="red"))
        raise typer.Exit(code=1)


def _get_bridge(config: Path) -> AIBridge:
    options = _get_options(config)
    try:
        return create_ai_bridge(options)
    except AIBridgeError as e:
        console.print(Panel(f"[red]{e}[/]", title="⚠ Provider Error", border_style="red"))
        raise typer.Exit(code=1)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
):
    configure_logging(level=logging.DEBUG if verbose else logging.WARNING)


# =========================================================================
# Commands
# =========================================================================


@app.command()
def providers(config: Path = ConfigOption):
    """Show the registered providers and their capabilities."""
    bridge = _get_bridge(config)

    table = Table(title="AI Bridge - Providers")
    table.add_column("Name", style="cyan")
    table.add_column("Chat model", style="white")
    table.add_column("Embedding model", style="white")
    table.add_column("Functions", style="green")
    table.add_column("Vision", style="green")
    table.add_column("Streaming", style="green")

    def _flag(value: object) -> str:
        return "yes" if value else "[dim]no[/]"

    for info in bridge.registry.list_providers():
        name = str(info["name"])
        if name == bridge.options.default_provider:
            name += " [yellow](default)[/]"
        table.add_row(
            name,
            str(info["chat_model"] or "-"),
            str(info["embedding_model"] or "-"),
            _flag(info["supports_functions"]),
            _flag(info["supports_vision"]),
            _flag(info["supports_streaming"]),
        )

    console.print(table)
    asyncio.run(bridge.aclose())


@app.command()
def health(config: Path = ConfigOption):
    """Send a one-message completion to the default provider."""
    bridge = _get_bridge(config)

    async def _run():
        try:
            return await bridge.health_check.check_health()
        finally:
            await bridge.aclose()

    result = asyncio.run(_run())
    if result.is_healthy:
        console.print(Panel(
            f"[green]{result.description}[/]\n\n"
            f"Provider: {bridge.options.default_provider}",
            title="Health",
            border_style="green",
        ))
        return

    console.print(Panel(
        f"[red]{result.description}[/]",
        title="Health",
        border_style="red",
    ))
    raise typer.Exit(code=1)


@app.command()
def chat(
    prompt: str = typer.Argument(..., help="Prompt sent as a single user message"),
    config: Path = ConfigOption,
    provider: Optional[str] = typer.Option(None, "--provider", "-p", help="Provider name"),
    model: Optional[str] = typer.Option(None, "--model", "-m", help="Model name"),
):
    """Run one chat completion and print the reply."""
    bridge = _get_bridge(config)

    chat_service = bridge.service.chat
    if provider:
        chat_service = chat_service.with_provider(provider)
    if model:
        chat_service = chat_service.with_model(model)

    async def _run():
        try:
            return await chat_service.complete(prompt)
        finally:
            await bridge.aclose()

    try:
        response = asyncio.run(_run())
    except AIBridgeError as e:
        console.print(f"[red]Chat failed:[/] {e}")
        raise typer.Exit(1)

    console.print(Panel(
        response.text or "[dim](empty reply)[/]",
        title=f"{chat_service.current_provider} · {response.model_id or chat_service.current_model or 'default'}",
        subtitle=f"{response.usage.total_tokens} tokens",
    ))


if __name__ == "__main__":
    app()
