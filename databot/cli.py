"""
DataBot CLI

Command-line interface for running DataBot turns locally.

Usage:
    databot ask "How many orders were returned last month?"   # Single turn, printed to the console
    databot token                                             # Check the service account exchange
    databot serve --port 8000                                 # Run the webhook server
"""

import asyncio
import logging
import sys
from datetime import UTC, datetime

import click
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel

from databot.chat.messenger import ChatMessenger
from databot.config import get_settings
from databot.models.errors import AuthError
from databot.models.events import InboundEvent
from databot.models.turn import TurnState
from databot.pipeline.orchestrator import create_credential_cache, create_pipeline

console = Console()


def configure_cli_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.CRITICAL
    logging.basicConfig(level=level, force=True)
    if not verbose:
        for logger_name in ("databot", "httpx", "openai"):
            logging.getLogger(logger_name).setLevel(logging.CRITICAL)


class ConsoleMessenger(ChatMessenger):
    """Messenger that prints every create/edit to the terminal instead of Google Chat."""

    def __init__(self, out: Console | None = None):
        super().__init__()
        self.out = out or console
        self.updates: list[str] = []

    async def create(self, token: str, space_name: str, state: TurnState) -> str:
        self._show(state, title=f"{space_name} (created)")
        return f"{space_name}/messages/console"

    async def edit(self, token: str, message_name: str, state: TurnState) -> None:
        self._show(state, title="edited")

    def _show(self, state: TurnState, title: str) -> None:
        text = self.render(state)
        self.updates.append(text)
        self.out.print(Panel(Markdown(text), title=title, border_style="cyan"))


@click.group()
@click.version_option(version="0.1.0", prog_name="DataBot")
@click.option("--verbose", "-v", is_flag=True, help="Show debug logs.")
def cli(verbose: bool):
    """DataBot - ask questions about the data in plain English."""
    configure_cli_logging(verbose)


@cli.command()
@click.argument("question")
@click.option("--space", default="spaces/console", show_default=True, help="Space name to report.")
def ask(question: str, space: str):
    """Run a single turn and print each message update."""

    async def run_turn():
        settings = get_settings()
        messenger = ConsoleMessenger()
        pipeline = create_pipeline(settings, messenger=messenger)
        try:
            outcome = await pipeline.run_turn(InboundEvent.message(question, space))
        finally:
            await pipeline.connector.close()
            await pipeline.messenger.close()
            await pipeline.llm.close()
            await pipeline.credentials.close()

        if outcome.answered:
            console.print(f"[green]Answered[/green] ({outcome.rows_interpreted} rows interpreted)")
        else:
            console.print(f"[red]Failed:[/red] {outcome.state.error}")
            sys.exit(1)

    try:
        asyncio.run(run_turn())
    except ValueError as e:
        console.print(f"[red]Configuration error: {e}[/red]")
        sys.exit(1)


@cli.command()
def token():
    """Exchange the service account key for an access token."""

    async def fetch():
        cache = create_credential_cache(get_settings())
        try:
            access_token = await cache.get_token()
        finally:
            await cache.close()
        expires_at = datetime.fromtimestamp(cache.credential.expires_at, tz=UTC)
        masked = f"{access_token[:8]}...{access_token[-4:]}" if len(access_token) > 12 else "***"
        console.print(f"[green]Token:[/green] {masked}")
        console.print(f"[green]Expires:[/green] {expires_at.isoformat()}")

    try:
        asyncio.run(fetch())
    except (AuthError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)


@cli.command()
@click.option("--host", default=None, help="Bind host (defaults to API_HOST).")
@click.option("--port", default=None, type=int, help="Bind port (defaults to API_PORT).")
@click.option("--reload", is_flag=True, help="Reload on code changes.")
def serve(host: str | None, port: int | None, reload: bool):
    """Run the webhook server with uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "databot.api.main:app",
        host=host or settings.api_host,
        port=port or settings.api_port,
        reload=reload,
    )


if __name__ == "__main__":
    cli()
