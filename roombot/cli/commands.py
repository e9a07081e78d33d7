"""CLI commands for RoomBot."""

import asyncio
import json
import sys
from pathlib import Path

import typer
from loguru import logger
from rich.console import Console
from rich.table import Table

from roombot import __version__, __logo__

app = typer.Typer(
    name="roombot",
    help=f"{__logo__} RoomBot - XMPP chat room client",
    no_args_is_help=True,
)

console = Console()


def version_callback(value: bool):
    if value:
        console.print(f"{__logo__} RoomBot v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None, "--version", "-v", callback=version_callback, is_eager=True
    ),
):
    """RoomBot - XMPP chat room client."""
    pass


def _load(config_path: Path | None):
    from roombot.config.loader import load_config
    from roombot.brain.store import JsonFileStore
    from roombot.errors import StoreUnavailable

    config = load_config(config_path)
    try:
        store = JsonFileStore(
            config.brain_path,
            retries=config.brain.retries,
            retry_delay_seconds=config.brain.retry_delay_seconds,
        )
    except StoreUnavailable as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)
    return config, store


# ============================================================================
# Room
# ============================================================================


def handle_stanza(client, stanza) -> None:
    """
    Log each event and answer ``!ping``.

    Commands from rate limited users are ignored.
    """
    from roombot.errors import MalformedStanza
    from roombot.stanza.models import MessageEvent

    # Subject changes and chat states carry no body
    if stanza.name == "message" and stanza.find_child("body") is None:
        logger.debug("Ignoring message without a body")
        return

    try:
        event = client.parse_stanza(stanza)
    except MalformedStanza as e:
        logger.warning(f"Dropping malformed stanza: {e}")
        return

    if event is None:
        return
    logger.debug(f"Event: {event.to_dict()}")

    if not isinstance(event, MessageEvent):
        return
    if event.from_username == client.config.xmpp.username:
        return

    if event.body.strip() == "!ping":
        if event.rate_limited:
            logger.info(f"Ignoring !ping from {event.from_username} (rate limited)")
            return
        client.reply_to(event.from_username, "pong")
        client.update_latest_command_log(event.from_username)


@app.command()
def run(
    config_path: Path = typer.Option(None, "--config", "-c", help="Config file"),
    debug: bool = typer.Option(False, "--debug", "-d", help="Log messages instead of sending"),
    verbose: bool = typer.Option(False, "--verbose", help="Verbose output"),
):
    """Join the configured room and listen."""
    from roombot.client import ChatClient
    from roombot.transport.xmpp import XmppTransport

    if verbose:
        logger.remove()
        logger.add(sys.stderr, level="DEBUG")

    config, store = _load(config_path)
    if debug:
        config.debug = True

    if not config.xmpp.jid or not config.xmpp.room_jid:
        console.print("[red]Error: xmpp.jid and xmpp.roomJid must be configured.[/red]")
        raise typer.Exit(1)

    console.print(f"{__logo__} Joining {config.room_occupant_jid}...")
    if config.debug:
        console.print("[yellow]Debug mode: messages will not be sent[/yellow]")

    async def serve():
        transport = XmppTransport(config.xmpp.jid, config.xmpp.password)
        client = ChatClient(config, transport, store)
        client.listen(lambda stanza: handle_stanza(client, stanza))
        try:
            await transport.run()
        finally:
            transport.disconnect()

    try:
        asyncio.run(serve())
    except KeyboardInterrupt:
        console.print("\nShutting down...")


# ============================================================================
# Settings
# ============================================================================


settings_app = typer.Typer(help="Read and write stored settings")
app.add_typer(settings_app, name="settings")


@settings_app.command("get")
def settings_get(
    key: str = typer.Argument(..., help="Setting key"),
    config_path: Path = typer.Option(None, "--config", "-c", help="Config file"),
):
    """Print a stored setting as JSON."""
    _, store = _load(config_path)
    console.print_json(json.dumps(store.get(key)))


@settings_app.command("set")
def settings_set(
    key: str = typer.Argument(..., help="Setting key"),
    value: str = typer.Argument(..., help="JSON value"),
    config_path: Path = typer.Option(None, "--config", "-c", help="Config file"),
):
    """Store a JSON value under a key."""
    try:
        parsed = json.loads(value)
    except json.JSONDecodeError as e:
        console.print(f"[red]Invalid JSON: {e}[/red]")
        raise typer.Exit(1)

    _, store = _load(config_path)
    store.set(key, parsed)
    console.print(f"[green]✓[/green] Saved {key}")


@app.command()
def user(
    username: str = typer.Argument(..., help="Room nickname"),
    config_path: Path = typer.Option(None, "--config", "-c", help="Config file"),
):
    """Show a user's leaderboard record."""
    from roombot.client import get_user

    _, store = _load(config_path)
    record = get_user(store, username)

    if not record:
        console.print(f"[yellow]No record for {username}[/yellow]")
        return

    table = Table(title=f"{username}")
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="green")
    for field, value in record.items():
        table.add_row(str(field), json.dumps(value))

    console.print(table)


if __name__ == "__main__":
    app()
