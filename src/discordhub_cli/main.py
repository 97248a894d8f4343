"""CLI entry point for the dhub tool.

This module is the composition root of the application.  It is the only
place that imports the concrete provider (DHClient).  Commands talk to
the service layer, which returns tagged results instead of raising.
"""

import asyncio
import json
import logging
import sys
from collections.abc import Awaitable, Callable
from dataclasses import asdict
from enum import Enum
from typing import Any, TypeVar

# Ensure UTF-8 output on Windows where stdout may default to cp1252.
if hasattr(sys.stdout, "reconfigure"):
    sys.stdout.reconfigure(encoding="utf-8", errors="replace")
if hasattr(sys.stderr, "reconfigure"):
    sys.stderr.reconfigure(encoding="utf-8", errors="replace")

import typer
from rich.console import Console
from rich.table import Table

from discordhub.auth import credentials as creds_store
from discordhub.core.exceptions import (
    AuthenticationRequiredError,
    MalformedResponseError,
)
from discordhub.core.models import ExchangeOutcome
from discordhub.core.results import Ok, Rejected, Result
from discordhub.providers.discordhub.auth import ApiKeyAuth
from discordhub.providers.discordhub.client import DHClient
from discordhub.services.economy_service import EconomyService

app = typer.Typer(help="Manage DiscordHub points, experience and shop items.")
auth_app = typer.Typer(help="Manage the DiscordHub API key.")
points_app = typer.Typer(help="Give, remove, transfer and inspect points.")
item_app = typer.Typer(help="Grant shop items.")
exp_app = typer.Typer(help="Give, remove and inspect experience.")

app.add_typer(auth_app, name="auth")
app.add_typer(points_app, name="points")
app.add_typer(item_app, name="item")
app.add_typer(exp_app, name="exp")

console = Console(legacy_windows=False)

T = TypeVar("T")


# ---------------------------------------------------------------------------
# Output format
# ---------------------------------------------------------------------------


class OutputFormat(str, Enum):
    """Supported output formats."""

    table = "table"
    json = "json"


_OUTPUT_OPTION = typer.Option(
    OutputFormat.table, "--output", "-o", help="Output format."
)

_UINT64_MAX = 2**64 - 1
_INT32_MIN = -(2**31)
_INT32_MAX = 2**31 - 1


def _id_argument(help: str) -> Any:
    """A positional Discord or DiscordHub identifier (unsigned 64-bit)."""
    return typer.Argument(..., min=0, max=_UINT64_MAX, help=help)


_USER_ARGUMENT = _id_argument("Discord user ID.")
_GUILD_ARGUMENT = _id_argument("Discord server ID.")
_AMOUNT_ARGUMENT = typer.Argument(
    ..., min=_INT32_MIN, max=_INT32_MAX, help="Number of points or experience."
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


@app.callback()
def main(
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Log every request to stderr."
    ),
):
    """DiscordHub command-line client."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _get_client() -> DHClient:
    """Build a DHClient from the environment or the saved API key.

    Returns:
        A :class:`~discordhub.providers.discordhub.client.DHClient`.
    """
    return DHClient.from_env()


def _execute(operation: Callable[[EconomyService], Awaitable[T]]) -> T:
    """Run ``operation`` against a fresh service and close the client.

    Args:
        operation: Coroutine function receiving the service.

    Returns:
        Whatever ``operation`` returns.
    """

    async def runner() -> T:
        client = _get_client()
        try:
            return await operation(EconomyService(client))
        finally:
            await client.close()

    try:
        return asyncio.run(runner())
    except AuthenticationRequiredError as e:
        console.print(f"[red]Error:[/red] {e}", highlight=False)
        raise typer.Exit(1)
    except MalformedResponseError as e:
        console.print(
            f"[red]Unexpected response from DiscordHub:[/red] {e}",
            highlight=False,
        )
        raise typer.Exit(1)


def _unwrap(result: Result[T]) -> T:
    """Return the payload of ``result`` or exit with its error message."""
    if isinstance(result, Ok):
        return result.value
    if isinstance(result, Rejected):
        console.print(
            f"[red]DiscordHub rejected the request:[/red] {result.message}",
            highlight=False,
        )
    else:
        console.print(
            f"[red]Could not reach DiscordHub:[/red] {result.message}",
            highlight=False,
        )
    raise typer.Exit(1)


def _emit(
    output: OutputFormat, title: str, fields: dict[str, Any]
) -> None:
    """Print ``fields`` as a two-column table or as a JSON object."""
    if output == OutputFormat.json:
        print(json.dumps(fields, indent=2))
        return
    table = Table(title=title, show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value", justify="right")
    for name, value in fields.items():
        table.add_row(name, str(value))
    console.print(table)


# ---------------------------------------------------------------------------
# auth commands
# ---------------------------------------------------------------------------


@auth_app.command()
def setup():
    """Save a DiscordHub API key locally."""
    api_key = typer.prompt("Paste your DiscordHub API key", hide_input=True)
    api_key = api_key.strip()
    if not api_key:
        console.print("[red]The API key cannot be empty.[/red]")
        raise typer.Exit(1)
    creds_store.save(api_key)
    console.print(
        f"[green]✓ API key saved to:[/green] {creds_store.credentials_path()}"
    )


@auth_app.command()
def status():
    """Show where the API key is resolved from."""
    auth = ApiKeyAuth()
    if not auth.is_authenticated():
        console.print("[yellow]No API key configured.[/yellow]")
        console.print(
            "Run [bold]dhub auth setup[/bold] or set "
            "[bold]DISCORDHUB_API_KEY[/bold]."
        )
        raise typer.Exit(1)
    console.print(f"[green]✓ API key[/green]  {auth.credential_source()}")


@auth_app.command()
def clear():
    """Remove the locally saved API key."""
    if creds_store.clear():
        console.print("[green]✓ API key removed.[/green]")
    else:
        console.print("[yellow]No saved API key found.[/yellow]")


# ---------------------------------------------------------------------------
# points commands
# ---------------------------------------------------------------------------


@points_app.command("give")
def points_give(
    user_id: int = _USER_ARGUMENT,
    guild_id: int = _GUILD_ARGUMENT,
    amount: int = _AMOUNT_ARGUMENT,
    output: OutputFormat = _OUTPUT_OPTION,
):
    """Add points to a user and show the new balance."""
    result = _execute(lambda s: s.give_points(user_id, guild_id, amount))
    _emit(
        output,
        "Points given",
        {"user_id": user_id, "guild_id": guild_id, "points": _unwrap(result)},
    )


@points_app.command("remove")
def points_remove(
    user_id: int = _USER_ARGUMENT,
    guild_id: int = _GUILD_ARGUMENT,
    amount: int = _AMOUNT_ARGUMENT,
    output: OutputFormat = _OUTPUT_OPTION,
):
    """Remove points from a user and show the new balance."""
    result = _execute(lambda s: s.remove_points(user_id, guild_id, amount))
    _emit(
        output,
        "Points removed",
        {"user_id": user_id, "guild_id": guild_id, "points": _unwrap(result)},
    )


@points_app.command("balance")
def points_balance(
    user_id: int = _USER_ARGUMENT,
    guild_id: int = _GUILD_ARGUMENT,
    output: OutputFormat = _OUTPUT_OPTION,
):
    """Show a user's points balance."""
    result = _execute(lambda s: s.get_balance(user_id, guild_id))
    _emit(
        output,
        "Balance",
        {"user_id": user_id, "guild_id": guild_id, "points": _unwrap(result)},
    )


@points_app.command("exchange")
def points_exchange(
    take_from: int = _id_argument("User to take the points from."),
    give_to: int = _id_argument("User to give the points to."),
    guild_id: int = _GUILD_ARGUMENT,
    amount: int = _AMOUNT_ARGUMENT,
    output: OutputFormat = _OUTPUT_OPTION,
):
    """Move points from one user to another.

    The transfer is two separate calls.  If the grant fails after the
    removal succeeded, the points are not returned automatically.
    """
    outcome: ExchangeOutcome = _execute(
        lambda s: s.exchange_points(take_from, give_to, guild_id, amount)
    )
    if outcome.partial:
        console.print(
            f"[red]Removed {amount} points from {take_from} but the grant "
            f"to {give_to} failed:[/red] {outcome.given.message}",
            highlight=False,
        )
        raise typer.Exit(1)
    source_balance = _unwrap(outcome.removed)
    target_balance = _unwrap(outcome.given)
    _emit(
        output,
        "Points exchanged",
        {
            "guild_id": guild_id,
            "amount": amount,
            "from": take_from,
            "from_balance": source_balance,
            "to": give_to,
            "to_balance": target_balance,
        },
    )


# ---------------------------------------------------------------------------
# item commands
# ---------------------------------------------------------------------------


@item_app.command("give")
def item_give(
    user_id: int = _USER_ARGUMENT,
    guild_id: int = _GUILD_ARGUMENT,
    item_id: int = _id_argument("DiscordHub item ID."),
    output: OutputFormat = _OUTPUT_OPTION,
):
    """Grant a shop item to a user.

    ITEM_ID is the DiscordHub item ID, not the Discord role ID.
    """
    granted = _unwrap(
        _execute(lambda s: s.give_item(user_id, guild_id, item_id))
    )
    _emit(
        output,
        "Item",
        {
            "user_id": user_id,
            "guild_id": guild_id,
            "item_id": item_id,
            "granted": granted,
        },
    )
    if not granted:
        raise typer.Exit(1)


# ---------------------------------------------------------------------------
# exp commands
# ---------------------------------------------------------------------------


@exp_app.command("give")
def exp_give(
    user_id: int = _USER_ARGUMENT,
    guild_id: int = _GUILD_ARGUMENT,
    amount: int = _AMOUNT_ARGUMENT,
    output: OutputFormat = _OUTPUT_OPTION,
):
    """Add experience to a user and show the new total."""
    result = _execute(lambda s: s.give_exp(user_id, guild_id, amount))
    _emit(
        output,
        "Experience given",
        {"user_id": user_id, "guild_id": guild_id, "exp": _unwrap(result)},
    )


@exp_app.command("remove")
def exp_remove(
    user_id: int = _USER_ARGUMENT,
    guild_id: int = _GUILD_ARGUMENT,
    amount: int = _AMOUNT_ARGUMENT,
    output: OutputFormat = _OUTPUT_OPTION,
):
    """Remove experience from a user and show the new total."""
    result = _execute(lambda s: s.remove_exp(user_id, guild_id, amount))
    _emit(
        output,
        "Experience removed",
        {"user_id": user_id, "guild_id": guild_id, "exp": _unwrap(result)},
    )


@exp_app.command("info")
def exp_info(
    user_id: int = _USER_ARGUMENT,
    guild_id: int = _GUILD_ARGUMENT,
    output: OutputFormat = _OUTPUT_OPTION,
):
    """Show a user's level, total experience and level progress."""
    info = _unwrap(_execute(lambda s: s.get_exp_info(user_id, guild_id)))
    _emit(
        output,
        f"Ranking of {user_id}",
        {"user_id": user_id, "guild_id": guild_id, **asdict(info)},
    )
