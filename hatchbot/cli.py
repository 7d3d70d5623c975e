"""hatchbot command line (`hatchbot run`, `hatchbot register`)."""

from __future__ import annotations

import asyncio

import typer

from hatchbot.bot import run_bot
from hatchbot.config import settings
from hatchbot.errors import HatchBotError
from hatchbot.logging_config import configure_logging
from hatchbot.services.command_registry import CommandRegistry, build_search_command

app = typer.Typer(
    name="hatchbot",
    help="Escape Hatch podcast search bot for Discord",
    no_args_is_help=True,
)


@app.command("run")
def run() -> None:
    """Connect to Discord and start answering /pdc commands."""
    configure_logging(settings.log_level)
    try:
        run_bot(settings)
    except HatchBotError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1)


@app.command("register")
def register() -> None:
    """Register the /pdc slash command, per guild when DISCORD_GUILD_ID is set."""
    configure_logging(settings.log_level)
    try:
        registry = CommandRegistry(token=settings.require_token(), app_id=settings.require_app_id())
        asyncio.run(registry.register([build_search_command(settings.command_name)], guild_id=settings.discord_guild_id))
    except HatchBotError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1)

    if settings.discord_guild_id:
        typer.echo(f"Registered /{settings.command_name} command for guild {settings.discord_guild_id}.")
    else:
        typer.echo(f"Registered /{settings.command_name} command globally.")
