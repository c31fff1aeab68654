from __future__ import annotations

from importlib import metadata
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from textquest.core.audit import append_audit
from textquest.core.config import GameConfig, get_config
from textquest.core.errors import ConfigError, LoadError
from textquest.world.engine import Engine
from textquest.world.loader import load_world
from textquest.world.models import Session, World
from textquest.world.render import render_room


app = typer.Typer(add_completion=False, help="textquest: explore rooms, collect items, unlock doors")
console = Console()


def _get_version() -> str:
    try:
        return metadata.version("textquest")
    except metadata.PackageNotFoundError:
        return "0.0.0+local"


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        help="Show the textquest version and exit.",
        is_eager=True,
    ),
):
    if version:
        console.print(_get_version())
        raise typer.Exit()
    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())
        raise typer.Exit()


def _get_env(config_path: Optional[str], world_path: Optional[str]) -> tuple[GameConfig, World]:
    try:
        cfg = get_config(config_path)
        world = load_world(world_path or cfg.world_path)
    except (LoadError, ConfigError, FileNotFoundError) as e:
        console.print(f"❌ {e}", markup=False, highlight=False)
        raise typer.Exit(code=1)
    return cfg, world


def _show_room(session: Session, clear: bool) -> None:
    if clear:
        console.clear()
    console.print()
    console.print(render_room(session), markup=False, highlight=False)


@app.command("play")
def play(
    world: Optional[str] = typer.Option(None, "--world", "-w", help="Path to a world JSON file"),
    config: Optional[str] = typer.Option(None, "--config", help="Path to textquest.yaml"),
    no_clear: bool = typer.Option(False, "--no-clear", help="Do not clear the screen between rooms"),
):
    """Start a new game."""
    console.print("Welcome to Text Adventure!")
    console.print("Loading world...")
    cfg, loaded = _get_env(config, world)
    clear = cfg.clear_screen and not no_clear

    session = Session(loaded)
    engine = Engine(session)
    console.print("World loaded. Type 'help' for commands.")

    def audit(event: dict) -> None:
        if cfg.audit_enabled:
            append_audit(event, cfg.audit_path)

    audit({"event": "session_start", "room": session.current_room_id})
    _show_room(session, clear=False)

    while True:
        try:
            command = console.input("\n> ")
        except EOFError:
            command = "quit"

        result = engine.handle(command)
        if command.strip():
            audit(
                {
                    "event": "turn",
                    "command": command.strip(),
                    "room": session.current_room_id,
                    "message": result.message,
                }
            )

        if result.message:
            console.print(result.message, markup=False, highlight=False)
        if result.quit:
            break
        _show_room(session, clear=clear and result.refresh)

    audit({"event": "session_end", "room": session.current_room_id, "inventory": list(session.inventory)})


@app.command("validate")
def validate(
    world: Optional[str] = typer.Option(None, "--world", "-w", help="Path to a world JSON file"),
    config: Optional[str] = typer.Option(None, "--config", help="Path to textquest.yaml"),
):
    """Load a world file and list its rooms."""
    _, loaded = _get_env(config, world)

    table = Table(title="World Rooms")
    table.add_column("ID", style="bold")
    table.add_column("Name")
    table.add_column("Exits")
    table.add_column("Items", justify="right")
    table.add_column("Locked")
    table.add_column("Key")
    for room in loaded.rooms.values():
        exits = ", ".join(f"{d}->{t}" for d, t in room.exits.items())
        marker = " (start)" if room.room_id == loaded.starting_room else ""
        table.add_row(
            room.room_id + marker,
            room.name,
            exits or "-",
            str(len(room.items)),
            "yes" if room.locked else "no",
            room.key_id or "-",
        )

    console.print(table)
    console.print(f"✅ {len(loaded.rooms)} rooms, {len(loaded.items)} items", highlight=False)
