"""
Main entry point for Glossa
"""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import ValidationError
from rich.console import Console

from src import __version__
from src.config import PluginData, PluginDataStore, get_settings
from src.utils import get_logger, mask_secret, setup_logging

if TYPE_CHECKING:
    from structlog.stdlib import BoundLogger

    from src.config.settings import Settings

console = Console()

SETTING_FIELDS = {
    "api-key": "api_key",
    "status": "definition_status",
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="glossa",
        description="Add an AI-generated definition to an Obsidian note",
    )
    parser.add_argument("--version", action="version", version=__version__)
    subparsers = parser.add_subparsers(dest="command", required=True)

    define = subparsers.add_parser("define", help="Add a definition to a note")
    define.add_argument("note", type=Path, help="Path to the markdown note")

    config = subparsers.add_parser("config", help="Show or change settings")
    config_sub = config.add_subparsers(dest="config_command", required=True)
    config_sub.add_parser("show", help="Show current settings")
    config_set = config_sub.add_parser("set", help="Persist a setting")
    config_set.add_argument("key", choices=sorted(SETTING_FIELDS))
    config_set.add_argument("value")

    return parser


async def load_runtime_settings(logger: "BoundLogger") -> "Settings":
    """Merge persisted plugin data over environment settings."""
    settings = get_settings()
    store = PluginDataStore(settings.plugin_data_path)
    data = await store.load()
    merged = PluginDataStore.apply(settings, data)

    logger.info(
        "Settings loaded",
        environment=merged.environment,
        mock_mode=merged.is_mock_mode,
        api_key_configured=bool(merged.gemini_api_key.get_secret_value()),
    )
    return merged


async def run_define(note: Path, logger: "BoundLogger") -> int:
    from src.commands import DefinitionCommand, InvocationStatus
    from src.obsidian import NoteFileEditor

    settings = await load_runtime_settings(logger)
    note = settings.resolve_note_path(note)
    if not note.is_file():
        logger.error("Note not found", path=str(note))
        console.print(f"[red]Note not found:[/red] {note}")
        return 1

    editor = await NoteFileEditor.load(note)
    outcome = await DefinitionCommand(settings=settings).run(editor)

    if outcome.status is InvocationStatus.SKIPPED_NO_TITLE:
        console.print("[yellow]No note title; nothing was changed.[/yellow]")
        return 1
    if outcome.status is InvocationStatus.REJECTED_IN_FLIGHT:
        console.print("[yellow]A definition is already being generated.[/yellow]")
        return 1
    if outcome.status is InvocationStatus.WRITE_FAILED:
        console.print(f"[red]Could not write to[/red] {note}")
        return 3

    if outcome.succeeded:
        console.print(f"[green]Definition added to[/green] {note}")
        return 0

    console.print(f"[red]Definition failed; error text inserted into[/red] {note}")
    return 2


async def run_config(args: argparse.Namespace, logger: "BoundLogger") -> int:
    settings = get_settings()
    store = PluginDataStore(settings.plugin_data_path)
    data = await store.load()

    if args.config_command == "show":
        merged = PluginDataStore.apply(settings, data)
        console.print(f"api-key: {mask_secret(merged.gemini_api_key.get_secret_value())}")
        console.print(f"status:  {merged.definition_status}")
        console.print(f"model:   {merged.model_name}")
        return 0

    field = SETTING_FIELDS[args.key]
    try:
        updated = PluginData(**{**data.model_dump(), field: args.value})
    except ValidationError as e:
        logger.warning("Invalid setting value", setting=args.key, errors=e.error_count())
        console.print(f"[red]Invalid value for {args.key}:[/red] {e.errors()[0]['msg']}")
        return 1

    await store.save(updated)
    logger.info("Setting updated", setting=args.key, value_length=len(args.value))
    console.print(f"Saved {args.key}")
    return 0


async def main(argv: list[str] | None = None) -> int:
    """Main application entry point."""
    args = build_parser().parse_args(argv)

    setup_logging()
    logger = get_logger("main")
    logger.info("Starting Glossa", version=__version__, command=args.command)

    if args.command == "define":
        return await run_define(args.note, logger)
    return await run_config(args, logger)


def cli() -> None:
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        print("\nStopped by user")
        sys.exit(130)


if __name__ == "__main__":
    cli()
