"""CLI interface: Pokédex grid, type stats, and collection views."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.table import Table

from pokedex_tracker.completion import progress_label
from pokedex_tracker.config import AppConfig, load_config
from pokedex_tracker.engine import CollectionEngine
from pokedex_tracker.models import ACQUIRED, ACQUIRING, READY, EngineSnapshot
from pokedex_tracker.stats import category_bars

console = Console()

_STATUS_LABELS = {
    ACQUIRED: "[green]Caught![/green]",
    ACQUIRING: "[yellow]Catching...[/yellow]",
}


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for the CLI."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    # Set up logging
    level = logging.WARNING
    if args.verbose == 1:
        level = logging.INFO
    elif args.verbose >= 2:
        level = logging.DEBUG

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )

    if not hasattr(args, "func"):
        parser.print_help()
        return

    args.func(args)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pokedex-tracker",
        description="Browse the Pokédex, catch Pokémon, and track your collection",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v info, -vv debug)",
    )
    parser.add_argument(
        "-c", "--config",
        type=Path,
        default=None,
        help="Path to config.yaml (default: config.yaml)",
    )
    parser.add_argument(
        "--source",
        type=str,
        default=None,
        help="Catalog source: pokeapi-graphql, local-json (overrides config)",
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Maximum number of catalog entries to load (overrides config)",
    )

    subparsers = parser.add_subparsers(title="commands", dest="command")

    browse_parser = subparsers.add_parser("browse", help="Show the Pokédex grid")
    browse_parser.set_defaults(func=_cmd_browse)

    stats_parser = subparsers.add_parser("stats", help="Show the type distribution")
    stats_parser.set_defaults(func=_cmd_stats)

    catch_parser = subparsers.add_parser("catch", help="Catch Pokémon and show the collection")
    catch_parser.add_argument(
        "ids",
        type=int,
        nargs="*",
        help="Pokédex ids to catch",
    )
    catch_parser.add_argument(
        "--all",
        action="store_true",
        help="Catch every Pokémon in the catalog",
    )
    catch_parser.set_defaults(func=_cmd_catch)

    return parser


def _load_app_config(args: argparse.Namespace) -> AppConfig:
    """Load config, applying CLI overrides."""
    return load_config(args.config, source=args.source, limit=args.limit)


# ------------------------------------------------------------------
# Command handlers
# ------------------------------------------------------------------


def _cmd_browse(args: argparse.Namespace) -> None:
    config = _load_app_config(args)
    snap = asyncio.run(_load_snapshot(config))
    _exit_on_error(snap)
    _print_header(snap)
    _print_grid(snap, config)


def _cmd_stats(args: argparse.Namespace) -> None:
    config = _load_app_config(args)
    snap = asyncio.run(_load_snapshot(config))
    _exit_on_error(snap)

    table = Table(title="Type Distribution")
    table.add_column("Type", style="bold")
    table.add_column("Count", justify="right")
    table.add_column("", no_wrap=True)
    for bar in category_bars(snap.category_counts):
        table.add_row(
            f"[{bar.color}]{bar.category.capitalize()}[/]",
            str(bar.count),
            f"[{bar.color}]{'█' * bar.count}[/]",
        )
    console.print(table)


def _cmd_catch(args: argparse.Namespace) -> None:
    if not args.ids and not args.all:
        console.print("[red]Give at least one id, or --all[/red]")
        sys.exit(2)
    config = _load_app_config(args)
    snap = asyncio.run(_run_catch(config, args.ids, catch_all=args.all))
    _exit_on_error(snap)
    _print_header(snap)
    _print_collection(snap, config)


async def _load_snapshot(config: AppConfig) -> EngineSnapshot:
    async with CollectionEngine(config) as engine:
        await engine.load()
        return engine.snapshot()


async def _run_catch(config: AppConfig, ids: List[int], catch_all: bool = False) -> EngineSnapshot:
    async with CollectionEngine(config) as engine:
        await engine.load()
        snap = engine.snapshot()
        if snap.catalog_status != READY:
            return snap

        targets = [e.id for e in snap.entries] if catch_all else ids
        names = {e.id: e.name for e in snap.entries}

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TextColumn("{task.completed}/{task.total}"),
            TimeElapsedColumn(),
            console=console,
        ) as progress:
            started = [i for i in targets if engine.initiate_acquire(i)]
            for i in targets:
                if i not in names:
                    console.print(f"[yellow]No Pokémon #{i} in the catalog[/yellow]")
            task = progress.add_task("Catching", total=len(started))

            def on_snapshot(s: EngineSnapshot, t=task) -> None:
                progress.update(t, completed=len([i for i in started if i in s.acquired]))

            unsubscribe = engine.subscribe(on_snapshot)
            await engine.wait_idle()
            unsubscribe()

        return engine.snapshot()


def _exit_on_error(snap: EngineSnapshot) -> None:
    if snap.catalog_status != READY:
        console.print(f"[red]Error loading Pokémon: {snap.error}[/red]")
        sys.exit(1)


def _print_header(snap: EngineSnapshot) -> None:
    console.print(
        f"\n[bold]Pokédex Progress: {progress_label(snap.acquired_count, snap.catalog_size)}[/bold]\n"
    )


def _print_grid(snap: EngineSnapshot, config: AppConfig) -> None:
    table = Table(title="Pokédex")
    table.add_column("#", justify="right", style="cyan")
    table.add_column("Name")
    table.add_column("Types")
    table.add_column("Sprite", overflow="fold")
    table.add_column("Status")
    for entry in snap.entries:
        table.add_row(
            str(entry.id),
            entry.name.capitalize(),
            ", ".join(entry.categories),
            snap.grid_assets.get(entry.id) or config.assets.placeholder_url,
            _STATUS_LABELS.get(snap.status_of(entry.id), "Catch"),
        )
    console.print(table)


def _print_collection(snap: EngineSnapshot, config: AppConfig) -> None:
    if not snap.collection:
        console.print("You haven't caught any Pokémon yet! Go catch some!")
        return

    if snap.complete:
        console.print("[bold yellow]🎉 Pokédex Complete! 🎉[/bold yellow]\n")

    table = Table(title="My Collection")
    table.add_column("#", justify="right", style="cyan")
    table.add_column("Name")
    table.add_column("Types")
    table.add_column("Sprite", overflow="fold")
    for entry in snap.collection:
        table.add_row(
            str(entry.id),
            entry.name.capitalize(),
            ", ".join(entry.categories),
            snap.collection_assets.get(entry.id) or config.assets.placeholder_url,
        )
    console.print(table)
