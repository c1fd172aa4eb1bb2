"""
itemdata CLI.

Developer commands for inspecting data types:
- describe: show a type's category, link mode and key mapping
- defaults: print the tree a type writes on first access
- version: show the installed version
"""

from __future__ import annotations

import importlib
import json
import uuid
from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.table import Table

from itemdata._version import get_version
from itemdata.core import (
    ItemDataError,
    ItemDataHelper,
    ItemStack,
    category_of,
    config_from_env,
    configure_logging,
    load_config,
)

app = typer.Typer(
    help="Inspect item data types and the trees they produce",
    no_args_is_help=True,
)

console = Console()


def _load_type(target: str) -> type:
    """Import a type given as ``package.module:ClassName``."""
    module_name, sep, attr = target.partition(":")
    if not sep or not module_name or not attr:
        typer.echo(f"Expected MODULE:CLASS, got '{target}'", err=True)
        raise typer.Exit(code=1)

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        typer.echo(f"Cannot import module '{module_name}': {e}", err=True)
        raise typer.Exit(code=1)

    obj: Any = module
    for part in attr.split("."):
        obj = getattr(obj, part, None)
        if obj is None:
            typer.echo(f"'{attr}' not found in module '{module_name}'", err=True)
            raise typer.Exit(code=1)

    if not isinstance(obj, type):
        typer.echo(f"'{target}' is not a class", err=True)
        raise typer.Exit(code=1)
    return obj


def _make_helper(config_path: Path | None) -> ItemDataHelper:
    try:
        config = config_from_env(load_config(config_path) if config_path else None)
    except ItemDataError as e:
        typer.echo(f"Error loading config: {e}", err=True)
        raise typer.Exit(code=1)
    configure_logging(config)
    return ItemDataHelper(config=config)


def _json_default(value: Any) -> Any:
    if isinstance(value, bytes):
        return value.hex()
    if isinstance(value, uuid.UUID):
        return str(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


@app.command("describe")
def describe(
    target: str = typer.Argument(..., help="Data type as MODULE:CLASS"),
    config: Path | None = typer.Option(None, "--config", "-c", help="TOML settings file"),
) -> None:
    """Show how a data type is linked to its tree."""
    data_type = _load_type(target)
    helper = _make_helper(config)

    try:
        link = helper.link_for(data_type)
    except ItemDataError as e:
        typer.echo(f"Error building link: {e}", err=True)
        raise typer.Exit(code=1)

    console.print(f"[bold]{data_type.__name__}[/bold]")
    console.print(f"Category: {category_of(data_type) or '-'}")
    console.print(f"Mode: {link.mode.value}")

    table = Table(show_header=True, header_style="bold")
    table.add_column("Key")
    table.add_column("Kind")
    table.add_column("Field")
    table.add_column("Type")
    for key, ref in link.scalars.items():
        table.add_row(key, "scalar", ref.name, _type_label(ref.annotation))
    for key, ref in link.composites.items():
        table.add_row(key, "composite", ref.name, _type_label(ref.annotation))
    console.print(table)


@app.command("defaults")
def defaults(
    target: str = typer.Argument(..., help="Data type as MODULE:CLASS"),
    config: Path | None = typer.Option(None, "--config", "-c", help="TOML settings file"),
) -> None:
    """Print the tree a data type writes on first access, as JSON."""
    data_type = _load_type(target)
    helper = _make_helper(config)

    category = category_of(data_type)
    if category is None:
        typer.echo(f"'{data_type.__name__}' has no category", err=True)
        raise typer.Exit(code=1)

    stack = ItemStack(item="inspect")
    try:
        helper.get(data_type, stack)
    except ItemDataError as e:
        typer.echo(f"Error populating defaults: {e}", err=True)
        raise typer.Exit(code=1)

    tree = stack.get_or_create_subtree(category)
    typer.echo(json.dumps(tree.to_dict(), indent=2, default=_json_default))


@app.command("version")
def version() -> None:
    """Show the installed version."""
    typer.echo(f"itemdata {get_version()}")


def _type_label(annotation: Any) -> str:
    if isinstance(annotation, type):
        return annotation.__name__
    return repr(annotation)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
