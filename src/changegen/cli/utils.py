"""
CLI utility helpers: factory construction and output formatting.
"""

from __future__ import annotations

import importlib
import json
from typing import Any, NoReturn

import typer
from rich.console import Console
from rich.table import Table

from changegen.core.errors import ChangeGenError
from changegen.core.settings import get_settings
from changegen.generators.discovery import GeneratorDiscovery, default_discovery
from changegen.generators.factory import ChangeGeneratorFactory

console = Console()
err_console = Console(stderr=True)


# ── Factory helper ───────────────────────────────────────────────────────


def load_discovery(target: str | None) -> GeneratorDiscovery:
    """Resolve ``module:attribute`` to a GeneratorDiscovery (or a callable returning one)."""
    if not target:
        return default_discovery()

    module_name, _, attribute = target.partition(":")
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        fail(f"Cannot import discovery module {module_name!r}: {exc}", code="DISCOVERY")
    except Exception as exc:
        fail(f"Importing discovery module {module_name!r} failed: {exc}", code="DISCOVERY")

    obj: Any = getattr(module, attribute or "discovery", None)
    if callable(obj) and not isinstance(obj, GeneratorDiscovery):
        try:
            obj = obj()
        except Exception as exc:
            fail(f"Discovery factory {target!r} failed: {exc}", code="DISCOVERY")
    if not isinstance(obj, GeneratorDiscovery):
        fail(f"{target!r} is not a GeneratorDiscovery")
    return obj


def make_factory(discovery: str | None = None) -> ChangeGeneratorFactory:
    """Build a factory for a CLI command, turning start-up errors into exit code 1."""
    try:
        return ChangeGeneratorFactory(load_discovery(discovery), get_settings())
    except ChangeGenError as exc:
        fail(exc.message, code=exc.category.value)


# ── Output helpers ───────────────────────────────────────────────────────


def fail(message: str, *, code: str = "ERROR") -> NoReturn:
    err_console.print(f"[bold red]Error[/bold red] ({code}): {message}", soft_wrap=True)
    raise typer.Exit(code=1)


def output_rows(
    rows: list[dict[str, Any]],
    *,
    as_json: bool = False,
    title: str = "",
) -> None:
    """Render a list of dicts as a Rich table, or JSON."""
    if as_json:
        console.print_json(json.dumps(rows, default=str))
        return

    if not rows:
        console.print("[dim]No items.[/dim]")
        return

    table = Table(title=title or None, show_lines=False, pad_edge=False)
    for col in rows[0]:
        table.add_column(col, overflow="fold")
    for row in rows:
        table.add_row(*(str(v) for v in row.values()))
    console.print(table)


def output_dict(data: dict[str, Any], *, as_json: bool = False, title: str = "") -> None:
    """Render a single dict as key-value pairs, or JSON."""
    if as_json:
        console.print_json(json.dumps(data, default=str))
        return
    if title:
        console.print(f"[bold]{title}[/bold]")
    for k, v in data.items():
        console.print(f"  [cyan]{k}[/cyan]: {v}")
