"""
Root Typer application for the changegen CLI.

Inspect which generators a discovery yields, which of them would handle a
given object type, and the ordering hints they declare::

    changegen generators --discovery acme.generators:discovery
    changegen candidates missing table --database postgresql
    changegen ordering column --database oracle --json
"""

from __future__ import annotations

import typer
from typer import Typer

from changegen.cli.utils import fail, make_factory, output_dict, output_rows
from changegen.core.database import Database
from changegen.core.errors import ChangeGenError
from changegen.core.logging import configure_logging
from changegen.core.settings import get_settings
from changegen.core.structure import resolve_object_type
from changegen.generators.base import Capability, capabilities_of

app = Typer(
    name="changegen",
    help="changegen: dispatch schema-diff results to change generators.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# ── Version / logging callback ───────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        from changegen import __version__

        typer.echo(f"changegen {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """changegen CLI: inspect generators, candidates and ordering hints."""
    try:
        settings = get_settings()
    except ChangeGenError as exc:
        fail(exc.message, code=exc.category.value)
    configure_logging(level=settings.log_level, json_format=settings.json_logs)


# ── Option helpers ───────────────────────────────────────────────────────

DiscoveryOption = typer.Option(
    None, "--discovery", "-g", help="module:attribute of a GeneratorDiscovery to load."
)
DatabaseOption = typer.Option("unknown", "--database", "-d", help="Database type.")
JsonOption = typer.Option(False, "--json")


def _database(name: str) -> Database:
    try:
        return Database.of(name)
    except ChangeGenError as exc:
        fail(exc.message, code=exc.category.value)


def _object_type(name: str) -> type:
    try:
        return resolve_object_type(name)
    except ChangeGenError as exc:
        fail(exc.message, code=exc.category.value)


def _capability(name: str) -> Capability:
    try:
        return Capability.parse(name)
    except ValueError as exc:
        fail(str(exc), code="USAGE")


# ── Commands ─────────────────────────────────────────────────────────────


@app.command("generators")
def list_generators(
    discovery: str | None = DiscoveryOption,
    json_out: bool = JsonOption,
) -> None:
    """List registered generators in registration order."""
    factory = make_factory(discovery)
    rows = [
        {
            "generator": generator.name,
            "capabilities": ",".join(c.value for c in capabilities_of(generator)),
        }
        for generator in factory.generators()
    ]
    output_rows(rows, as_json=json_out, title="Generators")


@app.command("candidates")
def show_candidates(
    capability: str = typer.Argument(..., help="missing, unexpected or changed"),
    object_type: str = typer.Argument(..., help="Object type, e.g. table"),
    database: str = DatabaseOption,
    discovery: str | None = DiscoveryOption,
    json_out: bool = JsonOption,
) -> None:
    """Show the ordered candidate set for a capability and object type."""
    cap = _capability(capability)
    obj_type = _object_type(object_type)
    db = _database(database)
    factory = make_factory(discovery)
    rows = [
        {"position": index, "generator": ranked.generator.name, "priority": ranked.priority}
        for index, ranked in enumerate(factory.rank_candidates(cap, obj_type, db), start=1)
    ]
    output_rows(rows, as_json=json_out, title=f"{cap.value} {obj_type.__name__} on {db}")


@app.command("ordering")
def show_ordering(
    object_type: str = typer.Argument(..., help="Object type, e.g. column"),
    database: str = DatabaseOption,
    discovery: str | None = DiscoveryOption,
    json_out: bool = JsonOption,
) -> None:
    """Show the types that must run before and after an object type."""
    obj_type = _object_type(object_type)
    db = _database(database)
    factory = make_factory(discovery)
    data = {
        "object_type": obj_type.__name__,
        "run_after": sorted(t.__name__ for t in factory.run_after_types(obj_type, db)),
        "run_before": sorted(t.__name__ for t in factory.run_before_types(obj_type, db)),
    }
    output_dict(data, as_json=json_out, title=f"Ordering for {obj_type.__name__} on {db}")


def run() -> None:
    app()
