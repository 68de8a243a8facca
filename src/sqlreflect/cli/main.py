"""CLI commands for sqlreflect."""

import json
import logging
import sys
from pathlib import Path
from typing import Any, Callable

import click

from sqlreflect.config import Settings
from sqlreflect.exceptions import SqlReflectError
from sqlreflect.models import ConstraintType
from sqlreflect.reflector import Reflector
from sqlreflect.table import Table

CONSTRAINT_KINDS = [kind.value for kind in ConstraintType]


@click.group()
@click.version_option(package_name="sqlreflect")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to sqlreflect.toml (default: search upward from cwd)",
)
@click.option("--database-url", help="PostgreSQL connection URL")
@click.option("--catalog", help="Catalog (database) name")
@click.option("--schema", default="", help="Schema name (default: configured default)")
@click.option("--verbose", "-v", is_flag=True, help="Log catalog queries")
@click.pass_context
def cli(
    ctx: click.Context,
    config_path: Path | None,
    database_url: str | None,
    catalog: str | None,
    schema: str,
    verbose: bool,
) -> None:
    """sqlreflect - reflect table metadata from information_schema."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    settings = Settings.from_toml(config_path) if config_path else Settings.find_and_load()
    if database_url:
        settings.database.url = database_url
    if catalog:
        settings.database.catalog = catalog

    ctx.obj = {"settings": settings, "schema": schema}


def _run(ctx: click.Context, table_name: str, action: Callable[[Table], Any]) -> Any:
    settings: Settings = ctx.obj["settings"]
    try:
        with Reflector.from_settings(settings) as reflector:
            table = reflector.table(table_name, schema=ctx.obj["schema"])
            return action(table)
    except SqlReflectError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


def _emit(items: list[Any], output_json: bool, line: Callable[[Any], str]) -> None:
    if output_json:
        click.echo(json.dumps([item.to_dict() for item in items], indent=2))
        return
    for item in items:
        click.echo(line(item))


def _constraint_line(c: Any) -> str:
    text = f"{c.name}  {c.constraint_type}"
    if c.references is not None:
        ref = c.references
        text += (
            f"  ({', '.join(ref.columns)}) -> {ref.table.schema}.{ref.table.name}"
            f"({', '.join(ref.referenced_columns)})"
        )
    return text


@cli.command()
@click.argument("table")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
@click.pass_context
def columns(ctx: click.Context, table: str, output_json: bool) -> None:
    """List the columns of TABLE in ordinal order."""
    cols = _run(ctx, table, lambda t: t.columns())
    _emit(
        cols,
        output_json,
        lambda c: f"{c.ordinal_position:>3}  {c.name}  {c.data_type}  "
        f"nullable={c.is_nullable}",
    )


@cli.command()
@click.argument("table")
@click.option(
    "--type",
    "kind",
    type=click.Choice(CONSTRAINT_KINDS, case_sensitive=False),
    help="Only show constraints of this kind",
)
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
@click.pass_context
def constraints(ctx: click.Context, table: str, kind: str | None, output_json: bool) -> None:
    """List the constraints of TABLE."""
    if kind:
        found = _run(ctx, table, lambda t: t.constraints_by_type(kind.upper()))
    else:
        found = _run(ctx, table, lambda t: t.constraints())
    _emit(found, output_json, _constraint_line)


@cli.command("primary-key")
@click.argument("table")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
@click.pass_context
def primary_key(ctx: click.Context, table: str, output_json: bool) -> None:
    """Show the primary key of TABLE."""
    pk = _run(ctx, table, lambda t: t.primary_key())
    _emit([pk], output_json, _constraint_line)


@cli.command("foreign-keys")
@click.argument("table")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
@click.pass_context
def foreign_keys(ctx: click.Context, table: str, output_json: bool) -> None:
    """List the foreign keys of TABLE with their targets."""
    fks = _run(ctx, table, lambda t: t.foreign_keys())
    _emit(fks, output_json, _constraint_line)


@cli.command()
@click.argument("table")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
@click.pass_context
def privileges(ctx: click.Context, table: str, output_json: bool) -> None:
    """List the privileges granted on TABLE."""
    privs = _run(ctx, table, lambda t: t.privileges())
    _emit(
        privs,
        output_json,
        lambda p: f"{p.grantee}  {p.privilege_type}  grantable={p.is_grantable}",
    )


@cli.command()
@click.argument("table")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
@click.pass_context
def views(ctx: click.Context, table: str, output_json: bool) -> None:
    """List the views that reference TABLE."""
    found = _run(ctx, table, lambda t: t.in_views())
    _emit(found, output_json, lambda v: f"{v.schema}.{v.name}")


if __name__ == "__main__":
    cli()
