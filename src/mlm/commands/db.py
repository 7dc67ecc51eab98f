"""Command group: whole-database maintenance (recreate, reset, seed)."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from mlm.commands._base import MlmGroup

if TYPE_CHECKING:
    from mlm.commands._context import AppContext

_DB_EXAMPLES = """\
  mlm db recreate --yes
  mlm db reset
  mlm db seed
  mlm --json db seed"""


@click.group(cls=MlmGroup, examples=_DB_EXAMPLES)
@click.pass_obj
def db(app: AppContext) -> None:
    """Recreate, reset, or seed the database."""


@db.command(
    examples="""\
  mlm db recreate              # asks before dropping
  mlm db recreate --yes"""
)
@click.option("--yes", "-y", is_flag=True, help="Skip the confirmation prompt.")
@click.pass_obj
def recreate(app: AppContext, yes: bool) -> None:
    """Drop every table, including the migration version table."""
    from mlm.services.database import DatabaseService

    if not yes and not click.confirm(f"Drop all tables in {app.db.safe_url}?"):
        raise click.Abort()
    app.emit(DatabaseService(app.db).recreate())


@db.command(
    examples="""\
  mlm db reset
  mlm -q db reset"""
)
@click.pass_obj
def reset(app: AppContext) -> None:
    """Delete all rows but keep the schema."""
    from mlm.services.database import DatabaseService

    app.emit(DatabaseService(app.db).reset())


@db.command(
    examples="""\
  mlm migrate && mlm db seed
  mlm --json db seed"""
)
@click.pass_obj
def seed(app: AppContext) -> None:
    """Insert the fixture users, a lobby room, and its members."""
    from mlm.services.database import DatabaseService

    app.emit(DatabaseService(app.db).seed())
