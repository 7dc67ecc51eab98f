"""Command: rebuild the database from scratch."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from mlm.commands._base import MlmCommand

if TYPE_CHECKING:
    from mlm.commands._context import AppContext


@click.command(
    cls=MlmCommand,
    examples="""\
  mlm terraform                # asks before dropping
  mlm terraform --yes
  mlm --json terraform --yes""",
)
@click.option("--yes", "-y", is_flag=True, help="Skip the confirmation prompt.")
@click.pass_obj
def terraform(app: AppContext, yes: bool) -> None:
    """Recreate the database, migrate it to head, and seed it."""
    from mlm.services.database import DatabaseService

    if not yes and not click.confirm(f"Destroy and rebuild {app.db.safe_url}?"):
        raise click.Abort()
    app.emit(DatabaseService(app.db).terraform())
