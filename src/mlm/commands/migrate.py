"""Command: database schema migration."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from mlm.commands._base import MlmCommand

if TYPE_CHECKING:
    from mlm.commands._context import AppContext


@click.command(
    cls=MlmCommand,
    examples="""\
  mlm migrate                  # apply every pending revision
  mlm migrate --step 1         # apply only the next revision
  mlm migrate --down           # roll back the last revision
  mlm migrate --down --step 2
  mlm --json migrate --check""",
)
@click.option("--down", is_flag=True, help="Roll back instead of upgrading.")
@click.option(
    "--step",
    default=0,
    type=click.IntRange(min=0),
    help="Number of revisions to apply or roll back (0 = all up, 1 down).",
)
@click.option(
    "--check", "check_only", is_flag=True, help="Show pending migrations without applying."
)
@click.pass_obj
def migrate(app: AppContext, down: bool, step: int, check_only: bool) -> None:
    """Run pending database migrations."""
    from mlm.services.migration import MigrationService

    svc = MigrationService(app.db)
    if check_only:
        app.emit(svc.check_pending())
    elif down:
        app.emit(svc.downgrade(steps=step or 1))
    else:
        app.emit(svc.upgrade(steps=step))
