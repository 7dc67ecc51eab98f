"""Subcommand modules for mlm.

Provides register_commands() which uses deferred imports to keep
``mlm --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register the ``db`` group and the standalone commands on the root group."""
    # --- Groups ---
    from mlm.commands.db import db

    cli.add_command(db)

    # --- Standalone commands ---
    from mlm.commands.config_cmd import config_cmd
    from mlm.commands.migrate import migrate
    from mlm.commands.serve import serve
    from mlm.commands.terraform import terraform

    cli.add_command(migrate)
    cli.add_command(terraform)
    cli.add_command(serve)
    cli.add_command(config_cmd)
