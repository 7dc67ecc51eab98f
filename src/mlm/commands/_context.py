"""AppContext — shared Click context for all commands.

Created once by the root CLI group and flows to all subcommands via
``@click.pass_obj``.  Provides lazy database access and centralized
result emission (stdout/stderr routing + exit codes).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from mlm.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from mlm.config.settings import MlmSettings
    from mlm.infrastructure.app_db import AppDatabase
    from mlm.services.result import ServiceResult


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    The database handle is created on first use so ``--help``,
    ``--version`` and ``config`` never open a connection.
    """

    def __init__(self, settings: MlmSettings) -> None:
        self.settings = settings
        self._db: AppDatabase | None = None

        from mlm.config.logging import configure_logging

        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

    @property
    def db(self) -> AppDatabase:
        """The database handle (created lazily on first access)."""
        if self._db is None:
            from mlm.infrastructure.app_db import AppDatabase

            self._db = AppDatabase.from_settings(self.settings)
        return self._db

    def close(self) -> None:
        if self._db is not None:
            self._db.close()
            self._db = None

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success (``result.ok``): writes to stdout, returns normally.
          Warnings are emitted to stderr so they don't pollute piped output.
        * Failure: writes to stderr, exits with code 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            # In JSON mode, warnings are already in the serialized payload.
            if not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)
