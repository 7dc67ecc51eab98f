"""config — print the effective configuration."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from mlm.commands._base import MlmCommand

if TYPE_CHECKING:
    from mlm.commands._context import AppContext


def mask_password(password: str) -> str:
    """Keep the first two characters; shorter passwords become ``***``."""
    if len(password) <= 2:
        return "***"
    return password[:2] + "*" * (len(password) - 2)


@click.command(
    "config",
    cls=MlmCommand,
    examples="""\
  mlm config
  mlm -c ./staging.toml config
  mlm --json config""",
)
@click.pass_obj
def config_cmd(app: AppContext) -> None:
    """Show the effective database and server settings."""
    from mlm.infrastructure.app_db import AppDatabase
    from mlm.services.result import ServiceResult

    settings = app.settings
    database = settings.database.model_dump()
    database["password"] = mask_password(settings.database.password)
    if database["url"]:
        database["url"] = AppDatabase(database["url"]).safe_url

    app.emit(
        ServiceResult(
            ok=True,
            op="config",
            data={
                "config_file": str(settings.config_path) if settings.config_path else None,
                "url": AppDatabase.from_settings(settings).safe_url,
                "database": database,
                "server": settings.server.model_dump(),
            },
        )
    )
