"""serve — run the HTTP server under uvicorn."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from mlm.commands._base import MlmCommand

if TYPE_CHECKING:
    from mlm.commands._context import AppContext


@click.command(
    cls=MlmCommand,
    examples="""\
  # Bind to the [server] settings (0.0.0.0:8080 by default)
  mlm serve

  # Custom host/port
  mlm serve --host 127.0.0.1 --port 9000""",
)
@click.option("--host", default=None, help="Bind address (default: [server] host).")
@click.option("--port", default=None, type=int, help="Listen port (default: [server] port).")
@click.pass_obj
def serve(app: AppContext, host: str | None, port: int | None) -> None:
    """Check database connectivity, then serve the HTTP API."""
    from sqlalchemy.exc import SQLAlchemyError

    try:
        app.db.ping()
    except SQLAlchemyError as exc:
        click.echo(f"ERROR: serve — cannot reach database {app.db.safe_url}: {exc}", err=True)
        raise SystemExit(1) from exc

    import uvicorn

    from mlm.server import create_app

    uvicorn.run(
        create_app(app.db),
        host=host if host is not None else app.settings.server.host,
        port=port if port is not None else app.settings.server.port,
        log_config=None,
    )
