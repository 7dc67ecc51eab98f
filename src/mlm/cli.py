"""``mlm`` entry point.

The root group resolves settings once (flags, ``MUSICAPP_*`` environment,
``mlm.toml``), configures logging, and hands an :class:`AppContext` to
the subcommands.  The database engine is only created by commands that
need it and is disposed when the invocation ends.
"""

from __future__ import annotations

import click

from mlm import __version__
from mlm.commands import register_commands
from mlm.commands._context import AppContext
from mlm.config.settings import MlmSettings


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="mlm")
@click.option("--json", "json_output", is_flag=True, help="Print results as JSON.")
@click.option("-q", "--quiet", is_flag=True, help="Print only OK/ERROR lines.")
@click.option("-v", "--verbose", is_flag=True, help="Debug logging and error details.")
@click.option("--log-json", is_flag=True, help="Write logs to stderr as JSON lines.")
@click.option(
    "-c",
    "--config",
    "config_path",
    default=None,
    metavar="PATH",
    help="Use this mlm.toml instead of searching for one.",
)
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    quiet: bool,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
) -> None:
    """mlm — music app database and server CLI."""
    app = AppContext(
        MlmSettings.from_cli(
            config_path=config_path,
            json_output=json_output,
            quiet=quiet,
            verbose=verbose,
            log_json=log_json,
        )
    )
    ctx.obj = app
    ctx.call_on_close(app.close)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
