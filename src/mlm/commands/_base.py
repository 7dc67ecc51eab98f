"""Click classes shared by every mlm command.

``db recreate`` and ``terraform`` destroy data, so each command carries
copy-pasteable invocations behind ``--examples`` rather than in its help
text.  Commands declare them with ``examples="..."``; groups hand the same
keyword down to their subcommands.
"""

from __future__ import annotations

from typing import Any

import click


def _examples_callback(examples: str) -> Any:
    def callback(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
        # Eager: runs before required options are checked or the database is touched.
        if not value or ctx.resilient_parsing:
            return
        click.echo(f"Examples for '{ctx.command_path}':\n")
        click.echo(examples)
        ctx.exit(0)

    return callback


class _ExamplesMixin:
    """Stores ``examples`` and registers the ``--examples`` flag when given."""

    params: list[click.Parameter]

    def _init_examples(self, examples: str | None) -> None:
        self.examples = examples
        if not examples:
            return
        self.params.append(
            click.Option(
                ["--examples"],
                is_flag=True,
                expose_value=False,
                is_eager=True,
                callback=_examples_callback(examples),
                help="Show usage examples and exit.",
            )
        )


class MlmCommand(_ExamplesMixin, click.Command):
    """A leaf command (``migrate``, ``serve``, ``db seed`` ...)."""

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._init_examples(examples)


class MlmGroup(_ExamplesMixin, click.Group):
    """A command group (``db``); its subcommands are :class:`MlmCommand`."""

    command_class = MlmCommand

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._init_examples(examples)
