"""Parametrized help tests for all CLI commands."""

from __future__ import annotations

import pytest
from click.testing import CliRunner

from mlm.cli import cli

# (CLI args, expected keywords in output)
HELP_COMMANDS: list[tuple[list[str], list[str]]] = [
    (["--help"], ["migrate", "db", "terraform", "serve", "config", "--json", "--log-json"]),
    (["db", "--help"], ["recreate", "reset", "seed"]),
    (["db", "recreate", "--help"], ["--yes"]),
    (["db", "reset", "--help"], ["keep the schema"]),
    (["db", "seed", "--help"], ["lobby"]),
    (["migrate", "--help"], ["--down", "--step", "--check"]),
    (["terraform", "--help"], ["--yes"]),
    (["serve", "--help"], ["--host", "--port"]),
    (["config", "--help"], ["effective"]),
]


@pytest.mark.usefixtures("_isolated_project")
@pytest.mark.parametrize(
    "args,expected_keywords",
    HELP_COMMANDS,
    ids=["_".join(a for a in args if a != "--help") or "root" for args, _ in HELP_COMMANDS],
)
def test_help(cli_runner: CliRunner, args: list[str], expected_keywords: list[str]) -> None:
    result = cli_runner.invoke(cli, args)
    assert result.exit_code == 0
    for kw in expected_keywords:
        assert kw in result.output, f"Expected '{kw}' in help for {args}"
