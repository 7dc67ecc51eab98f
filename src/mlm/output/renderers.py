"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a Rich Console (backed by StringIO).  The caller
extracts the rendered text via ``get_output(console)``.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

import json as _json
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from mlm.output.console import create_console, get_output

if TYPE_CHECKING:
    from rich.console import Console

    from mlm.services.result import ServiceResult


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich.

    Returns plain text (no ANSI) when Rich detects no terminal,
    which is the case inside Click's CliRunner and piped output.
    """
    console = create_console()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Render minimal output for ``--quiet`` mode."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op} — {msg}"
    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    """Print the OK status line."""
    label = Text("OK", style="mlm.ok")
    op = Text(f"  {result.op}", style="mlm.op")
    console.print(label, op, end="")
    console.print()


def _field(console: Console, key: str, value: Any, *, indent: int = 2) -> None:
    """Print a single indented key-value field."""
    k = Text(f"{' ' * indent}{key}:", style="mlm.key")
    if isinstance(value, (dict, list)):
        v = Text(_json.dumps(value, separators=(",", ":"), default=str))
    elif key == "id" or key.endswith("_id"):
        v = Text(str(value), style="mlm.id")
    elif key in ("current", "head", "previous"):
        v = Text(str(value), style="mlm.revision")
    elif key == "password":
        v = Text(str(value), style="mlm.secret")
    else:
        v = Text(str(value))
    console.print(k, v, end="")
    console.print()


def _count_table(counts: dict[str, int], *, label: str) -> Table:
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Table", style="mlm.key", no_wrap=True)
    table.add_column(label, justify="right")
    for name, count in counts.items():
        table.add_row(name, str(count))
    return table


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    label = Text("ERROR", style="mlm.error")
    op = Text(f"  {result.op}", style="mlm.op")
    sep = Text(" — ")
    console.print(label, op, sep, Text(msg))

    if err and verbose:
        console.print(Text(f"  code: {err.code}", style="dim"))
        for k, v in err.detail.items():
            console.print(Text(f"    {k}: {v}"))


# ── Database lifecycle ────────────────────────────────────────────────


def _render_migration(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render migrate / migrate_down / migrate_check results."""
    _status_line(console, result)
    d = result.data
    for key in (
        "applied_count",
        "rolled_back_count",
        "pending_count",
        "previous",
        "current",
        "head",
        "message",
    ):
        if key in d:
            _field(console, key, d[key])
    if d.get("pending") and (verbose or result.op == "migrate_check"):
        console.print()
        for p in d["pending"]:
            console.print(Text(f"  {p['revision']}: {p['description']}"))


def _render_reset(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    console.print(_count_table(result.data.get("deleted", {}), label="Deleted"))


def _render_recreate(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    _field(console, "dropped", ", ".join(result.data.get("dropped", [])))


def _render_terraform(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render each step of terraform as its own block."""
    _status_line(console, result)
    for step, data in result.data.items():
        console.print(Text(f"  {step}", style="mlm.op"))
        for key, value in data.items():
            if key == "pending" and not verbose:
                continue
            _field(console, key, value, indent=4)


def _render_config(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render the effective configuration, one section per block."""
    _status_line(console, result)
    d = result.data
    _field(console, "config_file", d.get("config_file") or "(none)")
    _field(console, "url", d.get("url", ""))
    for section in ("database", "server"):
        values = d.get(section) or {}
        console.print(Text(f"  [{section}]", style="mlm.op"))
        for key, value in values.items():
            _field(console, key, "" if value is None else value, indent=4)


# ── Generic fallback ──────────────────────────────────────────────────


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Fallback renderer: status line + all data as key-value pairs."""
    _status_line(console, result)
    for key, value in result.data.items():
        _field(console, key, value)


# ── Dispatch table ────────────────────────────────────────────────────

_OP_RENDERERS: dict[str, Any] = {
    "migrate": _render_migration,
    "migrate_down": _render_migration,
    "migrate_check": _render_migration,
    "db_recreate": _render_recreate,
    "db_reset": _render_reset,
    "db_seed": _render_generic,
    "terraform": _render_terraform,
    "config": _render_config,
}
