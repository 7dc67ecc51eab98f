"""Identifier conversion at the domain/storage boundary.

Identifiers leave the store as decimal strings and come back in as
strings.  Storage keys are ``BIGINT`` columns (``INTEGER`` on SQLite),
both signed 64-bit, so the usable range is ``0 .. 2**63 - 1``; anything
larger is rejected here instead of overflowing inside the driver.  All
conversion goes through :func:`parse_id` and :func:`format_id` so a
change of key type touches only this module.

INVARIANT: malformed identifiers fail fast — a batch with one bad id is
rejected as a whole.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

from mlm.domain.errors import InvalidArgumentError

_DECIMAL = re.compile(r"[0-9]+")
# Largest value a signed 64-bit key column holds.
MAX_ID = 2**63 - 1


def parse_id(raw: str, *, kind: str = "") -> int:
    """Parse a decimal string identifier into its storage integer.

    Args:
        raw: The identifier as surfaced to callers (e.g. ``"42"``).
        kind: Label used in the error message (``"user"``, ``"created_by"``).

    Raises:
        InvalidArgumentError: If *raw* is not a decimal integer in
            ``0 .. MAX_ID``.
    """
    label = f"{kind} ID" if kind else "ID"
    if not isinstance(raw, str) or _DECIMAL.fullmatch(raw) is None:
        msg = f"invalid {label} {raw!r}: not an unsigned decimal integer"
        raise InvalidArgumentError(msg)
    value = int(raw)
    if value > MAX_ID:
        msg = f"invalid {label} {raw!r}: out of range (max {MAX_ID})"
        raise InvalidArgumentError(msg)
    return value


def parse_ids(raw_ids: Iterable[str], *, kind: str = "") -> list[int]:
    """Parse every identifier in *raw_ids*, failing on the first bad one."""
    return [parse_id(raw, kind=kind) for raw in raw_ids]


def format_id(value: int) -> str:
    """Render a storage integer as the caller-facing decimal string."""
    return str(value)
