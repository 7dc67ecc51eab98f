"""Locate the ``mlm.toml`` that configures the database and server.

A checkout of the music app keeps ``mlm.toml`` at its root, so commands
run from any subdirectory (``migrations/``, ``scripts/``) find it by
walking up.  Deployments point ``MLM_CONFIG`` at a file instead; ``-c``
on the command line bypasses discovery altogether.
"""

from __future__ import annotations

import os
from pathlib import Path

CONFIG_FILENAME = "mlm.toml"
CONFIG_ENV_VAR = "MLM_CONFIG"


def find_config(start: Path | None = None) -> Path | None:
    """Return the config file for *start* (default: cwd), or None.

    ``MLM_CONFIG`` is authoritative: when it is set, a missing file means
    no config rather than falling back to the walk-up search.
    """
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        path = Path(env_path)
        return path if path.is_file() else None

    start_dir = (start or Path.cwd()).resolve()
    for directory in (start_dir, *start_dir.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None
