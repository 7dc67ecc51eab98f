"""Alembic migration infrastructure for the music app database.

Provides programmatic Alembic configuration — no alembic.ini needed.
The migration scripts live alongside this module and are applied in
revision order.
"""

from __future__ import annotations

from pathlib import Path

from alembic.config import Config


def build_config(db_url: str) -> Config:
    """Build an Alembic Config pointing at our migration scripts."""
    cfg = Config()
    cfg.set_main_option("script_location", str(Path(__file__).parent))
    # ConfigParser interpolation: a literal "%" (e.g. in a password) must be doubled.
    cfg.set_main_option("sqlalchemy.url", db_url.replace("%", "%%"))
    return cfg
