"""AppDatabase — the engine owner handed to every service.

Services never create engines themselves; they receive an AppDatabase
and take connections from it.  The stores stay stateless: a service
opens :meth:`AppDatabase.transaction` and passes the yielded connection
into each store call, so commit/rollback is decided at the service
boundary.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING

from sqlalchemy import text

from mlm.infrastructure.database.engine import create_db_engine

if TYPE_CHECKING:
    from collections.abc import Iterator

    from sqlalchemy import Connection
    from sqlalchemy.engine import Engine

    from mlm.config.settings import MlmSettings

logger = logging.getLogger(__name__)


class AppDatabase:
    """Lazily connected handle over the configured database."""

    def __init__(self, url: str) -> None:
        self.url = url
        self._engine: Engine | None = None

    @classmethod
    def from_settings(cls, settings: MlmSettings) -> AppDatabase:
        return cls(settings.database_url())

    @property
    def engine(self) -> Engine:
        """The SQLAlchemy engine (created on first access)."""
        if self._engine is None:
            logger.debug("Creating engine for %s", self.safe_url)
            self._engine = create_db_engine(self.url)
        return self._engine

    @property
    def safe_url(self) -> str:
        """The URL with any password masked, for logs and output."""
        from sqlalchemy.engine import make_url

        return make_url(self.url).render_as_string(hide_password=True)

    @contextmanager
    def transaction(self) -> Iterator[Connection]:
        """Yield a connection inside ``BEGIN``; commit on success, roll back on error."""
        with self.engine.begin() as conn:
            yield conn

    @contextmanager
    def connect(self) -> Iterator[Connection]:
        """Yield a plain connection for read-only work."""
        with self.engine.connect() as conn:
            yield conn

    def ping(self) -> None:
        """Run ``SELECT 1``; raises ``SQLAlchemyError`` when unreachable."""
        with self.engine.connect() as conn:
            conn.execute(text("SELECT 1"))

    def close(self) -> None:
        """Dispose the engine's pool."""
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
