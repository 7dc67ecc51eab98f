"""MigrationService — ordered schema migrations with Alembic.

Revisions are applied in order, each exactly once; Alembic's version
table records where the database stands.
"""

from __future__ import annotations

import logging
from typing import Any

from alembic import command
from alembic.runtime.migration import MigrationContext
from alembic.script import ScriptDirectory

from mlm.infrastructure.database.migrations import build_config
from mlm.services.base import BaseService
from mlm.services.result import ServiceResult

logger = logging.getLogger(__name__)


class MigrationService(BaseService):
    """Applies and rolls back schema revisions."""

    def _current_revision(self) -> str | None:
        with self._db.connect() as conn:
            return MigrationContext.configure(conn).get_current_revision()

    def _pending(self, script: ScriptDirectory, current: str | None) -> list[dict[str, Any]]:
        """Revisions between *current* and head, oldest first."""
        head = script.get_current_head()
        pending: list[dict[str, Any]] = []
        if head is None or current == head:
            return pending
        rev_obj = script.get_revision(head)
        while rev_obj is not None and rev_obj.revision != current:
            pending.append({"revision": rev_obj.revision, "description": rev_obj.doc or ""})
            down = rev_obj.down_revision
            if down is None:
                break
            rev_obj = script.get_revision(str(down))
        pending.reverse()
        return pending

    def check_pending(self) -> ServiceResult:
        """List pending migrations without applying."""
        op = "migrate_check"
        try:
            script = ScriptDirectory.from_config(build_config(self._db.url))
            current = self._current_revision()
            pending = self._pending(script, current)
        except Exception as exc:
            return self._failure(op, exc, code="CHECK_FAILED")

        return ServiceResult(
            ok=True,
            op=op,
            data={
                "pending_count": len(pending),
                "pending": pending,
                "current": current,
                "head": script.get_current_head(),
            },
        )

    def upgrade(self, *, steps: int = 0) -> ServiceResult:
        """Apply pending migrations — all of them, or the next *steps*."""
        op = "migrate"
        if steps < 0:
            return self._failure(op, ValueError("step must not be negative"), code="INVALID_ARGUMENT")

        check = self.check_pending()
        if not check.ok:
            return check
        pending = check.data["pending"]
        if not pending:
            return ServiceResult(
                ok=True,
                op=op,
                data={
                    "applied_count": 0,
                    "current": check.data["current"],
                    "message": "Database is already up to date",
                },
            )

        to_apply = pending[:steps] if steps else pending
        target = f"+{len(to_apply)}" if steps else "head"
        try:
            command.upgrade(build_config(self._db.url), target)
        except Exception as exc:
            return self._failure(op, exc, code="MIGRATION_FAILED")

        for rev in to_apply:
            logger.info("Applied migration %s", rev["revision"])
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "applied_count": len(to_apply),
                "applied": [rev["revision"] for rev in to_apply],
                "current": self._current_revision(),
            },
        )

    def downgrade(self, *, steps: int = 1) -> ServiceResult:
        """Roll back the last *steps* applied migrations (default one)."""
        op = "migrate_down"
        if steps < 1:
            steps = 1

        try:
            current = self._current_revision()
        except Exception as exc:
            return self._failure(op, exc, code="CHECK_FAILED")
        if current is None:
            return ServiceResult(
                ok=True,
                op=op,
                data={"rolled_back_count": 0, "current": None, "message": "Nothing to roll back"},
            )

        try:
            command.downgrade(build_config(self._db.url), f"-{steps}")
        except Exception as exc:
            return self._failure(op, exc, code="MIGRATION_FAILED")

        return ServiceResult(
            ok=True,
            op=op,
            data={
                "rolled_back_count": steps,
                "previous": current,
                "current": self._current_revision(),
            },
        )
