"""BaseService — shared foundation for mlm services.

Every service receives an :class:`AppDatabase` at construction time and
owns its transaction boundaries via ``self._db.transaction()``.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from mlm.domain.errors import StoreError
from mlm.services.result import ServiceError, ServiceResult

if TYPE_CHECKING:
    from mlm.infrastructure.app_db import AppDatabase

logger = logging.getLogger(__name__)


class BaseService:
    """Base for all service-layer classes.

    Usage::

        class DatabaseService(BaseService):
            def seed(self) -> ServiceResult:
                with self._db.transaction() as conn:
                    ...
    """

    def __init__(self, db: AppDatabase) -> None:
        self._db = db

    @staticmethod
    def _failure(
        op: str,
        exc: Exception,
        *,
        code: str | None = None,
        detail: dict[str, Any] | None = None,
    ) -> ServiceResult:
        """Convert *exc* into a failed ServiceResult.

        Store errors carry their own code; anything else needs *code*.
        """
        if code is None:
            code = exc.code if isinstance(exc, StoreError) else "UNEXPECTED_ERROR"
        logger.debug("%s failed: %s", op, exc, exc_info=True)
        return ServiceResult(
            ok=False,
            op=op,
            error=ServiceError(code=code, message=str(exc), detail=detail or {}),
        )
