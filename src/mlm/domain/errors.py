"""Store error taxonomy.

Stores raise these; services convert them into ``ServiceError`` payloads
using :attr:`StoreError.code`.  Backing-store failures are always chained
from the driver exception so nothing is lost on the way up.
"""

from __future__ import annotations


class StoreError(Exception):
    """Base class for every error raised by the store layer."""

    code = "STORE_ERROR"


class InvalidArgumentError(StoreError, ValueError):
    """Malformed identifier or missing/invalid filter or update argument."""

    code = "INVALID_ARGUMENT"


class NotFoundError(StoreError):
    """Singular lookup matched zero rows."""

    code = "NOT_FOUND"


class AmbiguousError(StoreError):
    """Singular lookup matched more than one row."""

    code = "AMBIGUOUS"

    def __init__(self, message: str, *, count: int) -> None:
        super().__init__(message)
        self.count = count


class QueryFailedError(StoreError):
    code = "QUERY_FAILED"


class UpdateFailedError(StoreError):
    code = "UPDATE_FAILED"


class InsertFailedError(StoreError):
    code = "INSERT_FAILED"
