"""Explicit tri-state optional fields for filters and partial updates.

A filter or update field is either :data:`UNSET` (not applied) or a
:class:`Value` wrapping the payload.  ``Value("")`` is a real predicate on
the empty string, and ``Value(None)`` targets SQL ``NULL`` — neither is
confused with "not applied".
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Generic, TypeGuard, TypeVar, Union

T = TypeVar("T")


class Unset(enum.Enum):
    """Single-member enum so ``UNSET`` is a typed, picklable sentinel."""

    UNSET = "UNSET"

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET = Unset.UNSET


@dataclass(frozen=True)
class Value(Generic[T]):
    """A present field carrying *value*."""

    value: T


Nullable = Union[Unset, Value[T]]


def is_set(field: Nullable[T]) -> TypeGuard[Value[T]]:
    """Return True when *field* carries a value (narrows it to :class:`Value`)."""
    return isinstance(field, Value)


def value_or(field: Nullable[T], default: T) -> T:
    """Unwrap *field*, falling back to *default* when unset."""
    if isinstance(field, Value):
        return field.value
    return default
