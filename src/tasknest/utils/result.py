# Rev 0.2.0
"""Two-variant outcome for backup/export operations.

Callers branch on the variant (``isinstance(r, Success)`` or ``r.ok``)
instead of catching exceptions.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Generic, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class Success(Generic[T]):
    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Failure:
    message: str

    @property
    def ok(self) -> bool:
        return False


Result = Union[Success[T], Failure]
