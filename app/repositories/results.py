"""Result values returned by the storage layer.

Repositories never re-raise driver exceptions to their callers. Instead each
operation returns a ``StoreResult`` whose ``status`` lets the jobs and routers
choose between retrying later (``UNAVAILABLE``), reporting a miss
(``NOT_FOUND``) and reporting a clash (``CONFLICT``).
"""
from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class TransientFetchError(Exception):
    """The source or catalog store could not be reached."""


class StoreStatus(str, Enum):
    OK = "ok"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    UNAVAILABLE = "unavailable"


@dataclass
class StoreResult(Generic[T]):
    status: StoreStatus
    value: Optional[T] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.status is StoreStatus.OK

    @property
    def detail(self) -> str:
        return str(self.error) if self.error else self.status.value

    @classmethod
    def success(cls, value: Optional[T] = None) -> "StoreResult[T]":
        return cls(StoreStatus.OK, value=value)

    @classmethod
    def not_found(cls, message: str) -> "StoreResult[T]":
        return cls(StoreStatus.NOT_FOUND, error=LookupError(message))

    @classmethod
    def conflict(cls, exc: Exception) -> "StoreResult[T]":
        return cls(StoreStatus.CONFLICT, error=exc)

    @classmethod
    def unavailable(cls, message: str, cause: Optional[BaseException] = None) -> "StoreResult[T]":
        error = TransientFetchError(message)
        error.__cause__ = cause
        return cls(StoreStatus.UNAVAILABLE, error=error)
