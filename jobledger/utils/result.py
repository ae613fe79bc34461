"""
Tagged result type returned by record stores and the synchronizer.

    result = await store.get_by_id("jobs", job_id)
    if isinstance(result, Err):
        ...
    job = result.value

``unwrap()`` raises the carried ``LedgerError`` for call sites that simply
propagate failures.
"""

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

from jobledger.utils.errors import LedgerError

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def is_ok(self) -> bool:
        return True

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Err:
    error: LedgerError

    @property
    def is_ok(self) -> bool:
        return False

    def unwrap(self):
        raise self.error


Result = Union[Ok[T], Err]
