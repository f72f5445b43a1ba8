"""
Result values returned by the public Ledger API.

Every caller-facing operation returns either Ok(value) or Err(error), so a
rejected stock-out is an ordinary value the caller has to look at instead of
an exception that may be forgotten.

Usage:
    result = ledger.record_out(product, 5, actor='bob')
    if result.ok:
        movement = result.value
    elif result.error.code == 'INSUFFICIENT_STOCK':
        print(f"Only {result.error.available} available")
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import wraps
from typing import Any, Generic, TypeVar

from stockledger.exceptions import LedgerError

T = TypeVar('T')


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    ok = True
    error = None
    code = None

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Err:
    error: LedgerError

    ok = False
    value = None

    @property
    def code(self) -> str:
        return self.error.code

    def unwrap(self) -> Any:
        """Re-raise the carried error."""
        raise self.error


Result = Ok | Err


def returns_result(func):
    """Wrap a method so LedgerError becomes Err and a return value becomes Ok."""

    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return Ok(func(*args, **kwargs))
        except LedgerError as exc:
            return Err(exc)

    return wrapper
