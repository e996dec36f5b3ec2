"""
authkit - Operation results

Two-variant outcome contract used by every typed operation:

- ``Ok(value)``: success, optionally carrying a value
- ``Err(fault)``: failure carrying one of the operation's named faults

``Err.code`` exposes the kebab-case kind (``"wrong-password"``,
``"token-expired"``...) so callers can branch without importing fault
classes. ``unwrap()`` turns an ``Err`` back into a raised fault.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, TypeVar, Union

from .faults import Fault

T = TypeVar("T")
F = TypeVar("F", bound=Fault)


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Operation succeeded."""
    value: T = None

    @property
    def is_ok(self) -> bool:
        return True

    @property
    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        return self.value

    def unwrap_or(self, default: Any) -> T:
        return self.value


@dataclass(frozen=True)
class Err(Generic[F]):
    """Operation failed with a named fault."""
    fault: F

    @property
    def is_ok(self) -> bool:
        return False

    @property
    def is_err(self) -> bool:
        return True

    @property
    def code(self) -> str:
        return self.fault.code

    def unwrap(self) -> Any:
        raise self.fault

    def unwrap_or(self, default: Any) -> Any:
        return default


Result = Union[Ok[T], Err[F]]
