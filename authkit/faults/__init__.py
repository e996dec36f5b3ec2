"""
authkit faults - Structured fault signals.

Failures in authkit are typed faults with a stable code, a domain and
retry semantics. They are either raised or carried inside an ``Err``.

Core exports:
- Fault: Base fault class
- FaultDomain: Domain enumeration
- Severity: Severity levels
"""

from .core import (
    DOMAIN_DEFAULTS,
    Fault,
    FaultDomain,
    Severity,
)

__all__ = [
    "DOMAIN_DEFAULTS",
    "Fault",
    "FaultDomain",
    "Severity",
]
