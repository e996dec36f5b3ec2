"""
authkit faults - Core types and fault taxonomy.

Defines:
- Fault base class (structured fault objects)
- FaultDomain (explicit fault domains)
- Severity levels
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional


# ============================================================================
# Severity & Domain
# ============================================================================

class Severity(str, Enum):
    """
    Fault severity levels.

    Determines the logging level used when a fault is reported.
    """
    INFO = "info"
    WARN = "warn"
    ERROR = "error"
    FATAL = "fatal"


class FaultDomain:
    """
    Fault domains (taxonomy).

    Identifies the kind of failure, which in turn tells a caller what it
    can do about it (fix the input, pick another value, wait, re-authenticate).
    """

    def __init__(self, name: str, description: str = ""):
        self.name = name
        self.value = name
        self.description = description

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"FaultDomain(name='{self.name}')"

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, FaultDomain):
            return self.name == other.name
        return str(self) == str(other)

    def __hash__(self) -> int:
        return hash(self.name)


# Standard Domains
FaultDomain.VALIDATION = FaultDomain("validation", "Malformed input")
FaultDomain.NOT_FOUND = FaultDomain("not_found", "Unknown account, email or token")
FaultDomain.CONFLICT = FaultDomain("conflict", "Value already taken")
FaultDomain.TEMPORAL = FaultDomain("temporal", "Rate limits and expiry")
FaultDomain.SESSION = FaultDomain("session", "Missing or stale session")
FaultDomain.SECURITY = FaultDomain("security", "Credential and token checks")
FaultDomain.CONFIG = FaultDomain("config", "Configuration errors")
FaultDomain.SYSTEM = FaultDomain("system", "Unexpected failures")


# Domain defaults
DOMAIN_DEFAULTS = {
    FaultDomain.VALIDATION: {"severity": Severity.INFO, "retryable": False},
    FaultDomain.NOT_FOUND: {"severity": Severity.INFO, "retryable": False},
    FaultDomain.CONFLICT: {"severity": Severity.INFO, "retryable": False},
    FaultDomain.TEMPORAL: {"severity": Severity.WARN, "retryable": True},
    FaultDomain.SESSION: {"severity": Severity.WARN, "retryable": False},
    FaultDomain.SECURITY: {"severity": Severity.WARN, "retryable": False},
    FaultDomain.CONFIG: {"severity": Severity.FATAL, "retryable": False},
    FaultDomain.SYSTEM: {"severity": Severity.ERROR, "retryable": False},
}


# ============================================================================
# Fault - Base Class
# ============================================================================

class Fault(Exception):
    """
    Base fault class - structured, typed fault object.

    A fault is a first-class value with:
    - Stable machine-readable code
    - Human-readable message
    - Severity level
    - Domain classification
    - Retry semantics
    - Public exposure control

    Faults may be raised OR carried inside a result (see ``authkit.result``).
    Subclasses usually declare ``code``, ``message`` and ``domain`` as class
    attributes; keyword arguments not consumed by the constructor end up in
    ``metadata``.

    Example:
        ```python
        raise Fault(
            code="ledger-corrupt",
            message="Reset ledger references an unknown email",
            domain=FaultDomain.SYSTEM,
        )
        ```
    """

    def __init__(
        self,
        code: str | None = None,
        message: str | None = None,
        *,
        domain: FaultDomain | None = None,
        severity: Optional[Severity] = None,
        retryable: Optional[bool] = None,
        public: bool | None = None,
        metadata: Optional[dict[str, Any]] = None,
        **context: Any,
    ):
        # Fallback to class attributes if not provided
        self.code = code if code is not None else getattr(type(self), "code", None)
        self.message = message if message is not None else getattr(type(self), "message", None)
        self.domain = domain if domain is not None else getattr(type(self), "domain", None)

        if self.code is None or self.message is None or self.domain is None:
            raise TypeError(f"{self.__class__.__name__} missing required code, message, or domain")

        super().__init__(self.message)

        defaults = DOMAIN_DEFAULTS.get(self.domain, {"severity": Severity.ERROR, "retryable": False})
        self.severity = severity or getattr(type(self), "severity", None) or defaults["severity"]
        if retryable is None:
            retryable = getattr(type(self), "retryable", None)
        self.retryable = retryable if retryable is not None else defaults["retryable"]

        if public is None:
            public = getattr(type(self), "public", False)
        self.public = public

        self.metadata = dict(metadata or {})
        self.metadata.update(context)

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(code={self.code!r}, domain={self.domain.value}, "
            f"severity={self.severity.value}, public={self.public})"
        )

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, Fault):
            return NotImplemented
        return (
            type(self) is type(other)
            and self.code == other.code
            and self.message == other.message
            and self.metadata == other.metadata
        )

    def __hash__(self) -> int:
        return hash((type(self), self.code, self.message))

    def to_dict(self) -> dict[str, Any]:
        """
        Serialize fault to dictionary.

        Returns:
            Dictionary representation suitable for logging/serialization
        """
        return {
            "code": self.code,
            "message": self.message,
            "domain": self.domain.value,
            "severity": self.severity.value,
            "retryable": self.retryable,
            "public": self.public,
            "metadata": self.metadata,
        }
