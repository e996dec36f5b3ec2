"""
authkit - Authentication Faults

Structured error types for identity operations. Each fault's ``code`` is
the kebab-case error kind surfaced through ``Err.code``.
"""

from __future__ import annotations

import hashlib
import logging
from typing import Any, Awaitable, Callable, TypeVar

from authkit.faults import Fault, FaultDomain, Severity
from authkit.result import Err, Ok, Result

logger = logging.getLogger("authkit.auth.faults")

T = TypeVar("T")


class AuthFault(Fault):
    """Base class for identity faults."""
    domain = FaultDomain.SECURITY
    public = True

    @staticmethod
    def _hash_identifier(value: str) -> str:
        """Stable, non-reversible tag for emails in fault metadata."""
        return hashlib.sha256(value.encode()).hexdigest()[:12]

    def to_result(self) -> Err:
        return Err(self)


# ============================================================================
# Input validation
# ============================================================================

class AUTH_INVALID_EMAIL(AuthFault):
    """Email is not syntactically valid."""
    domain = FaultDomain.VALIDATION
    code = "invalid-email"
    message = "Invalid email format"

    def __init__(self, email: str | None = None, **context):
        super().__init__(**context)
        if email is not None:
            self.metadata["email_hash"] = self._hash_identifier(email)


# ============================================================================
# Not found
# ============================================================================

class AUTH_USER_NOT_FOUND(AuthFault):
    """No account matches the sign-in email."""
    domain = FaultDomain.NOT_FOUND
    code = "user-not-found"
    message = "User not found"


class AUTH_ACCOUNT_NOT_FOUND(AuthFault):
    """No account with this identifier."""
    domain = FaultDomain.NOT_FOUND
    code = "account-not-found"
    message = "Account not found"

    def __init__(self, account_id: str | None = None, **context):
        super().__init__(**context)
        if account_id is not None:
            self.metadata["account_id"] = account_id


class AUTH_EMAIL_NOT_FOUND(AuthFault):
    """Administrative lookup by email missed."""
    domain = FaultDomain.NOT_FOUND
    code = "email-not-found"
    message = "Email not found"


class AUTH_EMAIL_NOT_IN_DATABASE(AuthFault):
    """Password reset requested for an unknown email."""
    domain = FaultDomain.NOT_FOUND
    code = "email-not-in-database"
    message = "Email not in database"


class AUTH_TOKEN_NOT_FOUND(AuthFault):
    """Password reset token unknown or already used."""
    domain = FaultDomain.NOT_FOUND
    code = "token-not-found"
    message = "Token not found"


# ============================================================================
# Credentials & tokens
# ============================================================================

class AUTH_WRONG_PASSWORD(AuthFault):
    """Password does not match the stored secret."""
    domain = FaultDomain.SECURITY
    code = "wrong-password"
    message = "Wrong password"


class AUTH_INVALID_ACCESS_TOKEN(AuthFault):
    """Access token unknown, superseded or revoked."""
    domain = FaultDomain.SECURITY
    code = "invalid-access-token"
    message = "Invalid access token"


class AUTH_INVALID_REFRESH_TOKEN(AuthFault):
    """Refresh token unknown or revoked."""
    domain = FaultDomain.SECURITY
    code = "invalid-refresh-token"
    message = "Invalid refresh token"


# ============================================================================
# Conflicts
# ============================================================================

class AUTH_EMAIL_NOT_AVAILABLE(AuthFault):
    """Email already belongs to another account."""
    domain = FaultDomain.CONFLICT
    code = "email-not-available"
    message = "Email already in use"

    def __init__(self, email: str | None = None, **context):
        super().__init__(**context)
        if email is not None:
            self.metadata["email_hash"] = self._hash_identifier(email)


# ============================================================================
# Temporal
# ============================================================================

class AUTH_RATE_LIMIT_EXCEEDED(AuthFault):
    """Too many password reset requests."""
    domain = FaultDomain.TEMPORAL
    code = "rate-limit-exceeded"
    message = "Rate limit exceeded"
    retryable = True

    def __init__(self, retry_after: float | None = None, **context):
        super().__init__(**context)
        self.retry_after = retry_after
        if retry_after is not None:
            self.metadata["retry_after"] = retry_after


class AUTH_TOKEN_EXPIRED(AuthFault):
    """Password reset token is past its expiry."""
    domain = FaultDomain.TEMPORAL
    code = "token-expired"
    message = "Token expired"
    retryable = False


# ============================================================================
# Session
# ============================================================================

class AUTH_NO_ACTIVE_SESSION(AuthFault):
    """Operation needs a signed-in session."""
    domain = FaultDomain.SESSION
    code = "no-active-session"
    message = "No user signed in"


class AUTH_UNKNOWN(AuthFault):
    """Unexpected failure, wrapped so typed operations stay typed."""
    domain = FaultDomain.SYSTEM
    code = "unknown"
    message = "Unknown error"
    severity = Severity.ERROR
    public = False


# ============================================================================
# Raised -> typed conversion
# ============================================================================

async def capture(
    operation: Callable[[], Awaitable[T]],
    *expected: type[AuthFault],
) -> Result:
    """
    Run ``operation`` and fold its outcome into a result.

    Faults listed in ``expected`` become ``Err(fault)``; any other exception
    is logged and reported as ``Err(AUTH_UNKNOWN)`` so a typed operation
    never raises.
    """
    try:
        value = await operation()
    except expected as fault:
        return fault.to_result()
    except Exception as exc:
        logger.exception("Unexpected failure in typed operation")
        return Err(AUTH_UNKNOWN(message=str(exc) or exc.__class__.__name__, cause=repr(exc)))
    return Ok(value)


__all__ = [
    "AuthFault",
    "AUTH_INVALID_EMAIL",
    "AUTH_USER_NOT_FOUND",
    "AUTH_ACCOUNT_NOT_FOUND",
    "AUTH_EMAIL_NOT_FOUND",
    "AUTH_EMAIL_NOT_IN_DATABASE",
    "AUTH_TOKEN_NOT_FOUND",
    "AUTH_WRONG_PASSWORD",
    "AUTH_INVALID_ACCESS_TOKEN",
    "AUTH_INVALID_REFRESH_TOKEN",
    "AUTH_EMAIL_NOT_AVAILABLE",
    "AUTH_RATE_LIMIT_EXCEEDED",
    "AUTH_TOKEN_EXPIRED",
    "AUTH_NO_ACTIVE_SESSION",
    "AUTH_UNKNOWN",
    "capture",
]
