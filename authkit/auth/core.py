"""
authkit - Core Types

Accounts, tokens, session state and lifecycle events.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any

AccountId = str


# ============================================================================
# Account Model
# ============================================================================

@dataclass(frozen=True)
class Account:
    """
    Registered account.

    The directory owns the live record; callers only ever see frozen
    snapshots, so holding on to one never leaks later mutations.
    """
    id: AccountId
    email: str
    password_secret: str = field(repr=False)

    def with_email(self, email: str) -> Account:
        return replace(self, email=email)

    def with_secret(self, password_secret: str) -> Account:
        return replace(self, password_secret=password_secret)

    def to_dict(self) -> dict[str, Any]:
        """Serialize without the secret."""
        return {"id": self.id, "email": self.email}


# ============================================================================
# Tokens
# ============================================================================

@dataclass(frozen=True)
class AccessToken:
    """Short-lived credential bound to an account."""
    value: str = field(repr=False)
    account_id: AccountId


@dataclass
class RefreshToken:
    """
    Long-lived credential.

    ``access_token`` is the value currently minted from this refresh token;
    a refresh exchange swaps it for a new one while ``value`` stays put.
    """
    value: str = field(repr=False)
    account_id: AccountId
    access_token: str = field(repr=False)


@dataclass(frozen=True)
class SessionTokens:
    """Access/refresh pair returned by a sign-in."""
    account_id: AccountId
    access_token: str
    refresh_token: str


@dataclass(frozen=True)
class RefreshedSession:
    """Result of exchanging a refresh token."""
    account_id: AccountId
    access_token: str


@dataclass(frozen=True)
class PasswordResetToken:
    """Single-use password reset token."""
    value: str
    email: str
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at


@dataclass(frozen=True)
class RateLimitRecord:
    """Last accepted reset request for an email."""
    email: str
    last_request_at: datetime


# ============================================================================
# Session State
# ============================================================================

class SessionStatus(str, Enum):
    """Where the interactive session stands."""
    UNKNOWN = "unknown"          # Nothing determined yet
    SIGNED_OUT = "signed_out"
    SIGNED_IN = "signed_in"


@dataclass(frozen=True)
class SessionState:
    """
    Current session value.

    ``UNKNOWN`` exists only before the first state-determining operation;
    it is distinct from a determined ``SIGNED_OUT``.
    """
    status: SessionStatus
    account_id: AccountId | None = None
    persistent: bool = False

    @classmethod
    def unknown(cls) -> SessionState:
        return cls(SessionStatus.UNKNOWN)

    @classmethod
    def signed_out(cls) -> SessionState:
        return cls(SessionStatus.SIGNED_OUT)

    @classmethod
    def signed_in(cls, account_id: AccountId, persistent: bool = True) -> SessionState:
        return cls(SessionStatus.SIGNED_IN, account_id, persistent)

    @property
    def is_signed_in(self) -> bool:
        return self.status == SessionStatus.SIGNED_IN

    @property
    def is_known(self) -> bool:
        return self.status != SessionStatus.UNKNOWN


# ============================================================================
# Lifecycle Events
# ============================================================================

class LifecycleKind(str, Enum):
    CREATED = "account.created"
    DELETED = "account.deleted"


@dataclass(frozen=True)
class AccountCreated:
    account_id: AccountId
    kind: LifecycleKind = field(default=LifecycleKind.CREATED, init=False)


@dataclass(frozen=True)
class AccountDeleted:
    account_id: AccountId
    kind: LifecycleKind = field(default=LifecycleKind.DELETED, init=False)


LifecycleEvent = AccountCreated | AccountDeleted
