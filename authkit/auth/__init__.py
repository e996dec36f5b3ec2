"""
authkit.auth - Identity engine

In-memory reference implementation of the provider contracts:
- Directory of accounts with atomic email uniqueness
- Credential verification (format, existence, secret)
- Access/refresh token issuance with session-bound supersession
- Rate-limited, expiring password reset tokens
- Account lifecycle events and a replaying session stream

Build one ``IdentityCore`` and take its ``session()`` and ``admin()``
facades; both see the same accounts and tokens.
"""

# Core types
from .core import (
    Account,
    AccountId,
    AccessToken,
    RefreshToken,
    SessionTokens,
    RefreshedSession,
    PasswordResetToken,
    RateLimitRecord,
    SessionStatus,
    SessionState,
    LifecycleKind,
    AccountCreated,
    AccountDeleted,
    LifecycleEvent,
)

# Faults
from .faults import (
    AuthFault,
    AUTH_INVALID_EMAIL,
    AUTH_USER_NOT_FOUND,
    AUTH_ACCOUNT_NOT_FOUND,
    AUTH_EMAIL_NOT_FOUND,
    AUTH_EMAIL_NOT_IN_DATABASE,
    AUTH_TOKEN_NOT_FOUND,
    AUTH_WRONG_PASSWORD,
    AUTH_INVALID_ACCESS_TOKEN,
    AUTH_INVALID_REFRESH_TOKEN,
    AUTH_EMAIL_NOT_AVAILABLE,
    AUTH_RATE_LIMIT_EXCEEDED,
    AUTH_TOKEN_EXPIRED,
    AUTH_NO_ACTIVE_SESSION,
    AUTH_UNKNOWN,
    capture,
)

# Password secrets
from .hashing import (
    SecretEncoder,
    PlainSecretEncoder,
    Argon2SecretEncoder,
    encoder_for,
)

# Events
from .events import (
    Subscription,
    LifecycleNotifier,
    IdentityStream,
    SessionStream,
)

# Stores & components
from .stores import MemoryUserDirectory, new_account_id
from .credentials import CredentialVerifier
from .tokens import (
    TokenFactory,
    RandomTokenFactory,
    SignedTokenFactory,
    TokenIssuer,
)
from .reset import ResetRateLimiter, PasswordResetFlow

# Engine & facades
from .engine import IdentityCore
from .session import SessionFacade
from .admin import AdministrativeFacade
from .contracts import SessionAuth, AdminAuth

__all__ = [
    # Core types
    "Account",
    "AccountId",
    "AccessToken",
    "RefreshToken",
    "SessionTokens",
    "RefreshedSession",
    "PasswordResetToken",
    "RateLimitRecord",
    "SessionStatus",
    "SessionState",
    "LifecycleKind",
    "AccountCreated",
    "AccountDeleted",
    "LifecycleEvent",
    # Faults
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
    # Password secrets
    "SecretEncoder",
    "PlainSecretEncoder",
    "Argon2SecretEncoder",
    "encoder_for",
    # Events
    "Subscription",
    "LifecycleNotifier",
    "IdentityStream",
    "SessionStream",
    # Stores & components
    "MemoryUserDirectory",
    "new_account_id",
    "CredentialVerifier",
    "TokenFactory",
    "RandomTokenFactory",
    "SignedTokenFactory",
    "TokenIssuer",
    "ResetRateLimiter",
    "PasswordResetFlow",
    # Engine & facades
    "IdentityCore",
    "SessionFacade",
    "AdministrativeFacade",
    "SessionAuth",
    "AdminAuth",
]
