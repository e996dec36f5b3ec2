"""
authkit - Provider-independent authentication

Complete integration of:
- Contracts: Session and administrative auth surfaces
- Engine: In-memory identity provider with real business rules
- Faults: Structured errors with stable kebab-case codes
- Results: Typed Ok/Err outcomes for every recoverable failure
- Config: Layered configuration (defaults, .env, environment, overrides)
- Testing: Conformance suites any provider adapter can run
"""

__version__ = "0.1.0"

from .faults import Fault, FaultDomain, Severity
from .result import Ok, Err, Result
from .clock import Clock, SystemClock, ManualClock
from .config import AuthConfig, ConfigLoader, ConfigError

from .auth import (
    IdentityCore,
    SessionFacade,
    AdministrativeFacade,
    SessionAuth,
    AdminAuth,
    SessionState,
    SessionStatus,
    SessionTokens,
    RefreshedSession,
    AccountCreated,
    AccountDeleted,
)

__all__ = [
    "__version__",
    "Fault",
    "FaultDomain",
    "Severity",
    "Ok",
    "Err",
    "Result",
    "Clock",
    "SystemClock",
    "ManualClock",
    "AuthConfig",
    "ConfigLoader",
    "ConfigError",
    "IdentityCore",
    "SessionFacade",
    "AdministrativeFacade",
    "SessionAuth",
    "AdminAuth",
    "SessionState",
    "SessionStatus",
    "SessionTokens",
    "RefreshedSession",
    "AccountCreated",
    "AccountDeleted",
]
