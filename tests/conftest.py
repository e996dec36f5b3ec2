"""
Shared fixtures for the authkit test suite.

All fixtures are function-scoped to guarantee full isolation between tests.
Time only moves through ``clock.advance``.
"""

from __future__ import annotations

import pytest

from authkit.auth.engine import IdentityCore
from authkit.auth.events import LifecycleNotifier
from authkit.auth.reset import PasswordResetFlow
from authkit.auth.stores import MemoryUserDirectory
from authkit.auth.tokens import TokenIssuer
from authkit.clock import ManualClock
from authkit.config import AuthConfig


# ============================================================================
# Time & Config
# ============================================================================


@pytest.fixture
def clock():
    """Clock frozen at 2024-01-01 UTC."""
    return ManualClock()


@pytest.fixture
def config():
    return AuthConfig()


# ============================================================================
# Components (fresh per test)
# ============================================================================


@pytest.fixture
def notifier():
    return LifecycleNotifier()


@pytest.fixture
def directory(notifier):
    return MemoryUserDirectory(notifier=notifier)


@pytest.fixture
def issuer():
    return TokenIssuer()


@pytest.fixture
def reset_flow(directory, clock):
    return PasswordResetFlow(directory, clock=clock)


# ============================================================================
# Engine & Facades
# ============================================================================


@pytest.fixture
def core(config, clock):
    return IdentityCore.from_config(config, clock=clock)


@pytest.fixture
def session(core):
    return core.session()


@pytest.fixture
def admin(core):
    return core.admin()
