"""
authkit Testing - Conformance suites and helpers.

Usage:
    from authkit.testing import SessionAuthContract

    class TestMyProvider(SessionAuthContract):
        @pytest.fixture
        def auth(self):
            return build_my_provider()

Components:
    - SessionAuthContract: Tests for interactive session adapters
    - AdminAuthContract:   Tests for administrative adapters
    - ManualClock:         Clock that only moves when told to
    - unique_email:        Fresh address per call
"""

from authkit.clock import ManualClock

from .contract import (
    NEW_PASSWORD,
    PASSWORD,
    AdminAuthContract,
    SessionAuthContract,
    unique_email,
)

__all__ = [
    "AdminAuthContract",
    "SessionAuthContract",
    "ManualClock",
    "unique_email",
    "PASSWORD",
    "NEW_PASSWORD",
]
