"""
Faults & results: fault taxonomy, Ok/Err contract and raised-to-typed conversion.
"""

import pytest

from authkit.auth.faults import (
    AUTH_EMAIL_NOT_AVAILABLE,
    AUTH_INVALID_EMAIL,
    AUTH_NO_ACTIVE_SESSION,
    AUTH_RATE_LIMIT_EXCEEDED,
    AUTH_TOKEN_EXPIRED,
    AUTH_UNKNOWN,
    AUTH_WRONG_PASSWORD,
    capture,
)
from authkit.faults import Fault, FaultDomain, Severity
from authkit.result import Err, Ok


# ============================================================================
# Fault base
# ============================================================================

class TestFault:

    def test_explicit_fields(self):
        fault = Fault(code="x-broken", message="Broken", domain=FaultDomain.SYSTEM, extra=1)
        assert fault.code == "x-broken"
        assert fault.severity == Severity.ERROR
        assert fault.retryable is False
        assert fault.public is False
        assert fault.metadata == {"extra": 1}
        assert str(fault) == "[x-broken] Broken"

    def test_missing_fields(self):
        with pytest.raises(TypeError):
            Fault(code="x")

    def test_to_dict(self):
        data = AUTH_WRONG_PASSWORD().to_dict()
        assert data == {
            "code": "wrong-password",
            "message": "Wrong password",
            "domain": "security",
            "severity": "warn",
            "retryable": False,
            "public": True,
            "metadata": {},
        }

    def test_equality(self):
        assert AUTH_WRONG_PASSWORD() == AUTH_WRONG_PASSWORD()
        assert AUTH_WRONG_PASSWORD() != AUTH_NO_ACTIVE_SESSION()


class TestAuthFaults:

    def test_email_is_hashed_not_stored(self):
        fault = AUTH_INVALID_EMAIL(email="alice@example.com")
        assert "alice@example.com" not in repr(fault.metadata)
        assert len(fault.metadata["email_hash"]) == 12

    def test_rate_limit_is_retryable(self):
        fault = AUTH_RATE_LIMIT_EXCEEDED(retry_after=42.0)
        assert fault.retryable is True
        assert fault.retry_after == 42.0
        assert fault.metadata["retry_after"] == 42.0
        assert fault.domain == FaultDomain.TEMPORAL

    def test_expired_token_not_retryable(self):
        assert AUTH_TOKEN_EXPIRED().retryable is False

    def test_no_session_message(self):
        assert AUTH_NO_ACTIVE_SESSION().message == "No user signed in"

    def test_unknown_is_private(self):
        assert AUTH_UNKNOWN().public is False

    def test_to_result(self):
        result = AUTH_EMAIL_NOT_AVAILABLE().to_result()
        assert isinstance(result, Err)
        assert result.code == "email-not-available"


# ============================================================================
# Result contract
# ============================================================================

class TestResult:

    def test_ok(self):
        result = Ok(5)
        assert result.is_ok and not result.is_err
        assert result.unwrap() == 5
        assert result.unwrap_or(0) == 5

    def test_ok_without_value(self):
        assert Ok().value is None

    def test_err(self):
        result = Err(AUTH_WRONG_PASSWORD())
        assert result.is_err and not result.is_ok
        assert result.code == "wrong-password"
        assert result.unwrap_or("fallback") == "fallback"

    def test_err_unwrap_raises_fault(self):
        with pytest.raises(AUTH_WRONG_PASSWORD):
            Err(AUTH_WRONG_PASSWORD()).unwrap()


# ============================================================================
# capture()
# ============================================================================

class TestCapture:

    @pytest.mark.asyncio
    async def test_success(self):
        async def op():
            return "value"

        assert await capture(op) == Ok("value")

    @pytest.mark.asyncio
    async def test_expected_fault(self):
        async def op():
            raise AUTH_WRONG_PASSWORD()

        result = await capture(op, AUTH_WRONG_PASSWORD)
        assert result.code == "wrong-password"

    @pytest.mark.asyncio
    async def test_unexpected_fault_becomes_unknown(self):
        async def op():
            raise AUTH_WRONG_PASSWORD()

        result = await capture(op, AUTH_INVALID_EMAIL)
        assert result.code == "unknown"

    @pytest.mark.asyncio
    async def test_arbitrary_exception_becomes_unknown(self, caplog):
        async def op():
            raise RuntimeError("disk on fire")

        result = await capture(op)
        assert result.code == "unknown"
        assert result.fault.message == "disk on fire"
        assert "RuntimeError" in result.fault.metadata["cause"]
        assert "Unexpected failure" in caplog.text
