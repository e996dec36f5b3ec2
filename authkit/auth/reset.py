"""
authkit - Password Reset

Cooldown-based rate limiter plus an expiring, single-use reset token ledger.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta
from typing import Callable

from authkit.clock import Clock, SystemClock

from .core import PasswordResetToken, RateLimitRecord
from .faults import (
    AUTH_ACCOUNT_NOT_FOUND,
    AUTH_EMAIL_NOT_IN_DATABASE,
    AUTH_RATE_LIMIT_EXCEEDED,
    AUTH_TOKEN_EXPIRED,
    AUTH_TOKEN_NOT_FOUND,
)
from .stores import MemoryUserDirectory
from .tokens import RandomTokenFactory, TokenFactory

logger = logging.getLogger("authkit.auth.reset")


# ============================================================================
# Rate Limiter
# ============================================================================


class ResetRateLimiter:
    """
    One request per key per cooldown window.

    Records are never evicted; their number is bounded by the number of
    distinct keys that were ever stamped.
    """

    def __init__(self, cooldown_seconds: float = 60):
        self.cooldown = timedelta(seconds=cooldown_seconds)
        self._records: dict[str, RateLimitRecord] = {}

    def last_request(self, key: str) -> RateLimitRecord | None:
        return self._records.get(key)

    def retry_after(self, key: str, now: datetime) -> float:
        """Seconds until ``key`` may request again (0 when allowed)."""
        record = self._records.get(key)
        if record is None:
            return 0.0
        remaining = (record.last_request_at + self.cooldown - now).total_seconds()
        return max(0.0, remaining)

    def check(self, key: str, now: datetime) -> bool:
        """Whether a request for ``key`` is allowed at ``now``."""
        record = self._records.get(key)
        if record is None:
            return True
        return now - record.last_request_at >= self.cooldown

    def stamp(self, key: str, now: datetime) -> None:
        self._records[key] = RateLimitRecord(email=key, last_request_at=now)


# ============================================================================
# Reset Flow
# ============================================================================


class PasswordResetFlow:
    """
    Issues and redeems password reset tokens.

    ``trigger`` order: rate limit, then account existence, then mint and
    stamp. Unknown emails are never stamped.

    ``delivery`` is called with every minted token; a provider-backed
    deployment sends the reset mail from there. A failing delivery is
    logged; the token and the cooldown stamp stay in place.
    """

    def __init__(
        self,
        directory: MemoryUserDirectory,
        clock: Clock | None = None,
        cooldown_seconds: float = 60,
        token_ttl_seconds: float = 3600,
        factory: TokenFactory | None = None,
        delivery: Callable[[PasswordResetToken], None] | None = None,
    ):
        self.directory = directory
        self.clock = clock or SystemClock()
        self.limiter = ResetRateLimiter(cooldown_seconds)
        self.token_ttl = timedelta(seconds=token_ttl_seconds)
        self.factory = factory or RandomTokenFactory()
        self.delivery = delivery
        self._tokens: dict[str, PasswordResetToken] = {}
        self._lock = asyncio.Lock()

    async def trigger(self, email: str) -> PasswordResetToken:
        """
        Start a reset for ``email``.

        Raises:
            AUTH_RATE_LIMIT_EXCEEDED: A request for this email is still cooling down
            AUTH_EMAIL_NOT_IN_DATABASE: No account owns the email
        """
        async with self._lock:
            now = self.clock.now()
            if not self.limiter.check(email, now):
                retry_after = self.limiter.retry_after(email, now)
                logger.warning("Password reset rate limited (retry in %.0fs)", retry_after)
                raise AUTH_RATE_LIMIT_EXCEEDED(retry_after=retry_after)

            if await self.directory.find_by_email(email) is None:
                raise AUTH_EMAIL_NOT_IN_DATABASE()

            token = PasswordResetToken(
                value=self.factory.mint("reset"),
                email=email,
                expires_at=now + self.token_ttl,
            )
            self._tokens[token.value] = token
            self.limiter.stamp(email, now)

        logger.debug("Issued password reset token expiring at %s", token.expires_at.isoformat())
        if self.delivery is not None:
            try:
                self.delivery(token)
            except Exception:
                logger.exception("Password reset delivery %r raised; token stays pending", self.delivery)
        return token

    async def consume(self, token_value: str, new_password: str) -> None:
        """
        Redeem a reset token.

        The token is gone afterwards whatever happens, including when the
        owning account was deleted in the meantime (then nothing changes).

        Raises:
            AUTH_TOKEN_NOT_FOUND: Unknown or already used token
            AUTH_TOKEN_EXPIRED: Token past its expiry (it is removed)
        """
        async with self._lock:
            token = self._tokens.get(token_value)
            if token is None:
                raise AUTH_TOKEN_NOT_FOUND()

            if token.is_expired(self.clock.now()):
                del self._tokens[token_value]
                logger.warning("Rejected expired password reset token")
                raise AUTH_TOKEN_EXPIRED()

            del self._tokens[token_value]

        account = await self.directory.find_by_email(token.email)
        if account is not None:
            try:
                await self.directory.update_password(account.id, new_password)
                return
            except AUTH_ACCOUNT_NOT_FOUND:
                pass  # deleted between lookup and update
        logger.info("Password reset token redeemed for a vanished account")

    def pending_tokens(self) -> list[str]:
        """Values of reset tokens that were issued and not yet redeemed."""
        return list(self._tokens)

    async def purge_expired(self) -> int:
        """Remove expired tokens (returns count removed)."""
        async with self._lock:
            now = self.clock.now()
            expired = [value for value, token in self._tokens.items() if token.is_expired(now)]
            for value in expired:
                del self._tokens[value]
            return len(expired)
