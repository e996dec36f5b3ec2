"""
authkit - Administrative Facade

Server-side surface of the engine. Stateless: every call names the account
or token it acts on, and every failure comes back as a typed ``Result``.
"""

from __future__ import annotations

import logging
from typing import Callable

from authkit.result import Ok, Result

from .core import AccountCreated, AccountDeleted, AccountId
from .engine import IdentityCore
from .events import Subscription
from .faults import (
    AUTH_ACCOUNT_NOT_FOUND,
    AUTH_EMAIL_NOT_AVAILABLE,
    AUTH_EMAIL_NOT_FOUND,
    AUTH_EMAIL_NOT_IN_DATABASE,
    AUTH_INVALID_ACCESS_TOKEN,
    AUTH_INVALID_EMAIL,
    AUTH_INVALID_REFRESH_TOKEN,
    AUTH_RATE_LIMIT_EXCEEDED,
    AUTH_USER_NOT_FOUND,
    AUTH_WRONG_PASSWORD,
    capture,
)

logger = logging.getLogger("authkit.auth.admin")


class AdministrativeFacade:
    """
    Account administration over a shared ``IdentityCore``.

    Tokens minted here are detached from the interactive session: a later
    session sign-in for the same account does not invalidate them.
    """

    def __init__(self, core: IdentityCore):
        self.core = core

    # ------------------------------------------------------------------
    # Accounts
    # ------------------------------------------------------------------

    async def sign_up(self, email: str, password: str) -> Result:
        """``Ok(account_id)`` or ``Err`` with ``email-not-available``."""
        return await capture(
            lambda: self.core.directory.create_account(email, password),
            AUTH_EMAIL_NOT_AVAILABLE,
        )

    async def find_by_email(self, email: str) -> Result:
        """``Ok(account_id)`` or ``Err`` with ``email-not-found``."""
        async def lookup() -> AccountId:
            account = await self.core.directory.find_by_email(email)
            if account is None:
                raise AUTH_EMAIL_NOT_FOUND()
            return account.id

        return await capture(lookup, AUTH_EMAIL_NOT_FOUND)

    async def change_email(self, account_id: AccountId, new_email: str) -> Result:
        return await capture(
            lambda: self.core.directory.update_email(account_id, new_email),
            AUTH_ACCOUNT_NOT_FOUND,
            AUTH_EMAIL_NOT_AVAILABLE,
        )

    async def change_password(self, account_id: AccountId, new_password: str) -> Result:
        return await capture(
            lambda: self.core.directory.update_password(account_id, new_password),
            AUTH_ACCOUNT_NOT_FOUND,
        )

    async def delete_user(self, account_id: AccountId) -> Result:
        """Delete an account and revoke all of its tokens."""
        return await capture(
            lambda: self.core.delete_account(account_id),
            AUTH_ACCOUNT_NOT_FOUND,
        )

    async def add_test_user(
        self,
        email: str,
        password: str,
        account_id: AccountId | None = None,
    ) -> AccountId:
        """
        Seed an account, optionally under a fixed id.

        Raises:
            AUTH_EMAIL_NOT_AVAILABLE: Email already registered
            ValueError: ``account_id`` already taken
        """
        return await self.core.directory.create_account(email, password, account_id=account_id)

    # ------------------------------------------------------------------
    # Tokens
    # ------------------------------------------------------------------

    async def sign_in(self, email: str, password: str) -> Result:
        """
        Verify credentials and mint a detached token pair.

        Returns:
            ``Ok(SessionTokens)``, or ``Err`` with ``invalid-email``,
            ``user-not-found`` or ``wrong-password``
        """
        async def issue():
            account = await self.core.verifier.validate(email, password)
            return await self.core.issuer.issue_session(account.id, supersede=False)

        return await capture(issue, AUTH_INVALID_EMAIL, AUTH_USER_NOT_FOUND, AUTH_WRONG_PASSWORD)

    async def refresh(self, refresh_token: str) -> Result:
        """``Ok(RefreshedSession)`` or ``Err`` with ``invalid-refresh-token``."""
        return await capture(
            lambda: self.core.issuer.refresh(refresh_token),
            AUTH_INVALID_REFRESH_TOKEN,
        )

    async def resolve_token(self, access_token: str) -> Result:
        """``Ok(account_id)`` or ``Err`` with ``invalid-access-token``."""
        return await capture(
            lambda: self.core.issuer.resolve(access_token),
            AUTH_INVALID_ACCESS_TOKEN,
        )

    # ------------------------------------------------------------------
    # Password reset
    # ------------------------------------------------------------------

    async def send_password_reset(self, email: str) -> Result:
        """
        Start a reset through the shared flow (same cooldown as the session side).

        Returns:
            ``Ok(None)``, or ``Err`` with ``rate-limit-exceeded`` or
            ``email-not-in-database``
        """
        result = await capture(
            lambda: self.core.reset_flow.trigger(email),
            AUTH_RATE_LIMIT_EXCEEDED,
            AUTH_EMAIL_NOT_IN_DATABASE,
        )
        return Ok() if result.is_ok else result

    def pending_reset_tokens(self) -> list[str]:
        """Reset token values not yet redeemed, oldest first."""
        return self.core.reset_flow.pending_tokens()

    # ------------------------------------------------------------------
    # Lifecycle events
    # ------------------------------------------------------------------

    def on_account_created(self, observer: Callable[[AccountCreated], None]) -> Subscription:
        return self.core.notifier.on_created(observer)

    def on_account_deleted(self, observer: Callable[[AccountDeleted], None]) -> Subscription:
        return self.core.notifier.on_deleted(observer)
