"""
authkit - Session Facade

End-user surface of the engine. Tracks one "current session" and exposes it
as a replaying identity stream.

Error signalling is mixed for compatibility with existing provider
adapters: most operations return a typed ``Result``, while
``sign_up`` on a taken email and ``get_current_token`` / ``delete_account``
without a session raise their fault instead.
"""

from __future__ import annotations

import asyncio
import logging

from authkit.result import Err, Ok, Result

from .core import AccountId, SessionState
from .engine import IdentityCore
from .events import SessionStream, Subscription
from .faults import (
    AUTH_ACCOUNT_NOT_FOUND,
    AUTH_EMAIL_NOT_AVAILABLE,
    AUTH_EMAIL_NOT_IN_DATABASE,
    AUTH_INVALID_EMAIL,
    AUTH_NO_ACTIVE_SESSION,
    AUTH_RATE_LIMIT_EXCEEDED,
    AUTH_TOKEN_EXPIRED,
    AUTH_TOKEN_NOT_FOUND,
    AUTH_USER_NOT_FOUND,
    AUTH_WRONG_PASSWORD,
    capture,
)

logger = logging.getLogger("authkit.auth.session")


class SessionFacade:
    """
    Interactive authentication over a shared ``IdentityCore``.

    State machine::

        UNKNOWN --> SIGNED_OUT <--> SIGNED_IN

    ``UNKNOWN`` only exists until the first sign-in, sign-out or deletion.
    """

    def __init__(self, core: IdentityCore):
        self.core = core
        self.identity_stream = SessionStream(SessionState.unknown())
        self._lock = asyncio.Lock()

    @property
    def state(self) -> SessionState:
        return self.identity_stream.value

    def subscribe(self, observer) -> Subscription:
        """Observe session state; the current value is delivered immediately."""
        return self.identity_stream.subscribe(observer)

    def _set_state(self, state: SessionState) -> None:
        self.identity_stream.publish(state)

    def _session_lost(self, account_id: AccountId, message: str) -> AUTH_NO_ACTIVE_SESSION:
        """End a session whose account or token vanished behind its back."""
        if self.state.account_id == account_id:
            logger.info("Session of account %s ended: %s", account_id, message)
            self._set_state(SessionState.signed_out())
        return AUTH_NO_ACTIVE_SESSION(message=message)

    # ------------------------------------------------------------------
    # Registration & credentials
    # ------------------------------------------------------------------

    async def sign_up(self, email: str, password: str) -> AccountId:
        """
        Create an account. Does not sign in.

        Raises:
            AUTH_EMAIL_NOT_AVAILABLE: Email already registered
        """
        return await self.core.directory.create_account(email, password)

    async def sign_in(self, email: str, password: str, persistent: bool = True) -> Result:
        """
        Sign in with email and password.

        Returns:
            ``Ok(None)``, or ``Err`` with ``invalid-email``,
            ``user-not-found`` or ``wrong-password``; the state is left
            untouched on failure.
        """
        async with self._lock:
            result = await capture(
                lambda: self.core.verifier.validate(email, password),
                AUTH_INVALID_EMAIL,
                AUTH_USER_NOT_FOUND,
                AUTH_WRONG_PASSWORD,
            )
            if result.is_err:
                logger.debug("Sign-in rejected: %s", result.code)
                return result

            account = result.value
            await self.core.issuer.issue_session(account.id, supersede=True)
            self._set_state(SessionState.signed_in(account.id, persistent))

        logger.info("Account %s signed in", account.id)
        return Ok()

    async def get_current_token(self) -> str:
        """
        Access token of the signed-in account.

        Raises:
            AUTH_NO_ACTIVE_SESSION: Nobody is signed in, or the session's
                token is gone (account deleted or signed out elsewhere);
                the state then moves to ``SIGNED_OUT``
        """
        state = self.state
        if not state.is_signed_in:
            raise AUTH_NO_ACTIVE_SESSION()

        token = await self.core.issuer.session_token(state.account_id)
        if token is None:
            raise self._session_lost(state.account_id, "No token available")
        return token

    async def sign_out(self) -> None:
        """Drop the access token and sign out. Safe to call repeatedly."""
        async with self._lock:
            state = self.state
            if state.is_signed_in:
                await self.core.issuer.revoke_access_token(state.account_id)
                logger.info("Account %s signed out", state.account_id)
            self._set_state(SessionState.signed_out())

    # ------------------------------------------------------------------
    # Account changes
    # ------------------------------------------------------------------

    async def is_email_available(self, email: str) -> bool:
        return await self.core.directory.is_email_available(email)

    async def change_email(self, new_email: str) -> Result:
        """
        Change the signed-in account's email; its id stays the same.

        Returns:
            ``Ok(None)``, or ``Err`` with ``no-active-session`` or
            ``email-not-available``
        """
        state = self.state
        if not state.is_signed_in:
            return Err(AUTH_NO_ACTIVE_SESSION())

        result = await capture(
            lambda: self.core.directory.update_email(state.account_id, new_email),
            AUTH_EMAIL_NOT_AVAILABLE,
            AUTH_ACCOUNT_NOT_FOUND,
        )
        if result.is_err and isinstance(result.fault, AUTH_ACCOUNT_NOT_FOUND):
            return Err(self._session_lost(state.account_id, "Account no longer exists"))
        return result

    async def trigger_reset(self, email: str) -> Result:
        """
        Start the password reset flow.

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

    async def complete_reset(self, token: str, new_password: str) -> Result:
        """
        Set a new password with a reset token.

        Returns:
            ``Ok(None)``, or ``Err`` with ``token-expired`` or ``token-not-found``
        """
        return await capture(
            lambda: self.core.reset_flow.consume(token, new_password),
            AUTH_TOKEN_EXPIRED,
            AUTH_TOKEN_NOT_FOUND,
        )

    async def delete_account(self) -> None:
        """
        Delete the signed-in account and sign out.

        Raises:
            AUTH_NO_ACTIVE_SESSION: Nobody is signed in, or the account
                was already deleted elsewhere
        """
        async with self._lock:
            state = self.state
            if not state.is_signed_in:
                raise AUTH_NO_ACTIVE_SESSION()

            try:
                await self.core.delete_account(state.account_id)
            except AUTH_ACCOUNT_NOT_FOUND:
                raise self._session_lost(state.account_id, "Account no longer exists") from None
            self._set_state(SessionState.signed_out())
