"""
authkit - Token Issuance

Access and refresh tokens bound to accounts.

Token model:
- Every sign-in mints a fresh access token and a fresh refresh token.
- A refresh token is stable; exchanging it swaps the access token it
  minted for a new one.
- Session-bound issuance (``supersede=True``) keeps one access token per
  account in the session slot; a new session sign-in invalidates the old
  value. Administrative issuance leaves other tokens alone.
- Sign-out drops the session-bound access token only. Refresh tokens
  survive until the account is deleted.
"""

from __future__ import annotations

import asyncio
import base64
import logging
import secrets
from collections import defaultdict
from typing import Protocol

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes, hmac

from .core import AccessToken, AccountId, RefreshedSession, RefreshToken, SessionTokens
from .faults import AUTH_INVALID_ACCESS_TOKEN, AUTH_INVALID_REFRESH_TOKEN

logger = logging.getLogger("authkit.auth.tokens")


# ============================================================================
# Token Factories
# ============================================================================

class TokenFactory(Protocol):
    """Mints opaque token values."""

    def mint(self, kind: str) -> str:
        ...

    def is_well_formed(self, value: str) -> bool:
        ...


class RandomTokenFactory:
    """Unguessable random values (``secrets.token_urlsafe``)."""

    PREFIXES = {"access": "at_", "refresh": "rt_", "reset": "pr_"}

    def __init__(self, nbytes: int = 32):
        self.nbytes = nbytes

    def mint(self, kind: str) -> str:
        return f"{self.PREFIXES[kind]}{secrets.token_urlsafe(self.nbytes)}"

    def is_well_formed(self, value: str) -> bool:
        return isinstance(value, str) and value[:3] in self.PREFIXES.values()


class SignedTokenFactory(RandomTokenFactory):
    """
    Random values carrying an HMAC-SHA256 tag.

    Format: ``<prefix><nonce>.<tag>``. A value whose tag does not verify is
    rejected before any store lookup, so forged or truncated tokens never
    reach the token tables.
    """

    def __init__(self, key: str | bytes, nbytes: int = 32):
        super().__init__(nbytes)
        self._key = key.encode() if isinstance(key, str) else key
        if not self._key:
            raise ValueError("Signing key must not be empty")

    def mint(self, kind: str) -> str:
        body = super().mint(kind)
        return f"{body}.{self._encode(self._sign(body.encode()))}"

    def is_well_formed(self, value: str) -> bool:
        if not super().is_well_formed(value) or "." not in value:
            return False
        body, _, tag = value.rpartition(".")
        try:
            signature = self._decode(tag)
        except ValueError:
            return False
        h = hmac.HMAC(self._key, hashes.SHA256())
        h.update(body.encode())
        try:
            h.verify(signature)
        except InvalidSignature:
            return False
        return True

    def _sign(self, message: bytes) -> bytes:
        h = hmac.HMAC(self._key, hashes.SHA256())
        h.update(message)
        return h.finalize()

    @staticmethod
    def _encode(data: bytes) -> str:
        return base64.urlsafe_b64encode(data).rstrip(b"=").decode()

    @staticmethod
    def _decode(data: str) -> bytes:
        padding = 4 - (len(data) % 4)
        if padding != 4:
            data += "=" * padding
        try:
            return base64.urlsafe_b64decode(data.encode())
        except (ValueError, TypeError) as exc:
            raise ValueError("Malformed token signature") from exc


# ============================================================================
# Token Issuer
# ============================================================================

class TokenIssuer:
    """
    Mints, resolves and revokes tokens.

    All tables are guarded by one lock; no method awaits anything else
    while holding it.
    """

    def __init__(self, factory: TokenFactory | None = None):
        self.factory = factory or RandomTokenFactory()
        self._access: dict[str, AccessToken] = {}
        self._refresh: dict[str, RefreshToken] = {}
        self._refresh_by_account: dict[AccountId, set[str]] = defaultdict(set)
        self._session_slot: dict[AccountId, str] = {}
        self._lock = asyncio.Lock()

    async def issue_session(self, account_id: AccountId, supersede: bool = True) -> SessionTokens:
        """
        Mint a fresh access/refresh pair.

        Args:
            account_id: Owner of the tokens
            supersede: Bind the access token to the account's session slot,
                invalidating the previous session-bound value
        """
        async with self._lock:
            access = self._mint_access(account_id)
            refresh = RefreshToken(
                value=self.factory.mint("refresh"),
                account_id=account_id,
                access_token=access.value,
            )
            self._refresh[refresh.value] = refresh
            self._refresh_by_account[account_id].add(refresh.value)

            if supersede:
                previous = self._session_slot.get(account_id)
                if previous is not None:
                    self._access.pop(previous, None)
                self._session_slot[account_id] = access.value

        logger.debug("Issued %s tokens for account %s", "session" if supersede else "detached", account_id)
        return SessionTokens(
            account_id=account_id,
            access_token=access.value,
            refresh_token=refresh.value,
        )

    async def refresh(self, refresh_value: str) -> RefreshedSession:
        """
        Exchange a refresh token for a new access token.

        The refresh token itself is not rotated.

        Raises:
            AUTH_INVALID_REFRESH_TOKEN: Unknown, malformed or revoked token
        """
        if not self.factory.is_well_formed(refresh_value):
            raise AUTH_INVALID_REFRESH_TOKEN()

        async with self._lock:
            record = self._refresh.get(refresh_value)
            if record is None:
                raise AUTH_INVALID_REFRESH_TOKEN()

            old_access = record.access_token
            self._access.pop(old_access, None)
            access = self._mint_access(record.account_id)
            record.access_token = access.value

            if self._session_slot.get(record.account_id) == old_access:
                self._session_slot[record.account_id] = access.value

        logger.debug("Refreshed access token for account %s", record.account_id)
        return RefreshedSession(account_id=record.account_id, access_token=access.value)

    async def resolve(self, access_value: str) -> AccountId:
        """
        Map an access token to its account.

        Raises:
            AUTH_INVALID_ACCESS_TOKEN: Unknown, malformed, superseded or revoked
        """
        if not self.factory.is_well_formed(access_value):
            raise AUTH_INVALID_ACCESS_TOKEN()
        token = self._access.get(access_value)
        if token is None:
            raise AUTH_INVALID_ACCESS_TOKEN()
        return token.account_id

    async def session_token(self, account_id: AccountId) -> str | None:
        """Current session-bound access token, if any."""
        return self._session_slot.get(account_id)

    async def revoke_access_token(self, account_id: AccountId) -> bool:
        """
        Drop the session-bound access token (sign-out).

        Refresh tokens are kept.

        Returns:
            Whether a token was removed
        """
        async with self._lock:
            value = self._session_slot.pop(account_id, None)
            if value is None:
                return False
            self._access.pop(value, None)
        logger.debug("Revoked session access token for account %s", account_id)
        return True

    async def revoke_all_for(self, account_id: AccountId) -> int:
        """
        Drop every access and refresh token of an account.

        Returns:
            Number of tokens removed
        """
        async with self._lock:
            removed = 0
            for value in [v for v, t in self._access.items() if t.account_id == account_id]:
                del self._access[value]
                removed += 1
            for value in self._refresh_by_account.pop(account_id, set()):
                if self._refresh.pop(value, None) is not None:
                    removed += 1
            self._session_slot.pop(account_id, None)

        logger.debug("Revoked %d tokens for account %s", removed, account_id)
        return removed

    def _mint_access(self, account_id: AccountId) -> AccessToken:
        token = AccessToken(value=self.factory.mint("access"), account_id=account_id)
        self._access[token.value] = token
        return token
