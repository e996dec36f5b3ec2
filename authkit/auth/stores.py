"""
authkit - User Directory

In-memory store of accounts, keyed by id and indexed by email.

The directory owns the email uniqueness invariant: the availability check
and the write that claims an email happen under one lock, so two
concurrent sign-ups (or email changes) for the same address cannot both
succeed.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from typing import Callable

from .core import Account, AccountCreated, AccountDeleted, AccountId
from .events import LifecycleNotifier
from .faults import AUTH_ACCOUNT_NOT_FOUND, AUTH_EMAIL_NOT_AVAILABLE
from .hashing import PlainSecretEncoder, SecretEncoder

logger = logging.getLogger("authkit.auth.stores")


def new_account_id() -> AccountId:
    return str(uuid.uuid4())


class MemoryUserDirectory:
    """
    Authoritative account store.

    Lookups return frozen ``Account`` snapshots. Creation and deletion are
    announced on ``notifier`` once the change is visible to reads.
    """

    def __init__(
        self,
        notifier: LifecycleNotifier | None = None,
        encoder: SecretEncoder | None = None,
        id_factory: Callable[[], AccountId] = new_account_id,
    ):
        self.notifier = notifier or LifecycleNotifier()
        self.encoder = encoder or PlainSecretEncoder()
        self._id_factory = id_factory
        self._accounts: dict[AccountId, Account] = {}
        self._by_email: dict[str, AccountId] = {}
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._accounts)

    async def create_account(
        self,
        email: str,
        password: str,
        account_id: AccountId | None = None,
    ) -> AccountId:
        """
        Register a new account.

        Args:
            email: Email, stored as given
            password: Plain password, stored through the encoder
            account_id: Explicit id (seeding); generated when omitted

        Raises:
            AUTH_EMAIL_NOT_AVAILABLE: Email already belongs to an account
            ValueError: ``account_id`` is already taken
        """
        async with self._lock:
            if email in self._by_email:
                raise AUTH_EMAIL_NOT_AVAILABLE(email=email)

            if account_id is None:
                account_id = self._id_factory()
            if account_id in self._accounts:
                raise ValueError(f"Account {account_id} already exists")

            self._accounts[account_id] = Account(
                id=account_id,
                email=email,
                password_secret=self.encoder.encode(password),
            )
            self._by_email[email] = account_id

        logger.debug("Created account %s", account_id)
        self.notifier.publish(AccountCreated(account_id))
        return account_id

    async def find_by_email(self, email: str) -> Account | None:
        account_id = self._by_email.get(email)
        if account_id is None:
            return None
        return self._accounts.get(account_id)

    async def find_by_id(self, account_id: AccountId) -> Account | None:
        return self._accounts.get(account_id)

    async def is_email_available(self, email: str) -> bool:
        return email not in self._by_email

    async def update_email(self, account_id: AccountId, new_email: str) -> None:
        """
        Move an account to a new email; the id never changes.

        Raises:
            AUTH_ACCOUNT_NOT_FOUND: Unknown account
            AUTH_EMAIL_NOT_AVAILABLE: Email belongs to another account
        """
        async with self._lock:
            account = self._accounts.get(account_id)
            if account is None:
                raise AUTH_ACCOUNT_NOT_FOUND(account_id=account_id)
            if account.email == new_email:
                return

            owner = self._by_email.get(new_email)
            if owner is not None:
                raise AUTH_EMAIL_NOT_AVAILABLE(email=new_email)

            del self._by_email[account.email]
            self._by_email[new_email] = account_id
            self._accounts[account_id] = account.with_email(new_email)

        logger.debug("Changed email of account %s", account_id)

    async def update_password(self, account_id: AccountId, new_password: str) -> None:
        """
        Replace an account's password.

        Raises:
            AUTH_ACCOUNT_NOT_FOUND: Unknown account
        """
        async with self._lock:
            account = self._accounts.get(account_id)
            if account is None:
                raise AUTH_ACCOUNT_NOT_FOUND(account_id=account_id)
            self._accounts[account_id] = account.with_secret(self.encoder.encode(new_password))

        logger.debug("Changed password of account %s", account_id)

    async def delete_account(self, account_id: AccountId) -> None:
        """
        Remove an account. Lookups by its id or former email miss afterwards.

        Raises:
            AUTH_ACCOUNT_NOT_FOUND: Unknown account
        """
        async with self._lock:
            account = self._accounts.pop(account_id, None)
            if account is None:
                raise AUTH_ACCOUNT_NOT_FOUND(account_id=account_id)
            del self._by_email[account.email]

        logger.debug("Deleted account %s", account_id)
        self.notifier.publish(AccountDeleted(account_id))
