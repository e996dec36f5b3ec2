"""
authkit - Credential Verification

Checks an email/password pair against the directory, in a fixed order:
email syntax, then account existence, then the secret.
"""

from __future__ import annotations

import logging
import re

from authkit.config import DEFAULT_EMAIL_PATTERN

from .core import Account
from .faults import AUTH_ACCOUNT_NOT_FOUND, AUTH_INVALID_EMAIL, AUTH_USER_NOT_FOUND, AUTH_WRONG_PASSWORD
from .stores import MemoryUserDirectory

logger = logging.getLogger("authkit.auth.credentials")


class CredentialVerifier:
    """
    Email/password validation.

    The syntax check never consults the directory, so a malformed email
    reports ``invalid-email`` whether or not an account would match.
    Not timing-safe across the not-found / wrong-password branches.

    A secret encoded with outdated parameters is re-encoded on the first
    successful check.
    """

    def __init__(self, directory: MemoryUserDirectory, email_pattern: str = DEFAULT_EMAIL_PATTERN):
        self.directory = directory
        self._email_re = re.compile(email_pattern)

    def is_valid_email(self, email: str) -> bool:
        return bool(self._email_re.fullmatch(email))

    async def validate(self, email: str, password: str) -> Account:
        """
        Resolve credentials to an account.

        Raises:
            AUTH_INVALID_EMAIL: Malformed email
            AUTH_USER_NOT_FOUND: No account for the email
            AUTH_WRONG_PASSWORD: Password mismatch
        """
        if not self.is_valid_email(email):
            raise AUTH_INVALID_EMAIL(email=email)

        account = await self.directory.find_by_email(email)
        if account is None:
            raise AUTH_USER_NOT_FOUND()

        encoder = self.directory.encoder
        if not encoder.verify(account.password_secret, password):
            raise AUTH_WRONG_PASSWORD()

        if encoder.check_needs_rehash(account.password_secret):
            try:
                await self.directory.update_password(account.id, password)
            except AUTH_ACCOUNT_NOT_FOUND:
                raise AUTH_USER_NOT_FOUND() from None
            logger.info("Re-encoded password secret of account %s", account.id)

        return account
