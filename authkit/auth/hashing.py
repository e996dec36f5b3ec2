"""
authkit - Password Secrets

How an account's password is stored and checked.

The reference engine keeps passwords as given (``PlainSecretEncoder``):
it imitates a provider's business rules, not its storage. Deployments that
keep real credentials switch to ``Argon2SecretEncoder`` through
``AuthConfig.password_hashing = "argon2"``.
"""

from __future__ import annotations

import secrets
from typing import Protocol

from argon2 import PasswordHasher as Argon2PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError

from authkit.config import AuthConfig, ConfigError


class SecretEncoder(Protocol):
    """Turns passwords into stored secrets and checks them."""

    scheme: str

    def encode(self, password: str) -> str:
        ...

    def verify(self, secret: str, password: str) -> bool:
        ...

    def check_needs_rehash(self, secret: str) -> bool:
        ...


class PlainSecretEncoder:
    """Stores the password itself. Reference behaviour only."""

    scheme = "plain"

    def encode(self, password: str) -> str:
        return password

    def verify(self, secret: str, password: str) -> bool:
        return secrets.compare_digest(secret.encode(), password.encode())

    def check_needs_rehash(self, secret: str) -> bool:
        return False


class Argon2SecretEncoder:
    """
    Argon2id encoder.

    Security parameters default to argon2-cffi's recommendations:
    - time_cost=2, memory_cost=65536 (64MB), parallelism=4
    Tests pass smaller costs to stay fast.
    """

    scheme = "argon2"

    def __init__(
        self,
        time_cost: int = 2,
        memory_cost: int = 65536,
        parallelism: int = 4,
        hash_len: int = 32,
        salt_len: int = 16,
    ):
        self.hasher = Argon2PasswordHasher(
            time_cost=time_cost,
            memory_cost=memory_cost,
            parallelism=parallelism,
            hash_len=hash_len,
            salt_len=salt_len,
        )

    def encode(self, password: str) -> str:
        """
        Hash password.

        Example output:
            $argon2id$v=19$m=65536,t=2,p=4$saltbase64$hashbase64
        """
        return self.hasher.hash(password)

    def verify(self, secret: str, password: str) -> bool:
        try:
            return self.hasher.verify(secret, password)
        except VerifyMismatchError:
            return False
        except (VerificationError, InvalidHashError):
            # Not an argon2 secret at all, e.g. written before a scheme switch
            return False

    def check_needs_rehash(self, secret: str) -> bool:
        """Whether ``secret`` was made with other parameters than the current ones."""
        return self.hasher.check_needs_rehash(secret)


def encoder_for(config: AuthConfig) -> SecretEncoder:
    """Pick the encoder named by ``config.password_hashing``."""
    if config.password_hashing == "plain":
        return PlainSecretEncoder()
    if config.password_hashing == "argon2":
        return Argon2SecretEncoder()
    raise ConfigError(message=f"Unknown password_hashing scheme: {config.password_hashing!r}")
