"""
authkit - Identity Core

Composition root of the reference engine. One core owns one directory, one
token issuer, one reset flow and one lifecycle notifier; the session and
administrative facades are both views over the same core, so state written
through one is immediately visible through the other.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable

from authkit.clock import Clock, SystemClock
from authkit.config import AuthConfig

from .core import AccountId, PasswordResetToken
from .credentials import CredentialVerifier
from .events import LifecycleNotifier
from .hashing import SecretEncoder, encoder_for
from .reset import PasswordResetFlow
from .stores import MemoryUserDirectory, new_account_id
from .tokens import RandomTokenFactory, SignedTokenFactory, TokenFactory, TokenIssuer

if TYPE_CHECKING:
    from .admin import AdministrativeFacade
    from .session import SessionFacade

logger = logging.getLogger("authkit.auth.engine")


class IdentityCore:
    """
    Shared identity state plus the cascade rules that span stores.

    Created once at engine start and kept for the life of the process;
    nothing survives a restart.
    """

    def __init__(
        self,
        config: AuthConfig | None = None,
        clock: Clock | None = None,
        encoder: SecretEncoder | None = None,
        token_factory: TokenFactory | None = None,
        id_factory: Callable[[], AccountId] = new_account_id,
        reset_delivery: Callable[[PasswordResetToken], None] | None = None,
    ):
        self.config = config or AuthConfig()
        self.clock = clock or SystemClock()
        self.notifier = LifecycleNotifier()

        if token_factory is None:
            if self.config.token_signing_key:
                token_factory = SignedTokenFactory(self.config.token_signing_key, self.config.token_bytes)
            else:
                token_factory = RandomTokenFactory(self.config.token_bytes)

        self.directory = MemoryUserDirectory(
            notifier=self.notifier,
            encoder=encoder or encoder_for(self.config),
            id_factory=id_factory,
        )
        self.verifier = CredentialVerifier(self.directory, self.config.email_pattern)
        self.issuer = TokenIssuer(token_factory)
        self.reset_flow = PasswordResetFlow(
            self.directory,
            clock=self.clock,
            cooldown_seconds=self.config.reset_cooldown_seconds,
            token_ttl_seconds=self.config.reset_token_ttl_seconds,
            factory=token_factory,
            delivery=reset_delivery,
        )
        logger.debug("Identity core ready: %s", self.config.to_dict())

    @classmethod
    def from_config(cls, config: AuthConfig, clock: Clock | None = None, **kwargs) -> IdentityCore:
        return cls(config=config, clock=clock, **kwargs)

    async def delete_account(self, account_id: AccountId) -> None:
        """
        Remove an account and every token it holds.

        Raises:
            AUTH_ACCOUNT_NOT_FOUND: Unknown account
        """
        await self.directory.delete_account(account_id)
        revoked = await self.issuer.revoke_all_for(account_id)
        logger.info("Account %s deleted, %d tokens revoked", account_id, revoked)

    def session(self) -> SessionFacade:
        """Interactive, session-bound view over this core."""
        from .session import SessionFacade
        return SessionFacade(self)

    def admin(self) -> AdministrativeFacade:
        """Stateless administrative view over this core."""
        from .admin import AdministrativeFacade
        return AdministrativeFacade(self)
