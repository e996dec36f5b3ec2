"""
authkit - Provider Contracts

The two surfaces every identity provider adapter implements. The in-memory
facades satisfy them structurally; so must any real-provider adapter.
"""

from __future__ import annotations

from typing import Callable, Protocol, runtime_checkable

from authkit.result import Result

from .core import AccountCreated, AccountDeleted, AccountId, SessionState
from .events import Subscription


@runtime_checkable
class SessionAuth(Protocol):
    """Interactive, single-session authentication."""

    @property
    def state(self) -> SessionState: ...

    def subscribe(self, observer: Callable[[SessionState], None]) -> Subscription: ...

    async def sign_up(self, email: str, password: str) -> AccountId: ...

    async def sign_in(self, email: str, password: str, persistent: bool = True) -> Result: ...

    async def get_current_token(self) -> str: ...

    async def sign_out(self) -> None: ...

    async def is_email_available(self, email: str) -> bool: ...

    async def change_email(self, new_email: str) -> Result: ...

    async def trigger_reset(self, email: str) -> Result: ...

    async def complete_reset(self, token: str, new_password: str) -> Result: ...

    async def delete_account(self) -> None: ...


@runtime_checkable
class AdminAuth(Protocol):
    """Stateless account administration."""

    async def sign_up(self, email: str, password: str) -> Result: ...

    async def sign_in(self, email: str, password: str) -> Result: ...

    async def refresh(self, refresh_token: str) -> Result: ...

    async def resolve_token(self, access_token: str) -> Result: ...

    async def change_email(self, account_id: AccountId, new_email: str) -> Result: ...

    async def change_password(self, account_id: AccountId, new_password: str) -> Result: ...

    async def delete_user(self, account_id: AccountId) -> Result: ...

    async def find_by_email(self, email: str) -> Result: ...

    async def send_password_reset(self, email: str) -> Result: ...

    def on_account_created(self, observer: Callable[[AccountCreated], None]) -> Subscription: ...

    def on_account_deleted(self, observer: Callable[[AccountDeleted], None]) -> Subscription: ...
