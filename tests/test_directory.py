"""
User directory: account storage, email uniqueness and lifecycle events.
"""

import asyncio

import pytest

from authkit.auth.core import AccountCreated, AccountDeleted
from authkit.auth.faults import AUTH_ACCOUNT_NOT_FOUND, AUTH_EMAIL_NOT_AVAILABLE
from authkit.auth.hashing import Argon2SecretEncoder
from authkit.auth.stores import MemoryUserDirectory


pytestmark = pytest.mark.asyncio


# ============================================================================
# Creation
# ============================================================================

class TestCreateAccount:

    async def test_create_and_find(self, directory):
        account_id = await directory.create_account("a@x.com", "pw")

        by_email = await directory.find_by_email("a@x.com")
        by_id = await directory.find_by_id(account_id)
        assert by_email == by_id
        assert by_email.id == account_id
        assert by_email.email == "a@x.com"
        assert len(directory) == 1

    async def test_ids_are_distinct(self, directory):
        first = await directory.create_account("a@x.com", "pw")
        second = await directory.create_account("b@x.com", "pw")
        assert first != second

    async def test_duplicate_email(self, directory):
        await directory.create_account("a@x.com", "pw")
        with pytest.raises(AUTH_EMAIL_NOT_AVAILABLE):
            await directory.create_account("a@x.com", "other")
        assert len(directory) == 1

    async def test_email_is_case_sensitive(self, directory):
        await directory.create_account("a@x.com", "pw")
        await directory.create_account("A@x.com", "pw")
        assert len(directory) == 2

    async def test_explicit_id(self, directory):
        account_id = await directory.create_account("a@x.com", "pw", account_id="user-1")
        assert account_id == "user-1"
        assert (await directory.find_by_id("user-1")).email == "a@x.com"

    async def test_explicit_id_collision(self, directory):
        await directory.create_account("a@x.com", "pw", account_id="user-1")
        with pytest.raises(ValueError):
            await directory.create_account("b@x.com", "pw", account_id="user-1")
        assert await directory.is_email_available("b@x.com")

    async def test_id_factory(self, notifier):
        ids = iter(["u1", "u2"])
        directory = MemoryUserDirectory(notifier=notifier, id_factory=lambda: next(ids))
        assert await directory.create_account("a@x.com", "pw") == "u1"
        assert await directory.create_account("b@x.com", "pw") == "u2"

    async def test_concurrent_duplicate_sign_ups(self, directory):
        results = await asyncio.gather(
            *(directory.create_account("race@x.com", f"pw{i}") for i in range(10)),
            return_exceptions=True,
        )
        successes = [r for r in results if isinstance(r, str)]
        failures = [r for r in results if isinstance(r, AUTH_EMAIL_NOT_AVAILABLE)]
        assert len(successes) == 1
        assert len(failures) == 9
        assert len(directory) == 1

    async def test_snapshot_does_not_track_changes(self, directory):
        account_id = await directory.create_account("a@x.com", "pw")
        snapshot = await directory.find_by_id(account_id)
        await directory.update_email(account_id, "b@x.com")
        assert snapshot.email == "a@x.com"

    async def test_secret_hidden_from_repr(self, directory):
        account_id = await directory.create_account("a@x.com", "hunter2")
        account = await directory.find_by_id(account_id)
        assert "hunter2" not in repr(account)
        assert account.to_dict() == {"id": account_id, "email": "a@x.com"}


# ============================================================================
# Updates
# ============================================================================

class TestUpdates:

    async def test_update_email_keeps_id(self, directory):
        account_id = await directory.create_account("a@x.com", "pw")
        await directory.update_email(account_id, "b@x.com")

        assert await directory.find_by_email("a@x.com") is None
        assert (await directory.find_by_email("b@x.com")).id == account_id
        assert await directory.is_email_available("a@x.com")

    async def test_update_email_to_own_email(self, directory):
        account_id = await directory.create_account("a@x.com", "pw")
        await directory.update_email(account_id, "a@x.com")
        assert (await directory.find_by_email("a@x.com")).id == account_id

    async def test_update_email_taken(self, directory):
        first = await directory.create_account("a@x.com", "pw")
        await directory.create_account("b@x.com", "pw")
        with pytest.raises(AUTH_EMAIL_NOT_AVAILABLE):
            await directory.update_email(first, "b@x.com")
        assert (await directory.find_by_id(first)).email == "a@x.com"

    async def test_update_email_unknown_account(self, directory):
        with pytest.raises(AUTH_ACCOUNT_NOT_FOUND) as exc_info:
            await directory.update_email("ghost", "b@x.com")
        assert exc_info.value.metadata["account_id"] == "ghost"

    async def test_concurrent_email_claims(self, directory):
        first = await directory.create_account("a@x.com", "pw")
        second = await directory.create_account("b@x.com", "pw")
        results = await asyncio.gather(
            directory.update_email(first, "c@x.com"),
            directory.update_email(second, "c@x.com"),
            return_exceptions=True,
        )
        assert sum(isinstance(r, AUTH_EMAIL_NOT_AVAILABLE) for r in results) == 1
        owner = await directory.find_by_email("c@x.com")
        assert owner.id in (first, second)

    async def test_update_password(self, directory):
        account_id = await directory.create_account("a@x.com", "old")
        await directory.update_password(account_id, "new")
        account = await directory.find_by_id(account_id)
        assert directory.encoder.verify(account.password_secret, "new")
        assert not directory.encoder.verify(account.password_secret, "old")

    async def test_update_password_unknown_account(self, directory):
        with pytest.raises(AUTH_ACCOUNT_NOT_FOUND):
            await directory.update_password("ghost", "new")

    async def test_argon2_secrets(self, notifier):
        encoder = Argon2SecretEncoder(time_cost=1, memory_cost=8, parallelism=1)
        directory = MemoryUserDirectory(notifier=notifier, encoder=encoder)
        account_id = await directory.create_account("a@x.com", "pw")
        account = await directory.find_by_id(account_id)
        assert account.password_secret.startswith("$argon2id$")
        assert encoder.verify(account.password_secret, "pw")
        assert not encoder.verify(account.password_secret, "nope")
        assert not encoder.verify("not-a-hash", "pw")


# ============================================================================
# Deletion & events
# ============================================================================

class TestDeletion:

    async def test_delete(self, directory):
        account_id = await directory.create_account("a@x.com", "pw")
        await directory.delete_account(account_id)

        assert await directory.find_by_id(account_id) is None
        assert await directory.find_by_email("a@x.com") is None
        assert await directory.is_email_available("a@x.com")
        assert len(directory) == 0

    async def test_delete_unknown(self, directory):
        with pytest.raises(AUTH_ACCOUNT_NOT_FOUND):
            await directory.delete_account("ghost")

    async def test_email_reusable_after_delete(self, directory):
        first = await directory.create_account("a@x.com", "pw")
        await directory.delete_account(first)
        second = await directory.create_account("a@x.com", "pw")
        assert second != first

    async def test_lifecycle_events(self, directory, notifier):
        events = []
        notifier.subscribe(events.append)

        account_id = await directory.create_account("a@x.com", "pw")
        await directory.update_email(account_id, "b@x.com")
        await directory.delete_account(account_id)

        assert events == [AccountCreated(account_id), AccountDeleted(account_id)]

    async def test_event_sees_committed_account(self, directory, notifier):
        seen = []

        def observer(event):
            seen.append(directory._accounts.get(event.account_id))

        notifier.on_created(observer)
        account_id = await directory.create_account("a@x.com", "pw")
        assert seen[0].id == account_id

    async def test_failed_creation_emits_nothing(self, directory, notifier):
        await directory.create_account("a@x.com", "pw")
        events = []
        notifier.subscribe(events.append)
        with pytest.raises(AUTH_EMAIL_NOT_AVAILABLE):
            await directory.create_account("a@x.com", "pw")
        assert events == []
