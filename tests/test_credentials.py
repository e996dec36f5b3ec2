"""
Credential verification: email syntax, existence and secret checks, in that order.
"""

import pytest

from authkit.auth.credentials import CredentialVerifier
from authkit.auth.faults import AUTH_INVALID_EMAIL, AUTH_USER_NOT_FOUND, AUTH_WRONG_PASSWORD
from authkit.auth.hashing import Argon2SecretEncoder
from authkit.auth.stores import MemoryUserDirectory


@pytest.fixture
def verifier(directory):
    return CredentialVerifier(directory)


class TestEmailSyntax:

    @pytest.mark.parametrize("email", [
        "a@x.com",
        "first.last@sub.example.org",
        "user+tag@example.co.uk",
    ])
    def test_valid(self, verifier, email):
        assert verifier.is_valid_email(email)

    @pytest.mark.parametrize("email", [
        "",
        "invalid-email",
        "a@x",
        "@x.com",
        "a@.com",
        "a b@x.com",
        "a@x.com ",
        "a@@x.com",
    ])
    def test_invalid(self, verifier, email):
        assert not verifier.is_valid_email(email)

    def test_custom_pattern(self, directory):
        verifier = CredentialVerifier(directory, email_pattern=r"[a-z]+@corp\.example")
        assert verifier.is_valid_email("alice@corp.example")
        assert not verifier.is_valid_email("alice@x.com")


class TestValidate:

    @pytest.mark.asyncio
    async def test_success(self, verifier, directory):
        account_id = await directory.create_account("a@x.com", "pw")
        account = await verifier.validate("a@x.com", "pw")
        assert account.id == account_id

    @pytest.mark.asyncio
    async def test_invalid_email_checked_first(self, verifier, directory):
        # Registered through the directory, which does not check syntax
        await directory.create_account("not-an-email", "pw")
        with pytest.raises(AUTH_INVALID_EMAIL):
            await verifier.validate("not-an-email", "pw")

    @pytest.mark.asyncio
    async def test_unknown_user(self, verifier):
        with pytest.raises(AUTH_USER_NOT_FOUND):
            await verifier.validate("ghost@x.com", "pw")

    @pytest.mark.asyncio
    async def test_wrong_password(self, verifier, directory):
        await directory.create_account("a@x.com", "pw")
        with pytest.raises(AUTH_WRONG_PASSWORD):
            await verifier.validate("a@x.com", "PW")

    @pytest.mark.asyncio
    async def test_empty_password(self, verifier, directory):
        await directory.create_account("a@x.com", "")
        account = await verifier.validate("a@x.com", "")
        assert account.email == "a@x.com"

    @pytest.mark.asyncio
    async def test_outdated_secret_reencoded(self, notifier):
        old = Argon2SecretEncoder(time_cost=1, memory_cost=8, parallelism=1)
        current = Argon2SecretEncoder(time_cost=2, memory_cost=8, parallelism=1)
        directory = MemoryUserDirectory(notifier=notifier, encoder=old)
        account_id = await directory.create_account("a@x.com", "pw")
        directory.encoder = current

        await CredentialVerifier(directory).validate("a@x.com", "pw")

        account = await directory.find_by_id(account_id)
        assert not current.check_needs_rehash(account.password_secret)
        assert current.verify(account.password_secret, "pw")

    @pytest.mark.asyncio
    async def test_current_secret_left_alone(self, verifier, directory):
        account_id = await directory.create_account("a@x.com", "pw")
        before = await directory.find_by_id(account_id)
        await verifier.validate("a@x.com", "pw")
        assert (await directory.find_by_id(account_id)) == before
