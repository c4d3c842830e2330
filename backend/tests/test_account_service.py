"""
Chirpboard Backend: Account Service Unit Tests
==============================================

What:  Password hashing, registration checks and login.
How:   Mock DB session; bcrypt runs for real at cost 4.

What we test:
    - Hashes carry the bcrypt marker and verify
    - Empty and duplicate registrations are refused before any insert
    - Unknown email and wrong password fail with the same message
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest
from sqlalchemy.exc import IntegrityError

from chirpboard.exceptions import ValidationError
from chirpboard.models.user import User
from chirpboard.services.account_service import LOGIN_FAILED_MESSAGE, AccountService
from conftest import query_result


class TestPasswordHashing:

    def setup_method(self):
        self.service = AccountService(bcrypt_rounds=4)

    def test_hash_has_bcrypt_marker(self):
        hashed = self.service.hash_password("hunter22")
        assert hashed.startswith("$2")
        assert hashed != "hunter22"

    def test_verify(self):
        hashed = self.service.hash_password("hunter22")
        assert self.service.verify_password("hunter22", hashed)
        assert not self.service.verify_password("hunter23", hashed)

    def test_verify_malformed_hash(self):
        assert not self.service.verify_password("hunter22", "not-a-hash")

    def test_verify_without_account(self):
        assert not self.service.verify_password("hunter22", None)

    def test_overlong_password_is_refused(self):
        with pytest.raises(ValidationError):
            self.service.hash_password("x" * 73)


class TestRegister:

    def setup_method(self):
        self.service = AccountService(bcrypt_rounds=4)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "username,password,email",
        [("", "pw", "a@b.c"), ("rob", "", "a@b.c"), ("rob", "pw", "")],
    )
    async def test_empty_fields(self, mock_db_session, username, password, email):
        with pytest.raises(ValidationError) as exc_info:
            await self.service.register(mock_db_session, username, password, email, "Rob", "Bor")
        assert exc_info.value.message == "Register fields can't be empty"
        mock_db_session.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_duplicate_is_refused(self, mock_db_session):
        mock_db_session.execute = AsyncMock(return_value=query_result("existing-id"))

        with pytest.raises(ValidationError) as exc_info:
            await self.service.register(mock_db_session, "rob", "pw", "rob@example.com", "Rob", "Bor")
        assert "already exists" in exc_info.value.message
        mock_db_session.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_concurrent_duplicate_is_refused(self, mock_db_session):
        mock_db_session.flush = AsyncMock(
            side_effect=IntegrityError("INSERT INTO users", {}, Exception("unique"))
        )

        with pytest.raises(ValidationError) as exc_info:
            await self.service.register(mock_db_session, "rob", "pw", "rob@example.com", "Rob", "Bor")
        assert "already exists" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_register_success(self, mock_db_session):
        result = await self.service.register(
            mock_db_session, "rob", "hunter22", "rob@example.com", "Rob", "Bor"
        )

        assert result.email == "rob@example.com"
        assert result.username == "rob"
        assert result.name == "Rob Bor"

        stored = mock_db_session.add.call_args[0][0]
        assert isinstance(stored, User)
        assert stored.password_hash.startswith("$2")
        assert self.service.verify_password("hunter22", stored.password_hash)


class TestAuthenticate:

    def setup_method(self):
        self.service = AccountService(bcrypt_rounds=4)

    @pytest.mark.asyncio
    async def test_unknown_email(self, mock_db_session):
        with pytest.raises(ValidationError) as exc_info:
            await self.service.authenticate(mock_db_session, "nobody@example.com", "pw")
        assert exc_info.value.message == LOGIN_FAILED_MESSAGE

    @pytest.mark.asyncio
    async def test_wrong_password(self, mock_db_session):
        user = SimpleNamespace(password_hash=self.service.hash_password("hunter22"))
        mock_db_session.execute = AsyncMock(return_value=query_result(user))

        with pytest.raises(ValidationError) as exc_info:
            await self.service.authenticate(mock_db_session, "rob@example.com", "wrong")
        assert exc_info.value.message == LOGIN_FAILED_MESSAGE

    @pytest.mark.asyncio
    async def test_correct_password(self, mock_db_session):
        user = SimpleNamespace(password_hash=self.service.hash_password("hunter22"))
        mock_db_session.execute = AsyncMock(return_value=query_result(user))

        assert await self.service.authenticate(mock_db_session, "rob@example.com", "hunter22") is user
