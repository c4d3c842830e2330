"""
Chirpboard Backend: Account Service
===================================

What:  Registration and credential checks.
How:   Passwords are hashed with bcrypt before they reach the store and
       verified with bcrypt.checkpw (constant-time). Handle and email are
       unique: a pre-check answers the common case, and the unique
       constraints on `users` catch concurrent registrations.
Who:   POST /user and POST /user/isValid.

Error Handling:
    Empty fields, duplicates and bad passwords raise ValidationError (400).
    Login failures always carry the same message so a caller cannot tell
    an unknown email from a wrong password.
"""

import logging
from typing import Optional

import bcrypt
from fastapi import Request
from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from chirpboard.exceptions import ValidationError
from chirpboard.models.user import User
from chirpboard.schemas.board import RegisteredUserResponse

logger = logging.getLogger(__name__)

LOGIN_FAILED_MESSAGE = "Invalid email or password"


class AccountService:
    """
    Business logic for accounts.

    Built once per app by create_app() from Settings.bcrypt_rounds and
    reached by routes through `get_account_service`.

    Args:
        bcrypt_rounds: bcrypt cost factor
    """

    def __init__(self, bcrypt_rounds: int = 10):
        self.bcrypt_rounds = bcrypt_rounds
        self._dummy_hash: Optional[bytes] = None

    # ── Password hashing ──────────────────────────────────────────────────

    def hash_password(self, password: str) -> str:
        """
        bcrypt hash of `password` ("$2b$<rounds>$...").

        Raises:
            ValidationError: password longer than bcrypt's 72-byte limit
        """
        raw = password.encode("utf-8")
        if len(raw) > 72:
            raise ValidationError(message="Password must be at most 72 bytes", field="password")
        return bcrypt.hashpw(raw, bcrypt.gensalt(rounds=self.bcrypt_rounds)).decode("utf-8")

    def verify_password(self, password: str, password_hash: Optional[str]) -> bool:
        """Constant-time check of `password` against a stored bcrypt hash."""
        raw = password.encode("utf-8")
        if password_hash is None:
            # Same amount of work as a real check for unknown accounts.
            if self._dummy_hash is None:
                self._dummy_hash = bcrypt.hashpw(b"chirpboard", bcrypt.gensalt(rounds=self.bcrypt_rounds))
            bcrypt.checkpw(b"chirpboard", self._dummy_hash)
            return False
        try:
            return bcrypt.checkpw(raw, password_hash.encode("utf-8"))
        except ValueError:
            # malformed stored hash or password over 72 bytes
            return False

    # ── Operations ────────────────────────────────────────────────────────

    async def register(
        self,
        db: AsyncSession,
        username: str,
        password: str,
        email: str,
        first_name: str,
        last_name: str,
    ) -> RegisteredUserResponse:
        """
        Create an account.

        Raises:
            ValidationError:       empty username/email/password, or the
                                   handle or email is already registered
            EntityValidationError: a User rule failed at flush time
        """
        if username == "" or email == "" or password == "":
            raise ValidationError(message="Register fields can't be empty")

        result = await db.execute(
            select(User.id).where(or_(User.username == username, User.email == email)).limit(1)
        )
        if result.scalar_one_or_none() is not None:
            raise ValidationError(message="An account with that username or email already exists")

        user = User(
            username=username,
            email=email,
            password_hash=self.hash_password(password),
            first_name=first_name,
            last_name=last_name,
        )
        db.add(user)
        try:
            await db.flush()
        except IntegrityError:
            logger.info("Concurrent registration lost the race for %s", username)
            raise ValidationError(message="An account with that username or email already exists")

        logger.info("User registered: %s (%s)", user.username, user.id)
        return RegisteredUserResponse(
            email=user.email,
            username=user.username,
            name=user.full_name,
        )

    async def authenticate(self, db: AsyncSession, email: str, password: str) -> User:
        """
        The account for `email` if `password` matches.

        Raises:
            ValidationError: with LOGIN_FAILED_MESSAGE for every failure
        """
        if email == "":
            raise ValidationError(message=LOGIN_FAILED_MESSAGE)

        result = await db.execute(select(User).where(User.email == email))
        user = result.scalar_one_or_none()

        stored_hash = user.password_hash if user is not None else None
        if not self.verify_password(password, stored_hash):
            logger.info("Failed login attempt")
            raise ValidationError(message=LOGIN_FAILED_MESSAGE)

        return user


def get_account_service(request: Request) -> AccountService:
    """FastAPI dependency: the AccountService configured for this app."""
    return request.app.state.account_service
