"""
Chirpboard Backend: Session Service (Session Store Lookup)
==========================================================

What:  Mints session tokens, stores them, resolves them back to accounts
       and revokes them.
How:   A token is the SHA-256 hex digest of the current millisecond
       timestamp concatenated with a random value. Tokens are re-minted in
       the (astronomically unlikely) case the digest is letters-only or
       digits-only, so every stored token passes the Session-Cookie Gate.
Who:   Login, logout and the protected probe route.
"""

import hashlib
import logging
import secrets
import time
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from chirpboard.models.session import UserSession
from chirpboard.models.user import User
from chirpboard.validators import is_well_formed_token

logger = logging.getLogger(__name__)


def mint_token() -> str:
    """New 64-character hex token that satisfies the gate's shape rule."""
    while True:
        now_ms = str(int(time.time() * 1000))
        nonce = secrets.token_hex(16)
        token = hashlib.sha256((now_ms + nonce).encode("utf-8")).hexdigest()
        if is_well_formed_token(token):
            return token


class SessionService:
    """Stateless; every method receives the request's database session."""

    async def create_session(self, db: AsyncSession, user: User) -> str:
        """
        Persist a new session for `user` and return its token.

        One row per login call; earlier sessions of the same account stay
        valid until they are logged out.
        """
        token = mint_token()
        db.add(UserSession(session_id=token, user_id=user.id))
        await db.flush()
        logger.info("Session created for user %s", user.id)
        return token

    async def resolve_user(self, db: AsyncSession, token: str) -> Optional[User]:
        """
        The account owning `token`, or None when the session or its account
        no longer exists.
        """
        result = await db.execute(
            select(UserSession).where(UserSession.session_id == token)
        )
        session = result.scalar_one_or_none()
        if session is None:
            return None

        result = await db.execute(select(User).where(User.id == session.user_id))
        return result.scalar_one_or_none()

    async def revoke(self, db: AsyncSession, token: str) -> bool:
        """Delete the session row for `token`; True when a row was removed."""
        result = await db.execute(
            delete(UserSession).where(UserSession.session_id == token)
        )
        removed = bool(result.rowcount)
        logger.info("Session revoked (found=%s)", removed)
        return removed


session_service = SessionService()
