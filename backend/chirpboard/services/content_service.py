"""
Chirpboard Backend: Content Service
===================================

What:  Posting entries, listing entries and posting replies.
How:   Each write checks its per-route emptiness rule, performs one
       existence check for the named author, then adds the row and flushes
       so entity rules (validators.py) run inside the call.
Who:   POST /entry, GET /entry, POST /reply and the live channel.
"""

import logging
from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from chirpboard.exceptions import NotFoundError, ValidationError
from chirpboard.models.entry import Entry
from chirpboard.models.reply import Reply
from chirpboard.models.user import User
from chirpboard.schemas.board import EntrySummary

logger = logging.getLogger(__name__)


class ContentService:
    """Stateless; every method receives the database session to use."""

    async def _get_author(self, db: AsyncSession, username: str) -> User:
        result = await db.execute(select(User).where(User.username == username))
        user = result.scalar_one_or_none()
        if user is None:
            raise NotFoundError(resource="user", resource_id=username)
        return user

    async def post_entry(self, db: AsyncSession, message: str, username: str) -> Entry:
        """
        Create an entry with zero likes.

        Raises:
            ValidationError:       message or username is empty
            NotFoundError:         no account has that username
            EntityValidationError: message is 500 characters or longer
        """
        if message == "" or username == "":
            raise ValidationError(message="Entry message and username can't be empty")

        await self._get_author(db, username)

        entry = Entry(message=message, username=username, likes=0)
        db.add(entry)
        await db.flush()
        logger.info("Entry %s posted by %s", entry.id, username)
        return entry

    async def list_entries(self, db: AsyncSession) -> List[EntrySummary]:
        """Every entry, oldest first, projected to message and author."""
        result = await db.execute(select(Entry).order_by(Entry.created_at))
        return [EntrySummary.model_validate(entry) for entry in result.scalars().all()]

    async def post_reply(
        self,
        db: AsyncSession,
        message: str,
        entry_id: str,
        username: str,
    ) -> Reply:
        """
        Create a reply to `entry_id` authored by `username`.

        The parent id is stored as given; its width is enforced by the Reply
        rules, not by a lookup.

        Raises:
            ValidationError:       message is empty
            NotFoundError:         no account has that username
            EntityValidationError: message too long or entry_id not 24 chars
        """
        if message == "":
            raise ValidationError(message="Reply message can't be empty")

        author = await self._get_author(db, username)

        reply = Reply(message=message, likes=0, creator_id=author.id, entry_id=entry_id)
        db.add(reply)
        await db.flush()
        logger.info("Reply %s posted on entry %s by %s", reply.id, entry_id, username)
        return reply


content_service = ContentService()
