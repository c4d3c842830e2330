"""
Chirpboard Backend: Entry Model
===============================

What:  ORM model for the `entries` table (top-level posts).
How:   Rules (message under 500 chars, author present, likes >= 0) live in
       validators.validate_entry and run before every flush.

Lifecycle:
    Created by POST /entry or by a frame on the live channel. Immutable
    afterwards.
"""

from datetime import datetime, timezone

from sqlalchemy import Index, Integer, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import TIMESTAMP

from chirpboard.database import Base, new_object_id


class Entry(Base):
    """A short post; `username` is the author's handle."""

    __tablename__ = "entries"
    __entity_name__ = "Entry"

    id: Mapped[str] = mapped_column(String(24), primary_key=True, default=new_object_id)
    message: Mapped[str] = mapped_column(Text, nullable=False, default="")
    username: Mapped[str] = mapped_column(String(64), nullable=False)
    likes: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        server_default=text("0"),
    )
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        Index("idx_entries_created_at", "created_at"),
    )

    def to_broadcast(self) -> dict:
        """JSON shape pushed to live listeners."""
        return {
            "id": self.id,
            "message": self.message,
            "username": self.username,
            "likes": self.likes,
        }

    def __repr__(self) -> str:
        return f"<Entry(id={self.id}, username='{self.username}', likes={self.likes})>"
