"""
Chirpboard Backend: Reply Model
===============================

What:  ORM model for the `replies` table.
How:   `creator_id` and `entry_id` hold 24-character row ids of the author
       and the parent entry. Rules live in validators.validate_reply.
"""

from sqlalchemy import Integer, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from chirpboard.database import Base, new_object_id


class Reply(Base):
    __tablename__ = "replies"
    __entity_name__ = "Reply"

    id: Mapped[str] = mapped_column(String(24), primary_key=True, default=new_object_id)
    message: Mapped[str] = mapped_column(Text, nullable=False, default="")
    creator_id: Mapped[str] = mapped_column(String(24), nullable=False, index=True)
    entry_id: Mapped[str] = mapped_column(String(24), nullable=False, index=True)
    likes: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        server_default=text("0"),
    )

    def __repr__(self) -> str:
        return f"<Reply(id={self.id}, entry_id={self.entry_id}, creator_id={self.creator_id})>"
