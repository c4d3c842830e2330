"""
Chirpboard Backend: Session Model
=================================

What:  ORM model for the `sessions` table: one row per successful login,
       mapping the cookie token to the account that owns it.
How:   Created on login, looked up by token on every protected request,
       deleted on logout.
"""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from chirpboard.database import Base, new_object_id


class UserSession(Base):
    __tablename__ = "sessions"
    __entity_name__ = "Session"

    id: Mapped[str] = mapped_column(String(24), primary_key=True, default=new_object_id)
    session_id: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    user_id: Mapped[str] = mapped_column(String(24), nullable=False, index=True)

    def __repr__(self) -> str:
        # never log the token itself
        return f"<UserSession(id={self.id}, user_id={self.user_id})>"
