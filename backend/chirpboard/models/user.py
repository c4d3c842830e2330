"""
Chirpboard Backend: User Model
==============================

What:  ORM model for the `users` table (one row per registered account).
How:   Plain columns plus a `full_name` property derived from the first and
       last name. Field rules live in validators.validate_user and run
       before every flush.

Lifecycle:
    Created by POST /user. No operation updates or deletes an account.
"""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from chirpboard.database import Base, new_object_id
from chirpboard.validators import split_full_name


class User(Base):
    """
    A registered account.

    `username` is the public handle; `password_hash` always holds a bcrypt
    hash ("$2b$10$..."), never the raw password.
    """

    __tablename__ = "users"
    __entity_name__ = "User"

    id: Mapped[str] = mapped_column(String(24), primary_key=True, default=new_object_id)
    first_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    last_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    username: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    @property
    def full_name(self) -> str:
        """Display name: first and last name joined by one space."""
        return f"{self.first_name} {self.last_name}"

    @full_name.setter
    def full_name(self, value: str) -> None:
        # split_full_name raises before anything is assigned
        first_name, last_name = split_full_name(value)
        self.first_name = first_name
        self.last_name = last_name

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username='{self.username}')>"
