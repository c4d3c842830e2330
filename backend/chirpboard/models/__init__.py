"""
Chirpboard Backend: ORM Models
==============================

What:  SQLAlchemy models for the four stored documents.
Who:   Services (CRUD), database.py (create_all) and Alembic (autogenerate).

    users     ← User         accounts created at registration
    entries   ← Entry        top-level posts
    replies   ← Reply        replies to an entry
    sessions  ← UserSession  one row per successful login
"""

from chirpboard.models.entry import Entry
from chirpboard.models.reply import Reply
from chirpboard.models.session import UserSession
from chirpboard.models.user import User

__all__ = ["Entry", "Reply", "User", "UserSession"]
