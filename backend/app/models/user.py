"""
user.py — ORM Model for Application Users

Purpose:
- Represent authenticated users of the system.
- Stores hashed passwords only — never raw.

The password hash column is *deferred*: ordinary lookups never load it.
Login verification asks for it explicitly with `undefer(User.hashed_password)`.

Used by:
- services/identity.py (register, login, token subject lookup)
- services/comments.py (author profile resolution)
"""

from sqlalchemy import Column, String
from sqlalchemy.orm import deferred

from app.models.base import Base, TimestampMixin, new_id


class User(TimestampMixin, Base):
    __tablename__ = "user"

    id = Column(String(32), primary_key=True, default=new_id)

    # Authentication fields
    username = Column(String(30), unique=True, index=True, nullable=False)
    email = Column(String(254), unique=True, index=True, nullable=False)  # stored lower-cased
    hashed_password = deferred(Column(String(255), nullable=False))

    def profile(self) -> dict:
        """Minimal public profile used wherever a user is displayed."""
        return {"id": self.id, "username": self.username, "email": self.email}

    def __repr__(self):
        return f"<User {self.username} <{self.email}>>"
