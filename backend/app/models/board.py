"""
board.py — ORM Model for Boards and Board Membership

Purpose:
- Represent a named workspace owned by one user and shared with members.
- `board_member` is the membership relation consulted by the Membership
  Guard for every board- and task-scoped operation.

Key Points:
- The owner is always a member (enforced by services/hierarchy.py at
  creation; there is no member removal).
- `column_counter` is the next free column position. It is bumped with a
  single atomic UPDATE, never recomputed by counting rows.
- Deleting a board deletes its columns and tasks.
"""

from sqlalchemy import Boolean, Column, ForeignKey, Integer, String, Table
from sqlalchemy.orm import relationship

from app.models.base import Base, TimestampMixin, new_id


board_member = Table(
    "board_member",
    Base.metadata,
    Column("board_id", String(32), ForeignKey("board.id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", String(32), ForeignKey("user.id", ondelete="CASCADE"), primary_key=True),
)


class Board(TimestampMixin, Base):
    __tablename__ = "board"

    id = Column(String(32), primary_key=True, default=new_id)

    name = Column(String(100), nullable=False)
    description = Column(String(500), nullable=True)
    is_public = Column(Boolean, nullable=False, default=False)

    owner_id = Column(String(32), ForeignKey("user.id"), nullable=False, index=True)

    # Next position handed out to a new column (see HierarchyStore.create_column)
    column_counter = Column(Integer, nullable=False, default=0)

    # ORM Relationships
    owner = relationship("User", foreign_keys=[owner_id])
    members = relationship("User", secondary=board_member, lazy="selectin")
    columns = relationship(
        "BoardColumn",
        back_populates="board",
        cascade="all, delete-orphan",
        order_by="BoardColumn.position",
    )
    tasks = relationship("Task", back_populates="board", cascade="all, delete-orphan")

    @property
    def member_ids(self) -> list:
        return [member.id for member in self.members]

    def has_member(self, user_id: str) -> bool:
        return any(member.id == user_id for member in self.members)

    def __repr__(self):
        return f"<Board {self.name} ({self.id})>"
