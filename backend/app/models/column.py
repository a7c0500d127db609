"""
column.py — ORM Model for Board Columns

A column is an ordered, named subdivision of a board ("To Do", "Doing").
Positions are zero-based, dense and unique per board; the unique
constraint makes a duplicate position a store error rather than silent
corruption.
"""

from sqlalchemy import Column, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from app.models.base import Base, TimestampMixin, new_id


class BoardColumn(TimestampMixin, Base):
    __tablename__ = "board_column"
    __table_args__ = (
        UniqueConstraint("board_id", "position", name="uq_board_column_position"),
    )

    id = Column(String(32), primary_key=True, default=new_id)
    name = Column(String(50), nullable=False)
    position = Column(Integer, nullable=False)

    board_id = Column(String(32), ForeignKey("board.id", ondelete="CASCADE"), nullable=False, index=True)
    board = relationship("Board", back_populates="columns")

    def __repr__(self):
        return f"<BoardColumn {self.name} #{self.position} | {self.board_id}>"
