"""
task.py — ORM Model for Tasks (with embedded comments)

Purpose:
- Represent a unit of work belonging to exactly one board and one column.
- Hold the task's comments as an embedded, most-recent-first JSON list;
  comments are never referenced outside their task.

Key Points:
- `revision` is the SQLAlchemy version counter: every flush of a changed
  task issues `UPDATE ... WHERE id = :id AND revision = :expected` and bumps
  it, so two writers racing on the same task cannot silently overwrite each
  other (the loser gets StaleDataError, surfaced as Conflict).
- The comment list must be *reassigned* on change (not mutated in place)
  so the JSON column is flagged dirty.

Comment entry shape:
    {"id": str, "content": str, "author": user_id, "created_at": ISO-8601}
"""

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from app.models.base import Base, TimestampMixin, new_id


class Task(TimestampMixin, Base):
    __tablename__ = "task"

    id = Column(String(32), primary_key=True, default=new_id)

    title = Column(String(200), nullable=False)
    description = Column(String(2000), nullable=True)

    # Enumerated fields (validated in services/types.py)
    type = Column(String(16), nullable=False, default="task")
    priority = Column(String(16), nullable=False, default="medium")
    status = Column(String(16), nullable=False, default="todo", index=True)

    # People
    assignee_id = Column(String(32), ForeignKey("user.id", ondelete="SET NULL"), nullable=True)
    reporter_id = Column(String(32), ForeignKey("user.id"), nullable=False)

    # Hierarchy
    board_id = Column(String(32), ForeignKey("board.id", ondelete="CASCADE"), nullable=False, index=True)
    column_id = Column(String(32), ForeignKey("board_column.id", ondelete="CASCADE"), nullable=False, index=True)

    labels = Column(JSON, nullable=False, default=list)
    story_points = Column(Integer, nullable=True)
    due_date = Column(DateTime(timezone=True), nullable=True)

    comments = Column(JSON, nullable=False, default=list)

    revision = Column(Integer, nullable=False)

    # ORM Relationships
    board = relationship("Board", back_populates="tasks")
    column = relationship("BoardColumn")
    assignee = relationship("User", foreign_keys=[assignee_id])
    reporter = relationship("User", foreign_keys=[reporter_id])

    __mapper_args__ = {"version_id_col": revision}

    def find_comment(self, comment_id: str):
        """Return the embedded comment dict with this id, or None."""
        for comment in self.comments or []:
            if comment.get("id") == comment_id:
                return comment
        return None

    def __repr__(self):
        return f"<Task {self.title} | {self.status} | rev {self.revision}>"
