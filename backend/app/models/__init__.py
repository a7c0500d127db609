"""
models — SQLAlchemy ORM models for the task board store.

Importing this package registers every table on `Base.metadata`.
"""

from app.models.base import Base
from app.models.user import User
from app.models.board import Board, board_member
from app.models.column import BoardColumn
from app.models.task import Task

__all__ = [
    "Base",
    "User",
    "Board",
    "board_member",
    "BoardColumn",
    "Task",
]
