"""
membership.py — Membership Guard

Decides whether an identity may act on a board or on a task of that board.
Pure read/decision logic: performs lookups, never mutates.

Ordering rule: existence is always checked before membership, so a
missing resource reports not-found rather than forbidden.
"""

from __future__ import annotations

from sqlalchemy.orm import Session

from app.core.errors import BoardNotFound, Forbidden, TaskNotFound
from app.core.logging import get_logger
from app.models.board import Board
from app.models.task import Task
from app.services.repository import Repository

logger = get_logger(__name__)


class MembershipGuard:
    def __init__(self, db: Session) -> None:
        self._boards = Repository(db, Board)
        self._tasks = Repository(db, Task)

    def require_board_member(self, board_id: str, user_id: str) -> Board:
        """Return the board if `user_id` is a member; the board is reused by the caller."""
        board = self._boards.find_by_id(board_id)
        if board is None:
            raise BoardNotFound()
        if not board.has_member(user_id):
            logger.warning("User %s denied access to board %s", user_id, board_id)
            raise Forbidden("Access denied: you are not a member of this board")
        return board

    def require_board_owner(self, board_id: str, user_id: str) -> Board:
        board = self._boards.find_by_id(board_id)
        if board is None:
            raise BoardNotFound()
        if board.owner_id != user_id:
            logger.warning("User %s is not the owner of board %s", user_id, board_id)
            raise Forbidden("Only the board owner can do this")
        return board

    def require_task_access(self, task_id: str, user_id: str) -> Task:
        """
        Return the task if `user_id` is a member of the task's board.

        A task whose board no longer exists is reported as TaskNotFound.
        """
        task = self._tasks.find_by_id(task_id)
        if task is None:
            raise TaskNotFound()
        try:
            self.require_board_member(task.board_id, user_id)
        except BoardNotFound:
            raise TaskNotFound() from None
        except Forbidden:
            raise Forbidden("Access to this task is denied") from None
        return task
