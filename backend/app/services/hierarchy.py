"""
hierarchy.py — Hierarchy Store (Board → Column → Task)

Purpose:
- Create / read / update / delete boards, columns and tasks while keeping
  the cross-entity invariants:
    * the board owner is always a member,
    * column positions per board are 0..n-1 in creation order,
    * a task's column exists and belongs to the task's board,
    * the reporter is fixed at creation.
- Every mutation validates first and commits once, so a failed validation
  never leaves a partial write behind.

Callers (the route layer) run the Membership Guard before board- and
task-scoped operations; this module trusts that check.
"""

from __future__ import annotations

from typing import Any, List, Mapping, Optional, Union

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from app.core.errors import BoardNotFound, Conflict, IdentityNotFound, TaskNotFound, ValidationError
from app.core.logging import get_logger
from app.models.board import Board
from app.models.column import BoardColumn
from app.models.task import Task
from app.models.user import User
from app.services.repository import Repository, commit, store_errors
from app.services.types import (
    BoardCreate,
    ColumnCreate,
    MemberAdd,
    TaskCreate,
    TaskUpdate,
    task_fields,
    validate,
)

logger = get_logger(__name__)

Payload = Union[Mapping[str, Any], TaskCreate, TaskUpdate]


def check_revision(task: Task, expected_revision: Optional[int]) -> None:
    """Fail with Conflict when the caller's view of the task is stale."""
    if expected_revision is not None and expected_revision != task.revision:
        raise Conflict(
            f"Task {task.id} is at revision {task.revision}, request expected {expected_revision}"
        )


class HierarchyStore:
    def __init__(self, db: Session) -> None:
        self._db = db
        self._users = Repository(db, User)
        self._boards = Repository(db, Board)
        self._columns = Repository(db, BoardColumn)
        self._tasks = Repository(db, Task)

    # ------------------------------------------------------------------ #
    # Boards
    # ------------------------------------------------------------------ #
    def create_board(
        self,
        owner_id: str,
        name: Optional[str] = None,
        description: Optional[str] = None,
        is_public: bool = False,
        *,
        payload: Union[BoardCreate, Mapping[str, Any], None] = None,
    ) -> Board:
        if payload is None:
            payload = {"name": name, "description": description, "is_public": is_public}
        data = validate(BoardCreate, payload)

        owner = self._users.find_by_id(owner_id)
        if owner is None:
            raise IdentityNotFound()

        board = self._boards.create(
            name=data.name,
            description=data.description,
            is_public=data.is_public,
            owner_id=owner.id,
            members=[owner],
            column_counter=0,
        )
        commit(self._db)
        logger.info("Board %s created by %s", board.id, owner_id)
        return board

    def get_board(self, board_id: str) -> Board:
        board = self._boards.find_by_id(board_id)
        if board is None:
            raise BoardNotFound()
        return board

    def list_boards_for_user(self, user_id: str) -> List[Board]:
        return self._boards.find(
            Board.members.any(User.id == user_id),
            order_by=[Board.created_at],
        )

    def add_member(self, board_id: str, payload: Union[MemberAdd, Mapping[str, Any]]) -> Board:
        """Add a user (by id or email) to the board. Adding an existing member is a no-op."""
        data = validate(MemberAdd, payload)
        board = self.get_board(board_id)

        if data.user_id:
            user = self._users.find_by_id(data.user_id)
        else:
            user = self._users.find_one(User.email == data.email)
        if user is None:
            raise IdentityNotFound("User to add was not found")

        if not board.has_member(user.id):
            board.members.append(user)
            commit(self._db)
            logger.info("User %s added to board %s", user.id, board_id)
        return board

    def delete_board(self, board_id: str) -> None:
        """Delete the board together with its columns and tasks."""
        if not self._boards.delete_by_id(board_id):
            raise BoardNotFound()
        commit(self._db)
        logger.info("Board %s deleted", board_id)

    # ------------------------------------------------------------------ #
    # Columns
    # ------------------------------------------------------------------ #
    def create_column(self, board_id: str, name: str) -> BoardColumn:
        """
        Append a column to the board.

        The position comes from an atomic increment of the board's column
        counter executed in the same transaction as the insert, so two
        concurrent calls can never receive the same position.
        """
        data = validate(ColumnCreate, {"name": name})

        with store_errors(self._db):
            result = self._db.execute(
                update(Board)
                .where(Board.id == board_id)
                .values(column_counter=Board.column_counter + 1)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                self._db.rollback()
                raise BoardNotFound()
            counter = self._db.scalar(select(Board.column_counter).where(Board.id == board_id))

        column = self._columns.create(name=data.name, position=counter - 1, board_id=board_id)
        commit(self._db)
        logger.info("Column %s created on board %s at position %d", column.id, board_id, column.position)
        return column

    def list_columns(self, board_id: str) -> List[BoardColumn]:
        return self._columns.find(BoardColumn.board_id == board_id, order_by=[BoardColumn.position])

    # ------------------------------------------------------------------ #
    # Tasks
    # ------------------------------------------------------------------ #
    def create_task(self, board_id: str, reporter_id: str, fields: Payload) -> Task:
        """
        Create a task on `board_id` reported by `reporter_id`.

        Board and reporter always come from the arguments, never from the
        payload.
        """
        data = validate(TaskCreate, fields)
        self._check_references(board_id, data)

        task = self._tasks.create(
            title=data.title,
            description=data.description,
            type=data.type,
            priority=data.priority,
            status=data.status,
            assignee_id=data.assignee,
            reporter_id=reporter_id,
            board_id=board_id,
            column_id=data.column,
            labels=list(data.labels),
            story_points=data.story_points,
            due_date=data.due_date,
            comments=[],
        )
        commit(self._db)
        logger.info("Task %s created on board %s by %s", task.id, board_id, reporter_id)
        return task

    def list_tasks(self, board_id: str) -> List[Task]:
        return self._tasks.find(Task.board_id == board_id, order_by=[Task.created_at])

    def get_task(self, task_id: str) -> Task:
        task = self._tasks.find_by_id(task_id)
        if task is None:
            raise TaskNotFound()
        return task

    def update_task(
        self,
        task_id: str,
        fields: Payload,
        expected_revision: Optional[int] = None,
    ) -> Task:
        """
        Merge the fields present in `fields` into the task and re-validate
        the merged document against the creation constraints.

        Raises:
            TaskNotFound, ValidationError, Conflict (stale revision).
        """
        task = self.get_task(task_id)
        changes = validate(TaskUpdate, fields).model_dump(exclude_unset=True)
        check_revision(task, expected_revision)

        merged = task_fields(task)
        merged.update(changes)
        data = validate(TaskCreate, merged)
        self._check_references(task.board_id, data)

        self._tasks.update_by_id(task.id, {
            "title": data.title,
            "description": data.description,
            "type": data.type,
            "priority": data.priority,
            "status": data.status,
            "assignee_id": data.assignee,
            "column_id": data.column,
            "labels": list(data.labels),
            "story_points": data.story_points,
            "due_date": data.due_date,
        })

        commit(self._db)
        logger.info("Task %s updated (%s) -> revision %d", task.id, ", ".join(sorted(changes)) or "no fields", task.revision)
        return task

    def delete_task(self, task_id: str) -> None:
        if not self._tasks.delete_by_id(task_id):
            raise TaskNotFound()
        commit(self._db)
        logger.info("Task %s deleted", task_id)

    # ------------------------------------------------------------------ #
    def _check_references(self, board_id: str, data: TaskCreate) -> None:
        errors: List[str] = []

        column = self._columns.find_by_id(data.column)
        if column is None:
            errors.append("column: Column not found")
        elif column.board_id != board_id:
            errors.append("column: Column belongs to a different board")

        if data.assignee is not None and self._users.find_by_id(data.assignee) is None:
            errors.append("assignee: User not found")

        if errors:
            raise ValidationError(errors)
