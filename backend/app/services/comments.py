"""
comments.py — Comment Lifecycle (embedded in Task)

Purpose:
- Add comments at the head of a task's list (most-recent-first).
- Delete a comment, only by its own author, keeping the order of the rest.
- Resolve comment authors to a minimal profile for display.

Both mutations rewrite the task's embedded list and go through the task
revision check, so two concurrent writers on the same task cannot
silently drop each other's change.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from app.core.errors import CommentNotFound, Forbidden, TaskNotFound
from app.core.logging import get_logger
from app.models.base import new_id, utcnow
from app.models.task import Task
from app.models.user import User
from app.services.hierarchy import check_revision
from app.services.repository import Repository, commit
from app.services.types import AuthorProfile, CommentCreate, CommentView, validate

logger = get_logger(__name__)


class CommentLifecycle:
    def __init__(self, db: Session) -> None:
        self._db = db
        self._tasks = Repository(db, Task)
        self._users = Repository(db, User)

    def add_comment(
        self,
        task_id: str,
        author_id: str,
        content: str,
        expected_revision: Optional[int] = None,
    ) -> List[CommentView]:
        """
        Insert a new comment at index 0 and return the full resolved list.

        Raises:
            ValidationError: empty or over-long content.
            TaskNotFound, Conflict.
        """
        data = validate(CommentCreate, {"content": content})
        task = self._get_task(task_id)
        check_revision(task, expected_revision)

        comment = {
            "id": new_id(),
            "content": data.content,
            "author": author_id,
            "created_at": utcnow().isoformat(),
        }
        # Reassign (not insert in place) so the JSON column is flagged dirty
        task.comments = [comment] + list(task.comments or [])
        commit(self._db)
        logger.info("Comment %s added to task %s by %s", comment["id"], task_id, author_id)

        return self.resolve(task.comments)

    def delete_comment(
        self,
        task_id: str,
        comment_id: str,
        requester_id: str,
        expected_revision: Optional[int] = None,
    ) -> None:
        """
        Remove a comment authored by `requester_id`.

        Raises:
            CommentNotFound: no comment with this id on the task.
            Forbidden: the requester is not the comment's author.
            TaskNotFound, Conflict.
        """
        task = self._get_task(task_id)
        comment = task.find_comment(comment_id)
        if comment is None:
            raise CommentNotFound()
        if comment.get("author") != requester_id:
            logger.warning("User %s tried to delete comment %s by %s", requester_id, comment_id, comment.get("author"))
            raise Forbidden("You cannot delete another user's comment")
        check_revision(task, expected_revision)

        task.comments = [c for c in task.comments if c.get("id") != comment_id]
        commit(self._db)
        logger.info("Comment %s removed from task %s", comment_id, task_id)

    def list_comments(self, task_id: str) -> List[CommentView]:
        return self.resolve(self._get_task(task_id).comments)

    def resolve(self, comments: Optional[List[Dict[str, Any]]]) -> List[CommentView]:
        """Attach {id, username, email} of each author; one lookup for all authors."""
        comments = comments or []
        author_ids = {c.get("author") for c in comments if c.get("author")}
        profiles: Dict[str, AuthorProfile] = {}
        if author_ids:
            for user in self._users.find(User.id.in_(author_ids)):
                profiles[user.id] = AuthorProfile(**user.profile())

        return [
            CommentView(
                id=c["id"],
                content=c["content"],
                author=profiles.get(c.get("author")),
                created_at=c["created_at"],
            )
            for c in comments
        ]

    # ------------------------------------------------------------------ #
    def _get_task(self, task_id: str) -> Task:
        task = self._tasks.find_by_id(task_id)
        if task is None:
            raise TaskNotFound()
        return task
