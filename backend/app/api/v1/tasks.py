"""
tasks.py — Task & Comment Endpoints (API Layer)

Routes (members of the task's board only):
    GET    /tasks/{task_id}                         → task detail
    PUT    /tasks/{task_id}                         → partial update (If-Match optional)
    DELETE /tasks/{task_id}                         → delete task
    GET    /tasks/{task_id}/comments                → comments, authors resolved
    POST   /tasks/{task_id}/comments                → add comment at the head (If-Match optional)
    DELETE /tasks/{task_id}/comments/{comment_id}   → delete own comment (If-Match optional)

Task responses carry an `ETag` with the task revision; send it back as
`If-Match` to make the next mutation fail with 409 if someone else
changed the task in between.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Response, status

from app.api.deps import get_comments, get_current_user, get_expected_revision, get_hierarchy, task_access
from app.models.task import Task
from app.models.user import User
from app.services.comments import CommentLifecycle
from app.services.hierarchy import HierarchyStore
from app.services.types import CommentCreate, CommentView, TaskOut, TaskUpdate

router = APIRouter(
    prefix="/tasks",
    tags=["tasks"]
)


def _with_etag(response: Response, task: Task) -> TaskOut:
    response.headers["ETag"] = f'"{task.revision}"'
    return TaskOut.from_model(task)


@router.get("/{task_id}", response_model=TaskOut)
def get_task(response: Response, task: Task = Depends(task_access)):
    return _with_etag(response, task)


@router.put("/{task_id}", response_model=TaskOut)
def update_task(
    payload: TaskUpdate,
    response: Response,
    task: Task = Depends(task_access),
    expected_revision: Optional[int] = Depends(get_expected_revision),
    hierarchy: HierarchyStore = Depends(get_hierarchy),
):
    updated = hierarchy.update_task(task.id, payload, expected_revision=expected_revision)
    return _with_etag(response, updated)


@router.delete("/{task_id}")
def delete_task(
    task: Task = Depends(task_access),
    hierarchy: HierarchyStore = Depends(get_hierarchy),
):
    hierarchy.delete_task(task.id)
    return {"message": "Task deleted"}


# -----------------------------------------------------------------------------
# Comments
# -----------------------------------------------------------------------------

@router.get("/{task_id}/comments", response_model=List[CommentView])
def list_comments(
    task: Task = Depends(task_access),
    comments: CommentLifecycle = Depends(get_comments),
):
    return comments.list_comments(task.id)


@router.post("/{task_id}/comments", response_model=List[CommentView], status_code=status.HTTP_201_CREATED)
def add_comment(
    payload: CommentCreate,
    task: Task = Depends(task_access),
    expected_revision: Optional[int] = Depends(get_expected_revision),
    user: User = Depends(get_current_user),
    comments: CommentLifecycle = Depends(get_comments),
):
    return comments.add_comment(task.id, user.id, payload.content, expected_revision=expected_revision)


@router.delete("/{task_id}/comments/{comment_id}")
def delete_comment(
    comment_id: str,
    task: Task = Depends(task_access),
    expected_revision: Optional[int] = Depends(get_expected_revision),
    user: User = Depends(get_current_user),
    comments: CommentLifecycle = Depends(get_comments),
):
    comments.delete_comment(task.id, comment_id, user.id, expected_revision=expected_revision)
    return {"message": "Comment deleted"}
