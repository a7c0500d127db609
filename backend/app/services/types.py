"""
types.py — Shared Request / Response Schemas for Task Board Services

Purpose:
- Define the validated shapes every service accepts (create / update
  payloads) and returns (public views of users, boards, columns, tasks
  and comments).
- Keep field constraints in one place so creation and update re-validation
  use the exact same rules.

Notes:
- Payload models forbid unknown fields; `TaskUpdate` therefore cannot carry
  `reporter` or `board`.
- Views never include a password hash.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any, Dict, List, Literal, Mapping, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from app.core.errors import ValidationError

TaskType = Literal["task", "bug", "story", "epic"]
TaskPriority = Literal["lowest", "low", "medium", "high", "highest"]
TaskStatus = Literal["backlog", "todo", "inprogress", "review", "done"]

EMAIL_PATTERN = r"^[^@\s]+@([A-Za-z0-9-]+\.)+[A-Za-z]{2,}$"

Label = Annotated[str, StringConstraints(max_length=20)]

ModelT = TypeVar("ModelT", bound=BaseModel)


def validate(model_cls: Type[ModelT], data: Union[ModelT, Mapping[str, Any]]) -> ModelT:
    """
    Validate `data` against `model_cls`, translating pydantic failures into
    the domain ValidationError (every failing field listed).
    """
    if isinstance(data, model_cls):
        return data
    if isinstance(data, BaseModel):
        data = data.model_dump(exclude_unset=True)
    try:
        return model_cls.model_validate(dict(data))
    except PydanticValidationError as e:
        raise ValidationError.from_pydantic(e) from e


class _Payload(BaseModel):
    model_config = ConfigDict(extra="forbid")


# -----------------------------------------------------------------------------
# Identity
# -----------------------------------------------------------------------------

class RegisterRequest(_Payload):
    username: Annotated[str, StringConstraints(strip_whitespace=True, min_length=3, max_length=30)]
    email: Annotated[str, StringConstraints(strip_whitespace=True, to_lower=True, max_length=254, pattern=EMAIL_PATTERN)]
    password: str = Field(min_length=6, max_length=128)


class LoginRequest(_Payload):
    email: Annotated[str, StringConstraints(strip_whitespace=True, to_lower=True)]
    password: str


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    username: str
    email: str


class AuthResult(UserOut):
    token: str
    token_type: str = "bearer"


# -----------------------------------------------------------------------------
# Boards & Columns
# -----------------------------------------------------------------------------

class BoardCreate(_Payload):
    name: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=100)]
    description: Optional[Annotated[str, StringConstraints(max_length=500)]] = None
    is_public: bool = False


class MemberAdd(_Payload):
    """Identify the user to add either by id or by email."""

    user_id: Optional[str] = None
    email: Optional[Annotated[str, StringConstraints(strip_whitespace=True, to_lower=True)]] = None

    @model_validator(mode="after")
    def require_one_identifier(self) -> "MemberAdd":
        if not self.user_id and not self.email:
            raise ValueError("either user_id or email is required")
        return self


class BoardOut(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    is_public: bool
    owner: str
    members: List[str]
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_model(cls, board) -> "BoardOut":
        return cls(
            id=board.id,
            name=board.name,
            description=board.description,
            is_public=board.is_public,
            owner=board.owner_id,
            members=board.member_ids,
            created_at=board.created_at,
            updated_at=board.updated_at,
        )


class ColumnCreate(_Payload):
    name: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=50)]


class ColumnOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    position: int
    board_id: str
    created_at: datetime


# -----------------------------------------------------------------------------
# Tasks & Comments
# -----------------------------------------------------------------------------

class TaskCreate(_Payload):
    """Creation payload; also the shape a merged update must satisfy."""

    title: str = Field(min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    type: TaskType = "task"
    priority: TaskPriority = "medium"
    status: TaskStatus = "todo"
    assignee: Optional[str] = None
    column: str = Field(min_length=1)
    labels: List[Label] = Field(default_factory=list)
    story_points: Optional[int] = Field(None, ge=0, le=100)
    due_date: Optional[datetime] = None


class TaskUpdate(_Payload):
    """
    Every mutable task field, each optional. Only fields present in the
    payload are merged; `null` clears an optional field.
    """

    title: Optional[str] = None
    description: Optional[str] = None
    type: Optional[TaskType] = None
    priority: Optional[TaskPriority] = None
    status: Optional[TaskStatus] = None
    assignee: Optional[str] = None
    column: Optional[str] = None
    labels: Optional[List[str]] = None
    story_points: Optional[int] = None
    due_date: Optional[datetime] = None


class CommentCreate(_Payload):
    content: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=1000)]


class CommentOut(BaseModel):
    id: str
    content: str
    author: str
    created_at: datetime


class AuthorProfile(BaseModel):
    id: str
    username: str
    email: str


class CommentView(BaseModel):
    """Comment with its author resolved for display (None if the author is gone)."""

    id: str
    content: str
    author: Optional[AuthorProfile] = None
    created_at: datetime


class TaskOut(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    type: TaskType
    priority: TaskPriority
    status: TaskStatus
    assignee: Optional[str] = None
    reporter: str
    board: str
    column: str
    labels: List[str]
    story_points: Optional[int] = None
    due_date: Optional[datetime] = None
    comments: List[CommentOut]
    revision: int
    created_at: datetime
    updated_at: datetime

    @field_validator("labels", mode="before")
    @classmethod
    def none_labels(cls, v: Any) -> Any:
        return v or []

    @classmethod
    def from_model(cls, task) -> "TaskOut":
        return cls(
            id=task.id,
            title=task.title,
            description=task.description,
            type=task.type,
            priority=task.priority,
            status=task.status,
            assignee=task.assignee_id,
            reporter=task.reporter_id,
            board=task.board_id,
            column=task.column_id,
            labels=task.labels,
            story_points=task.story_points,
            due_date=task.due_date,
            comments=[CommentOut(**comment) for comment in task.comments or []],
            revision=task.revision,
            created_at=task.created_at,
            updated_at=task.updated_at,
        )


def task_fields(task) -> Dict[str, Any]:
    """Current task document expressed in TaskCreate field names."""
    return {
        "title": task.title,
        "description": task.description,
        "type": task.type,
        "priority": task.priority,
        "status": task.status,
        "assignee": task.assignee_id,
        "column": task.column_id,
        "labels": list(task.labels or []),
        "story_points": task.story_points,
        "due_date": task.due_date,
    }
