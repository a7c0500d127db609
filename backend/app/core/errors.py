"""
errors.py — Domain Error Kinds

Purpose:
- Give every core operation a closed set of failure kinds.
- Carry a stable `code`, a human message and the HTTP status the route
  layer maps it to, so services never import FastAPI.

This module does NOT:
- Render responses (see app/api/errors.py).
"""

from typing import List, Optional

from pydantic import ValidationError as PydanticValidationError


class TaskBoardError(Exception):
    """Base class for all errors surfaced by the service layer."""

    code = "error"
    status_code = 500
    default_message = "Internal error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message}


class ValidationError(TaskBoardError):
    """One or more field constraints were violated. Lists every failing field."""

    code = "validation_error"
    status_code = 400
    default_message = "Validation failed"

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors) or self.default_message)

    @classmethod
    def from_pydantic(cls, exc: PydanticValidationError) -> "ValidationError":
        messages = []
        for err in exc.errors():
            location = ".".join(str(part) for part in err.get("loc", ()) if part != "__root__")
            text = err.get("msg", "invalid value")
            messages.append(f"{location}: {text}" if location else text)
        return cls(messages)

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["errors"] = self.errors
        return data


class DuplicateIdentity(TaskBoardError):
    code = "duplicate_identity"
    status_code = 400
    default_message = "A user with this email or username already exists"


class InvalidCredentials(TaskBoardError):
    code = "invalid_credentials"
    status_code = 400
    default_message = "Invalid credentials"


class InvalidToken(TaskBoardError):
    code = "invalid_token"
    status_code = 401
    default_message = "Not authorized, token is invalid"


class IdentityNotFound(TaskBoardError):
    code = "identity_not_found"
    status_code = 401
    default_message = "User not found"


class Forbidden(TaskBoardError):
    code = "forbidden"
    status_code = 403
    default_message = "Access denied"


class NotFound(TaskBoardError):
    code = "not_found"
    status_code = 404
    default_message = "Resource not found"


class BoardNotFound(NotFound):
    code = "board_not_found"
    default_message = "Board not found"


class TaskNotFound(NotFound):
    code = "task_not_found"
    default_message = "Task not found"


class CommentNotFound(NotFound):
    code = "comment_not_found"
    default_message = "Comment not found"


class Conflict(TaskBoardError):
    """The document changed since the caller read it (stale revision)."""

    code = "conflict"
    status_code = 409
    default_message = "Resource was modified by another request"


class StoreError(TaskBoardError):
    code = "store_error"
    status_code = 500
    default_message = "Storage failure"
