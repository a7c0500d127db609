"""
deps.py — Shared FastAPI Dependencies

Purpose:
- Build per-request services on top of the request's DB session.
- Resolve the acting identity from `Authorization: Bearer <token>`.
- Run the Membership Guard as a dependency, so access is decided before
  FastAPI validates the request body.
- Parse the optional `If-Match` revision header for task mutations.
"""

from typing import Optional

from fastapi import Depends, Header, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.errors import InvalidToken, ValidationError
from app.core.security import SecurityContext
from app.models.board import Board
from app.models.task import Task
from app.models.user import User
from app.services import CommentLifecycle, HierarchyStore, IdentityDirectory, MembershipGuard

bearer_scheme = HTTPBearer(auto_error=False)


def get_security(request: Request) -> SecurityContext:
    return request.app.state.security


def get_identity(
    db: Session = Depends(get_db),
    security: SecurityContext = Depends(get_security),
) -> IdentityDirectory:
    return IdentityDirectory(db, security)


def get_guard(db: Session = Depends(get_db)) -> MembershipGuard:
    return MembershipGuard(db)


def get_hierarchy(db: Session = Depends(get_db)) -> HierarchyStore:
    return HierarchyStore(db)


def get_comments(db: Session = Depends(get_db)) -> CommentLifecycle:
    return CommentLifecycle(db)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    identity: IdentityDirectory = Depends(get_identity),
) -> User:
    """
    Extract and return the authenticated user from the bearer token.

    Flow:
    - Read token from the Authorization header.
    - Verify signature / expiry and resolve 'sub' to a user.
    """
    if credentials is None or not credentials.credentials:
        raise InvalidToken("Not authorized, no token")
    user_id = identity.verify_token(credentials.credentials)
    return identity.get_user(user_id)


# -----------------------------------------------------------------------------
# Access checks
# -----------------------------------------------------------------------------
# Declared before any body parameter on a route. FastAPI resolves these
# before validating the body, so a missing board or task reports 404 and a
# non-member reports 403 whatever the payload looks like.

def board_member(
    board_id: str,
    user: User = Depends(get_current_user),
    guard: MembershipGuard = Depends(get_guard),
) -> Board:
    return guard.require_board_member(board_id, user.id)


def board_owner(
    board_id: str,
    user: User = Depends(get_current_user),
    guard: MembershipGuard = Depends(get_guard),
) -> Board:
    return guard.require_board_owner(board_id, user.id)


def task_access(
    task_id: str,
    user: User = Depends(get_current_user),
    guard: MembershipGuard = Depends(get_guard),
) -> Task:
    return guard.require_task_access(task_id, user.id)


def get_expected_revision(if_match: Optional[str] = Header(None, alias="If-Match")) -> Optional[int]:
    """`If-Match: 3` or `If-Match: "3"` → 3; absent → None (no revision check)."""
    if if_match is None or if_match.strip() in ("", "*"):
        return None
    raw = if_match.strip()
    if raw.startswith("W/"):
        raw = raw[2:]
    raw = raw.strip('"')
    try:
        return int(raw)
    except ValueError:
        raise ValidationError([f"If-Match: expected a task revision number, got {if_match!r}"]) from None
