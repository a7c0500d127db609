"""
services — Task board domain services.

Each service is constructed with an explicit SQLAlchemy session; none of
them reach for a global connection.
"""

from app.services.comments import CommentLifecycle
from app.services.hierarchy import HierarchyStore
from app.services.identity import IdentityDirectory
from app.services.membership import MembershipGuard

__all__ = [
    "CommentLifecycle",
    "HierarchyStore",
    "IdentityDirectory",
    "MembershipGuard",
]
