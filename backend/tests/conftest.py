"""
Shared fixtures for task board tests.

Every test gets its own in-memory SQLite database, a low bcrypt cost and
its own services; nothing is shared between tests.
"""

from typing import Callable, Dict

import pytest
from fastapi.testclient import TestClient

from app.core.config import Settings
from app.core.database import Database
from app.core.security import SecurityContext
from app.main import create_app
from app.services import CommentLifecycle, HierarchyStore, IdentityDirectory, MembershipGuard


@pytest.fixture
def settings() -> Settings:
    return Settings(
        DATABASE_URL="sqlite://",
        JWT_SECRET_KEY="test-secret",
        JWT_EXPIRE_MINUTES=30,
        PASSWORD_HASH_ROUNDS=4,
        ENVIRONMENT="test",
        LOG_LEVEL="WARNING",
    )


@pytest.fixture
def database(settings):
    database = Database.from_settings(settings)
    database.create_schema()
    yield database
    database.dispose()


@pytest.fixture
def db(database):
    session = database.session()
    yield session
    session.close()


@pytest.fixture
def security(settings) -> SecurityContext:
    return SecurityContext(settings)


@pytest.fixture
def identity(db, security) -> IdentityDirectory:
    return IdentityDirectory(db, security)


@pytest.fixture
def guard(db) -> MembershipGuard:
    return MembershipGuard(db)


@pytest.fixture
def hierarchy(db) -> HierarchyStore:
    return HierarchyStore(db)


@pytest.fixture
def comments(db) -> CommentLifecycle:
    return CommentLifecycle(db)


@pytest.fixture
def alice(identity):
    """Registered user A from the reference scenario."""
    return identity.register("alice", "alice@x.com", "secret1")


@pytest.fixture
def bob(identity):
    return identity.register("bob", "bob@x.com", "secret2")


@pytest.fixture
def board(hierarchy, alice):
    """Alice's board "Sprint 1" with columns "To Do" (0) and "Doing" (1)."""
    board = hierarchy.create_board(alice.id, "Sprint 1")
    hierarchy.create_column(board.id, "To Do")
    hierarchy.create_column(board.id, "Doing")
    return board


@pytest.fixture
def todo_column(hierarchy, board):
    return hierarchy.list_columns(board.id)[0]


@pytest.fixture
def task(hierarchy, board, todo_column, alice):
    return hierarchy.create_task(board.id, alice.id, {"title": "Fix header", "column": todo_column.id})


# -----------------------------------------------------------------------------
# HTTP client
# -----------------------------------------------------------------------------

@pytest.fixture
def client(settings):
    app = create_app(settings)
    with TestClient(app) as client:
        yield client


@pytest.fixture
def register(client) -> Callable[..., Dict[str, str]]:
    """Register a user over HTTP; returns the response body plus auth headers."""

    def _register(username: str, email: str, password: str = "secret1") -> Dict[str, str]:
        res = client.post("/api/auth/register", json={"username": username, "email": email, "password": password})
        assert res.status_code == 201, res.text
        body = res.json()
        body["headers"] = {"Authorization": f"Bearer {body['token']}"}
        return body

    return _register
