"""
Tests for the generic Repository and the commit error mapping.
"""

import pytest

from app.core.errors import DuplicateIdentity, StoreError
from app.models.board import Board
from app.models.task import Task
from app.models.user import User
from app.services.repository import Repository, commit


def test_find_and_count(db, alice, bob):
    users = Repository(db, User)

    assert users.count() == 2
    assert users.count(User.username == "alice") == 1
    assert [u.username for u in users.find(order_by=[User.username])] == ["alice", "bob"]
    assert users.find_one(User.email == "bob@x.com").id == bob.id
    assert users.find_one(User.email == "ghost@x.com") is None


def test_find_by_id_missing_or_none(db):
    boards = Repository(db, Board)
    assert boards.find_by_id("f" * 32) is None
    assert boards.find_by_id(None) is None


def test_update_by_id(db, task):
    tasks = Repository(db, Task)

    updated = tasks.update_by_id(task.id, {"status": "review"})
    commit(db)

    assert updated is task
    assert task.status == "review"
    assert task.revision == 2
    assert tasks.update_by_id("f" * 32, {"status": "done"}) is None


def test_delete_by_id(db, task):
    tasks = Repository(db, Task)

    assert tasks.delete_by_id(task.id) is True
    commit(db)
    assert tasks.count(Task.id == task.id) == 0
    assert tasks.delete_by_id(task.id) is False


def test_commit_maps_integrity_error(db, alice):
    Repository(db, User).create(username="alice", email="other@x.com", hashed_password="x")

    with pytest.raises(DuplicateIdentity):
        commit(db, integrity_error=DuplicateIdentity)
    # Rolled back; the session is usable again
    assert Repository(db, User).count() == 1


def test_commit_integrity_error_defaults_to_store_error(db, alice):
    Repository(db, User).create(username="someone", email="alice@x.com", hashed_password="x")

    with pytest.raises(StoreError):
        commit(db)
