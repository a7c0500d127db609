"""
Tests for the Comment Lifecycle.

Tests verify that:
- new comments go to the head of the list
- only the author may delete, and deletion keeps the others' order
- authors are resolved to {id, username, email}
- comment writes go through the task revision check
"""

import pytest

from app.core.errors import CommentNotFound, Conflict, Forbidden, TaskNotFound, ValidationError


def test_add_comment_inserts_at_head(comments, task, alice):
    comments.add_comment(task.id, alice.id, "first")
    views = comments.add_comment(task.id, alice.id, "second")

    assert [c.content for c in views] == ["second", "first"]


def test_add_comment_strips_and_validates(comments, task, alice):
    views = comments.add_comment(task.id, alice.id, "  padded  ")
    assert views[0].content == "padded"

    with pytest.raises(ValidationError):
        comments.add_comment(task.id, alice.id, "   ")
    with pytest.raises(ValidationError):
        comments.add_comment(task.id, alice.id, "x" * 1001)
    assert len(comments.list_comments(task.id)) == 1


def test_add_comment_missing_task(comments, alice):
    with pytest.raises(TaskNotFound):
        comments.add_comment("f" * 32, alice.id, "hello")


def test_authors_are_resolved(comments, hierarchy, board, task, alice, bob):
    hierarchy.add_member(board.id, {"user_id": bob.id})
    comments.add_comment(task.id, alice.id, "from alice")
    views = comments.add_comment(task.id, bob.id, "from bob")

    authors = [(c.author.username, c.author.email) for c in views]
    assert authors == [("bob", "bob@x.com"), ("alice", "alice@x.com")]
    dumped = views[0].model_dump()
    assert set(dumped["author"]) == {"id", "username", "email"}


def test_delete_comment_keeps_order_of_rest(comments, task, alice):
    for content in ["one", "two", "three"]:
        comments.add_comment(task.id, alice.id, content)
    middle = comments.list_comments(task.id)[1]
    assert middle.content == "two"

    comments.delete_comment(task.id, middle.id, alice.id)

    assert [c.content for c in comments.list_comments(task.id)] == ["three", "one"]


def test_add_then_delete_restores_list(comments, task, alice):
    comments.add_comment(task.id, alice.id, "keep")
    before = [c.id for c in comments.list_comments(task.id)]

    added = comments.add_comment(task.id, alice.id, "temporary")[0]
    comments.delete_comment(task.id, added.id, alice.id)

    assert [c.id for c in comments.list_comments(task.id)] == before


def test_delete_comment_by_other_user_forbidden(comments, hierarchy, board, task, alice, bob):
    hierarchy.add_member(board.id, {"user_id": bob.id})
    comment = comments.add_comment(task.id, alice.id, "mine")[0]

    with pytest.raises(Forbidden):
        comments.delete_comment(task.id, comment.id, bob.id)
    assert [c.id for c in comments.list_comments(task.id)] == [comment.id]


def test_delete_missing_comment(comments, task, alice):
    with pytest.raises(CommentNotFound):
        comments.delete_comment(task.id, "nope", alice.id)


def test_comment_write_with_stale_revision(comments, hierarchy, task, alice):
    hierarchy.update_task(task.id, {"status": "review"})  # revision 1 -> 2

    with pytest.raises(Conflict):
        comments.add_comment(task.id, alice.id, "late", expected_revision=1)

    views = comments.add_comment(task.id, alice.id, "fresh", expected_revision=2)
    assert [c.content for c in views] == ["fresh"]
    assert hierarchy.get_task(task.id).revision == 3


def test_comment_of_deleted_author_resolves_to_none(comments, db, task, alice):
    comments.add_comment(task.id, alice.id, "orphan")
    task.comments = [dict(task.comments[0], author="0" * 32)]
    db.commit()

    assert comments.list_comments(task.id)[0].author is None
