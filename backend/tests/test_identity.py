"""
Tests for the Identity Directory: registration, login and bearer tokens.
"""

import datetime

import pytest
from jose import jwt

from app.core.errors import (
    DuplicateIdentity,
    IdentityNotFound,
    InvalidCredentials,
    InvalidToken,
    ValidationError,
)
from app.core.security import SecurityContext
from app.models.user import User
from app.services.identity import IdentityDirectory


# Registration
def test_register_returns_identity_and_token(identity):
    """Registration returns id/username/email plus a token, never the hash."""
    result = identity.register("alice", "alice@x.com", "secret1")

    assert result.username == "alice"
    assert result.email == "alice@x.com"
    assert result.token
    dumped = result.model_dump()
    assert "password" not in dumped
    assert "hashed_password" not in dumped
    assert identity.verify_token(result.token) == result.id


def test_register_hashes_credential(identity, db, security):
    """The stored credential is a salted hash, not the raw password."""
    result = identity.register("alice", "alice@x.com", "secret1")
    stored = db.get(User, result.id).hashed_password

    assert stored != "secret1"
    assert stored.startswith("$2")
    # Same password hashed twice gives different salts
    assert security.hash_password("secret1") != security.hash_password("secret1")


def test_register_lowercases_email(identity):
    result = identity.register("alice", "Alice@X.com", "secret1")
    assert result.email == "alice@x.com"


def test_register_duplicate_email_any_username(identity, alice):
    """A second registration with the same email fails whatever the username."""
    with pytest.raises(DuplicateIdentity) as exc:
        identity.register("someone-else", "ALICE@x.com", "secret9")
    assert "email" in exc.value.message


def test_register_duplicate_username(identity, alice):
    with pytest.raises(DuplicateIdentity) as exc:
        identity.register("alice", "other@x.com", "secret9")
    assert "username" in exc.value.message


def test_register_validation_aggregates_every_field(identity):
    """All failing fields are reported together, not just the first."""
    with pytest.raises(ValidationError) as exc:
        identity.register("al", "not-an-email", "123")

    fields = {message.split(":")[0] for message in exc.value.errors}
    assert fields == {"username", "email", "password"}


# Login
def test_authenticate_success(identity, alice):
    result = identity.authenticate("alice@x.com", "secret1")
    assert result.id == alice.id
    assert identity.verify_token(result.token) == alice.id


def test_authenticate_is_case_insensitive_on_email(identity, alice):
    assert identity.authenticate("ALICE@X.COM", "secret1").id == alice.id


def test_authenticate_wrong_password(identity, alice):
    with pytest.raises(InvalidCredentials):
        identity.authenticate("alice@x.com", "wrong-password")


def test_authenticate_unknown_email(identity):
    with pytest.raises(InvalidCredentials):
        identity.authenticate("nobody@x.com", "secret1")


def test_authenticate_rehashes_weaker_hash(db, settings, alice):
    """A hash below the configured bcrypt cost is upgraded on successful login."""
    stronger = SecurityContext(settings.model_copy(update={"PASSWORD_HASH_ROUNDS": 5}))

    IdentityDirectory(db, stronger).authenticate("alice@x.com", "secret1")

    db.expire_all()
    assert db.get(User, alice.id).hashed_password.startswith("$2b$05$")


# Tokens
def test_verify_token_rejects_garbage(identity):
    with pytest.raises(InvalidToken):
        identity.verify_token("not.a.jwt")


def test_verify_token_rejects_empty(identity):
    with pytest.raises(InvalidToken):
        identity.verify_token("")


def test_verify_token_rejects_bad_signature(identity, alice):
    forged = jwt.encode({"sub": alice.id}, "another-secret", algorithm="HS256")
    with pytest.raises(InvalidToken):
        identity.verify_token(forged)


def test_verify_token_rejects_expired(identity, settings, alice):
    past = datetime.datetime.now(datetime.timezone.utc) - datetime.timedelta(minutes=5)
    expired = jwt.encode({"sub": alice.id, "exp": past}, settings.JWT_SECRET_KEY, algorithm="HS256")
    with pytest.raises(InvalidToken) as exc:
        identity.verify_token(expired)
    assert "expired" in exc.value.message


def test_verify_token_unknown_subject(identity, settings):
    token = identity.issue_token("0" * 32)
    with pytest.raises(IdentityNotFound):
        identity.verify_token(token)


def test_issue_token_embeds_subject_and_expiry(identity, settings, alice):
    token = identity.issue_token(alice.id)
    payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=["HS256"])

    assert payload["sub"] == alice.id
    lifetime = payload["exp"] - payload["iat"]
    assert lifetime == settings.JWT_EXPIRE_MINUTES * 60


def test_register_and_authenticate_from_payload_only(identity):
    registered = identity.register(payload={"username": "carol", "email": "carol@x.com", "password": "secret3"})
    logged_in = identity.authenticate(payload={"email": "carol@x.com", "password": "secret3"})

    assert logged_in.id == registered.id
