"""
identity.py — Identity Directory (users, login, bearer tokens)

Purpose:
- Register users (email checked before username, credential hashed with a
  salted one-way function before storage).
- Authenticate by email + credential, comparing only through the hash
  verifier.
- Issue and verify stateless bearer tokens embedding the user id.

This module does NOT:
- Decide board access (see services/membership.py).
- Parse HTTP headers (see app/api/deps.py).
"""

from __future__ import annotations

from typing import Any, Mapping, Optional, Union

from sqlalchemy.orm import Session, undefer

from app.core.errors import DuplicateIdentity, IdentityNotFound, InvalidCredentials
from app.core.logging import get_logger
from app.core.security import SecurityContext
from app.models.user import User
from app.services.repository import Repository, commit
from app.services.types import AuthResult, LoginRequest, RegisterRequest, validate

logger = get_logger(__name__)


class IdentityDirectory:
    def __init__(self, db: Session, security: SecurityContext) -> None:
        self._db = db
        self._security = security
        self._users = Repository(db, User)

    # ------------------------------------------------------------------ #
    # Registration / login
    # ------------------------------------------------------------------ #
    def register(
        self,
        username: Optional[str] = None,
        email: Optional[str] = None,
        password: Optional[str] = None,
        *,
        payload: Union[RegisterRequest, Mapping[str, Any], None] = None,
    ) -> AuthResult:
        """
        Create a user and return its public identity plus a fresh token.

        Raises:
            ValidationError: username / email / password constraints violated.
            DuplicateIdentity: email or username already taken.
        """
        if payload is None:
            payload = {"username": username, "email": email, "password": password}
        data = validate(RegisterRequest, payload)

        if self._users.find_one(User.email == data.email) is not None:
            raise DuplicateIdentity("A user with this email already exists")
        if self._users.find_one(User.username == data.username) is not None:
            raise DuplicateIdentity("A user with this username already exists")

        user = self._users.create(
            username=data.username,
            email=data.email,
            hashed_password=self._security.hash_password(data.password),
        )
        # Two concurrent registrations can both pass the checks above;
        # the unique constraints decide and the loser gets DuplicateIdentity.
        commit(self._db, integrity_error=DuplicateIdentity)
        logger.info("Registered user %s (%s)", user.username, user.id)

        return self._auth_result(user)

    def authenticate(
        self,
        email: Optional[str] = None,
        password: Optional[str] = None,
        *,
        payload: Union[LoginRequest, Mapping[str, Any], None] = None,
    ) -> AuthResult:
        """
        Verify credentials and return identity plus a fresh token.

        Raises:
            InvalidCredentials: unknown email or wrong password (same error
            for both, so callers cannot probe which emails exist).
        """
        if payload is None:
            payload = {"email": email or "", "password": password or ""}
        data = validate(LoginRequest, payload)

        user = self._users.find_one(User.email == data.email, options=[undefer(User.hashed_password)])
        if user is None:
            logger.info("Login failed: unknown email")
            raise InvalidCredentials()

        matches, replacement_hash = self._security.verify_password(data.password, user.hashed_password)
        if not matches:
            logger.info("Login failed for user %s", user.id)
            raise InvalidCredentials()

        if replacement_hash:
            # Stored hash used outdated parameters; re-hash transparently
            user.hashed_password = replacement_hash
            commit(self._db)

        return self._auth_result(user)

    # ------------------------------------------------------------------ #
    # Tokens
    # ------------------------------------------------------------------ #
    def issue_token(self, user_id: str) -> str:
        return self._security.create_access_token(user_id)

    def verify_token(self, token: str) -> str:
        """
        Return the user id embedded in `token`.

        Raises:
            InvalidToken: malformed, expired or badly signed token.
            IdentityNotFound: the embedded user no longer exists.
        """
        payload = self._security.decode_token(token)
        user_id = payload["sub"]
        if self._users.find_by_id(user_id) is None:
            raise IdentityNotFound()
        return user_id

    def get_user(self, user_id: str) -> User:
        user = self._users.find_by_id(user_id)
        if user is None:
            raise IdentityNotFound()
        return user

    # ------------------------------------------------------------------ #
    def _auth_result(self, user: User) -> AuthResult:
        return AuthResult(
            id=user.id,
            username=user.username,
            email=user.email,
            token=self.issue_token(user.id),
        )
