"""
security.py — Authentication Utilities (Password Hashing & JWT Encoding)

Purpose:
- Provide reusable security helpers across the backend.
- Hash & verify passwords (never store raw passwords).
- Issue and validate JWT access tokens for authentication.

Key Constraints:
- Access tokens only (no refresh tokens).
- Authentication is stateless — logout just means deleting the token client-side.
- User lookup lives in app/services/identity.py.

This module does NOT:
- Define API routes → that lives in app/api/v1/auth.py
- Query the database
"""

import datetime
from typing import Any, Dict, Optional, Tuple

from jose import ExpiredSignatureError, JWTError, jwt  # `python-jose`
from passlib.context import CryptContext  # password hashing

from app.core.config import Settings
from app.core.errors import InvalidToken


class SecurityContext:
    """
    Password hashing + token signing bound to one Settings instance.

    Built once per application (see app/main.py) and handed to the
    Identity Directory.
    """

    def __init__(self, settings: Settings):
        self._secret = settings.JWT_SECRET_KEY
        self._algorithm = settings.JWT_ALGORITHM
        self._expire_minutes = settings.JWT_EXPIRE_MINUTES
        self.pwd_context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=settings.PASSWORD_HASH_ROUNDS,
            bcrypt__min_rounds=settings.PASSWORD_HASH_ROUNDS,
        )

    # -------------------------------------------------------------------------
    # Password Hashing
    # -------------------------------------------------------------------------

    def hash_password(self, raw_password: str) -> str:
        """
        Hash a plaintext password using bcrypt (random salt per call).
        """
        return self.pwd_context.hash(raw_password)

    def verify_password(self, raw_password: str, hashed_password: str) -> Tuple[bool, Optional[str]]:
        """
        Verify that a raw password matches its hashed stored version.

        Returns:
            (matches, replacement_hash). replacement_hash is set when the
            stored hash uses outdated parameters and should be re-saved.
        """
        return self.pwd_context.verify_and_update(raw_password, hashed_password)

    # -------------------------------------------------------------------------
    # JWT Token Handling
    # -------------------------------------------------------------------------

    def create_access_token(self, subject: str, extra: Optional[Dict[str, Any]] = None) -> str:
        """
        Create a JWT access token with expiration.

        Payload format:
            {"sub": user_id, "iat": issued_at, "exp": expires_at, **extra}

        Returns:
            Encoded JWT string.
        """
        now = datetime.datetime.now(datetime.timezone.utc)
        to_encode: Dict[str, Any] = dict(extra or {})
        to_encode.update({
            "sub": str(subject),
            "iat": now,
            "exp": now + datetime.timedelta(minutes=self._expire_minutes),
        })
        return jwt.encode(to_encode, self._secret, algorithm=self._algorithm)

    def decode_token(self, token: str) -> Dict[str, Any]:
        """
        Decode and validate a JWT token.

        Raises:
            InvalidToken: malformed, expired, wrong signature or no subject.
        """
        if not token:
            raise InvalidToken("Not authorized, no token")
        try:
            payload = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except ExpiredSignatureError as e:
            raise InvalidToken("Not authorized, token has expired") from e
        except JWTError as e:
            raise InvalidToken() from e

        if not payload.get("sub"):
            raise InvalidToken("Not authorized, token has no subject")
        return payload
