"""
auth.py — Registration, Login and Current-User Endpoints (API Layer)

Purpose:
- Defines HTTP endpoints for user registration and authentication.
- Issues JWT access tokens on register / login.
- Delegates hashing, token encoding and user lookups to
  services/identity.py (which uses core/security.py).

This file should be thin — minimal logic. Do NOT implement hashing or DB lookups here.
"""

from fastapi import APIRouter, Depends, status

from app.api.deps import get_current_user, get_identity
from app.models.user import User
from app.services.identity import IdentityDirectory
from app.services.types import AuthResult, LoginRequest, RegisterRequest, UserOut

router = APIRouter(
    prefix="/auth",
    tags=["auth"]
)


# -----------------------------------------------------------------------------
# Routes
# -----------------------------------------------------------------------------

@router.post("/register", response_model=AuthResult, status_code=status.HTTP_201_CREATED)
def register(payload: RegisterRequest, identity: IdentityDirectory = Depends(get_identity)):
    """
    POST /auth/register

    Flow:
    1. Reject duplicate email, then duplicate username (400).
    2. Hash password, create user.
    3. Return {id, username, email, token}.
    """
    return identity.register(payload=payload)


@router.post("/login", response_model=AuthResult)
def login(payload: LoginRequest, identity: IdentityDirectory = Depends(get_identity)):
    """
    POST /auth/login

    Flow:
    1. Look up user by email (password hash loaded explicitly).
    2. Verify provided password against the stored hash.
    3. If valid → fresh token; if invalid → 400 invalid credentials.
    """
    return identity.authenticate(payload=payload)


@router.get("/me", response_model=UserOut)
def me(user: User = Depends(get_current_user)):
    """GET /auth/me: the identity behind the bearer token."""
    return UserOut.model_validate(user)


@router.post("/logout")
def logout():
    """
    POST /auth/logout

    Stateless JWT means logout is client-side only (delete token in UI).
    """
    return {"message": "Logout successful (client should delete stored token)"}
