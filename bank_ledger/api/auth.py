"""
Staff authentication endpoints.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from bank_ledger.api.deps import get_bearer_token
from bank_ledger.errors import Unauthorized
from bank_ledger.models.base import get_db
from bank_ledger.services.auth_service import AuthService
from bank_ledger.schemas.auth import (
    RegisterRequest,
    RegisterResponse,
    LoginRequest,
    RefreshRequest,
    TokenPair,
    UserResponse,
)

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post("/register", response_model=RegisterResponse, status_code=201)
def register(
    request: RegisterRequest,
    token: str | None = Depends(get_bearer_token),
    db: Session = Depends(get_db),
):
    """
    Create a user and return a token pair for it.

    Without a token this always creates staff. An admin's token
    lets the request ask for the admin role.
    """
    service = AuthService(db)
    actor = service.authorize(token) if token else None
    user, tokens = service.register(request, actor=actor)
    return RegisterResponse(
        user=UserResponse.model_validate(user),
        access_token=tokens.access_token,
        refresh_token=tokens.refresh_token,
    )


@router.post("/login", response_model=TokenPair)
def login(
    request: LoginRequest,
    db: Session = Depends(get_db),
):
    return AuthService(db).login(request.username, request.password)


@router.post("/refresh", response_model=TokenPair)
def refresh(
    request: RefreshRequest,
    db: Session = Depends(get_db),
):
    """Rotate a refresh token. The old one stops working."""
    return AuthService(db).refresh(request.token)


@router.post("/logout")
def logout(
    token: str | None = Depends(get_bearer_token),
    db: Session = Depends(get_db),
):
    """Revoke the presented access token and the user's refresh tokens."""
    if not token:
        raise Unauthorized("No token provided")
    AuthService(db).logout(token)
    return {"message": "Logged out successfully"}
