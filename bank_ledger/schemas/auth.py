"""
Pydantic schemas for staff authentication.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from bank_ledger.models.enums import UserRole


class RegisterRequest(BaseModel):
    username: str = Field(min_length=3, max_length=100)
    # bcrypt only looks at the first 72 bytes
    password: str = Field(min_length=8, max_length=72)
    full_name: str | None = Field(default=None, max_length=200)
    role: UserRole = UserRole.STAFF


class LoginRequest(BaseModel):
    username: str = Field(min_length=1, max_length=100)
    password: str = Field(min_length=1, max_length=72)


class RefreshRequest(BaseModel):
    token: str = Field(min_length=1)


class TokenPair(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class UserResponse(BaseModel):
    id: int
    username: str
    full_name: str
    role: UserRole
    created_at: datetime

    model_config = {"from_attributes": True}


class RegisterResponse(TokenPair):
    user: UserResponse
