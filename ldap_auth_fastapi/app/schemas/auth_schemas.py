# app/schemas/auth_schemas.py
"""
Request/response schemas for the auth endpoints.
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=1, description="Directory login identifier")
    password: str


class UserRead(BaseModel):
    id: int
    email: str
    name: Optional[str] = None
    active: bool
    admin: bool
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class LoginResponse(BaseModel):
    # JWT access token signed using settings.JWT_SECRET_KEY / JWT_ALGORITHM
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user: UserRead
