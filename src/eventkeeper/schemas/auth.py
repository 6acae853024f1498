"""Pydantic schemas for registration, login, and users.

Learn: Pydantic v2 models validate request/response data. Separate
"Request" schemas (input) from "Read" schemas (output) for clean APIs.
Password hashes never appear in a Read schema.
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, Field


class RegisterRequest(BaseModel):
    username: str = Field(..., min_length=3, max_length=50, pattern=r"^[A-Za-z0-9_.-]+$")
    email: str = Field(..., min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")
    password: str = Field(..., min_length=8, max_length=128)


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class LoginResponse(BaseModel):
    """Returned once per login. The token is the only credential the client keeps."""
    user_id: uuid.UUID
    username: str
    email: str
    token: str
    token_type: str = "bearer"
    expires_at: datetime
    message: str = "Login successful"


class UserRead(BaseModel):
    id: uuid.UUID
    username: str
    email: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class UserPage(BaseModel):
    items: list[UserRead]
    total: int
    page: int
    size: int
    pages: int
