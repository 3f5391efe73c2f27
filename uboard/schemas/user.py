"""Pydantic schemas for User."""
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field


class UserBase(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    user_name: str = Field(..., min_length=1, max_length=50)


class UserCreate(UserBase):
    email: EmailStr
    password: str = Field(..., min_length=8)


class UserResponse(UserBase):
    id: UUID
    email: str | None = None  # Only in own profile
    confirmed: bool = False
    created_at: datetime

    model_config = {"from_attributes": True}


class AuthorPublic(BaseModel):
    id: UUID
    first_name: str
    last_name: str
    user_name: str | None = None

    model_config = {"from_attributes": True}


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class ConfirmEmailRequest(BaseModel):
    token: str = Field(..., min_length=1)


class PasswordResetRequest(BaseModel):
    email: EmailStr


class PasswordReset(BaseModel):
    token: str = Field(..., min_length=1)
    password: str = Field(..., min_length=8)
    password_confirmation: str
