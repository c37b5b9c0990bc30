"""Pydantic schemas for accounts, login and password flows.

Learn: Pydantic v2 models validate request/response data. Separate
"Create" schemas (input) from "Read" schemas (output) for clean APIs.
UserRead is the only outbound shape of a user. It has no password or
reset-token fields, so they cannot leak through a response_model.
"""

import uuid
from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

Gender = Literal["male", "female"]

MIN_PASSWORD_LENGTH = 6


# ─── Accounts ───────────────────────────────────────────

class SignupRequest(BaseModel):
    full_name: str = Field(..., min_length=1, max_length=100)
    dob: date
    gender: Gender
    username: str = Field(..., min_length=1, max_length=50)
    email: str = Field(..., min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")
    password: str = Field(..., min_length=MIN_PASSWORD_LENGTH)


class AdminUserCreate(SignupRequest):
    is_admin: bool = False


class UserRead(BaseModel):
    id: uuid.UUID
    full_name: str
    dob: date
    gender: str
    username: str
    email: str
    is_admin: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class SignupResponse(BaseModel):
    message: str
    user: UserRead


class ProfileUpdate(BaseModel):
    """Self-service profile edit. Username, email and password are not editable here."""
    full_name: Optional[str] = Field(None, min_length=1, max_length=100)
    dob: Optional[date] = None
    gender: Optional[Gender] = None


class RoleUpdate(BaseModel):
    is_admin: bool


# ─── Login ──────────────────────────────────────────────

class LoginRequest(BaseModel):
    identifier: str = Field(..., min_length=1, description="Email or username")
    password: str = Field(..., min_length=1)


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserRead


# ─── Passwords ──────────────────────────────────────────

class ChangePasswordRequest(BaseModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=MIN_PASSWORD_LENGTH)


class ForgotPasswordRequest(BaseModel):
    email: str = Field(..., min_length=1)


class ResetPasswordRequest(BaseModel):
    token: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=MIN_PASSWORD_LENGTH)


class MessageResponse(BaseModel):
    message: str
