"""
NotaryPro Backend — User & Authentication Schemas
===================================================

What:  Request/response models for login, the current-user profile, and
       superadmin user management.
"""

from datetime import datetime
from typing import Dict, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from app.models.enums import UserRole


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1, max_length=72)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_at: datetime
    user: "UserResponse"


class UserResponse(BaseModel):
    """Public user profile. Never includes password_hash."""
    id: str
    email: str
    first_name: str
    last_name: str
    role: UserRole
    is_active: bool
    rut: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class UserCreateRequest(BaseModel):
    """
    Body of POST /api/admin/users.

    Password rules are deliberately simple (length only); stronger policy
    belongs to the identity provider once one is wired in.
    """
    email: EmailStr
    password: str = Field(min_length=8, max_length=72)
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    role: UserRole
    rut: Optional[str] = Field(default=None, max_length=12)
    phone: Optional[str] = Field(default=None, max_length=32)
    address: Optional[str] = None

    @field_validator("first_name", "last_name")
    @classmethod
    def strip_names(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            raise ValueError("must not be blank")
        return stripped


class UserStatsResponse(BaseModel):
    total_users: int
    by_role: Dict[str, int]


TokenResponse.model_rebuild()
