"""
User Schemas

Request/response models for admin user management.
"""
from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Any, Optional
from datetime import datetime


class UserResponse(BaseModel):
    """User row for the admin table (excludes credentials)."""
    id: int
    name: str
    email: EmailStr
    avatar: Optional[str] = None
    token_balance: int
    team_id: Optional[int] = None
    is_active: bool
    email_verified_at: Optional[datetime] = None
    created_at: datetime
    roles: list[str] = Field(default_factory=list, validation_alias="role_names")

    class Config:
        from_attributes = True


class UserUpdate(BaseModel):
    """Admin edit of profile, password and roles in the user's active team."""
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    password: Optional[str] = Field(None, min_length=8, max_length=100)
    roles: Optional[list[str]] = None


class UserPermissionsUpdate(BaseModel):
    """Direct permission grants plus per-user settings."""
    permissions: Optional[list[str]] = None
    member_limit: int = Field(0, ge=0)


class UserDetailsResponse(BaseModel):
    user_permissions: list[str]
    user_settings: dict[str, Any]
    all_permissions: list[str]
    all_roles: list[str]


class TokenAdjustment(BaseModel):
    """Positive amounts add tokens, negative amounts remove them."""
    amount: int
    description: str = Field(..., min_length=1, max_length=200)

    @field_validator("amount")
    @classmethod
    def amount_not_zero(cls, value: int) -> int:
        if value == 0:
            raise ValueError("Amount must not be zero")
        return value


class TokenAdjustmentResponse(BaseModel):
    message: str
    new_balance: int
