"""
Authentication Schemas

Request/response models for authentication endpoints.
"""
from typing import Optional
from pydantic import BaseModel, EmailStr, Field, model_validator


class LoginRequest(BaseModel):
    """Login request body."""
    email: EmailStr
    password: str = Field(..., min_length=1)


class RegisterRequest(BaseModel):
    """Self-service registration. Creates the user's own workspace."""
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=100)
    password_confirmation: str

    @model_validator(mode="after")
    def passwords_match(self):
        if self.password != self.password_confirmation:
            raise ValueError("The password confirmation does not match")
        return self

    class Config:
        json_schema_extra = {
            "example": {
                "name": "Jane Doe",
                "email": "jane@example.com",
                "password": "securepassword123",
                "password_confirmation": "securepassword123",
            }
        }


class SessionUser(BaseModel):
    """The signed-in user as the frontend stores it."""
    id: int
    name: str
    email: EmailStr
    avatar: Optional[str] = None
    token_balance: int
    team_id: Optional[int] = None
    roles: list[str]
    permissions: list[str]
    is_super_admin: bool


class LoginResponse(BaseModel):
    """JWT plus the session user."""
    access_token: str
    token_type: str = "bearer"
    user: SessionUser
