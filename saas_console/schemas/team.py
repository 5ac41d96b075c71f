"""
Team Schemas

Request/response models for team subscriptions.
"""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, EmailStr, Field


class TeamOwner(BaseModel):
    id: int
    name: str
    email: EmailStr
    token_balance: int

    class Config:
        from_attributes = True


class TeamResponse(BaseModel):
    """Team row with its owner and plan-derived limits."""
    id: int
    name: str
    plan_type: str
    subscription_expires_at: Optional[datetime] = None
    is_expired: bool
    owner: Optional[TeamOwner] = None
    members_count: int
    member_limit: int
    plan_max_tokens: int
    created_at: datetime

    class Config:
        from_attributes = True


class TeamPlanUpdate(BaseModel):
    plan: str = Field(..., min_length=1)
    duration_months: Optional[int] = Field(None, ge=1, le=120)


class TeamPlanResponse(BaseModel):
    message: str
    team: TeamResponse
