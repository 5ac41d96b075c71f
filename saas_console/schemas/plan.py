"""
Plan Schemas

Request/response models for subscription plans.
"""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class PlanBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    price: float = Field(..., ge=0)
    member_limit: int = Field(..., ge=1)
    max_workspaces: int = Field(..., ge=1)
    max_tokens: int = Field(..., ge=0)
    features: list[str] = Field(default_factory=list)
    is_active: bool = True
    description: Optional[str] = None
    badge_label: Optional[str] = Field(None, max_length=50)
    color_id: Optional[int] = None
    icon_svg: Optional[str] = None
    is_popular: bool = False


class PlanCreate(PlanBase):
    # alpha-dash, referenced by teams and code
    slug: str = Field(..., min_length=1, max_length=100, pattern=r"^[A-Za-z0-9_-]+$")


class PlanUpdate(PlanBase):
    """Full replacement of a plan's editable fields. The slug never changes."""


class PlanResponse(PlanBase):
    id: int
    slug: str
    created_at: datetime

    class Config:
        from_attributes = True


class PlanSavedResponse(BaseModel):
    message: str
    plan: PlanResponse
