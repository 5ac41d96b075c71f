"""
Page Schemas

Request/response models for the team's tracked Facebook and TikTok pages.
"""
from datetime import datetime
from typing import Literal, Optional
from pydantic import BaseModel, Field, model_validator

Platform = Literal["facebook", "tiktok"]


class PageCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    platform: Platform
    username: Optional[str] = Field(None, max_length=50)
    notes: Optional[str] = Field(None, max_length=500)
    avatar: Optional[str] = Field(None, max_length=512)

    class Config:
        json_schema_extra = {
            "example": {
                "name": "Acme Coffee",
                "platform": "facebook",
                "username": "acmecoffee",
                "notes": "Main brand page"
            }
        }


class PageUpdate(BaseModel):
    """Full replacement of the editable details. Platform never changes."""
    name: str = Field(..., min_length=1, max_length=100)
    username: Optional[str] = Field(None, max_length=50)
    notes: Optional[str] = Field(None, max_length=500)
    avatar: Optional[str] = Field(None, max_length=512)


class PageResponse(BaseModel):
    id: int
    team_id: int
    user_id: Optional[int] = None
    name: str
    platform: str
    username: Optional[str] = None
    avatar: Optional[str] = None
    notes: Optional[str] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class PageOverview(BaseModel):
    """Row of the team's page overview."""
    id: int
    page_name: str
    platform: str
    total_reports: int
    last_updated: datetime
    avatar: Optional[str] = None
    username: Optional[str] = None
    notes: Optional[str] = None
    is_active: bool
    owner_name: str
    user_id: Optional[int] = None


class PageSavedResponse(BaseModel):
    message: str
    page: PageResponse


class PageActiveResponse(BaseModel):
    message: str
    is_active: bool


class PageDeleteRequest(BaseModel):
    """Delete by id, or by name and platform within the active team."""
    id: Optional[int] = None
    page_name: Optional[str] = None
    platform: Optional[Platform] = None

    @model_validator(mode="after")
    def id_or_name(self):
        if self.id is None and not (self.page_name and self.platform):
            raise ValueError("Give the page id, or page_name with platform")
        return self
