"""
Share and Public Report Schemas

Models for share-link management and the public report viewers.
"""
from datetime import date, datetime
from typing import Any, Optional
from pydantic import BaseModel, Field

from saas_console.schemas.common import Paginated


class ShareLinkResponse(BaseModel):
    url: str
    token: str


class ReportShareResponse(BaseModel):
    uuid: str
    url: str


class ShareLogResponse(BaseModel):
    id: int
    ip_address: Optional[str] = None
    location: Optional[str] = None
    device: Optional[str] = None
    lat: Optional[float] = None
    lng: Optional[float] = None
    accessed_at: datetime

    class Config:
        from_attributes = True


class ShareStatusResponse(BaseModel):
    exists: bool
    is_active: bool
    view_count: int
    token: Optional[str] = None
    history: list[ShareLogResponse]


class ShareToggleResponse(BaseModel):
    is_active: bool
    message: str


class ExactLocationRequest(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


class PageSummary(BaseModel):
    id: int
    name: str
    platform: str
    username: Optional[str] = None
    avatar: Optional[str] = None

    class Config:
        from_attributes = True


class ReportSummary(BaseModel):
    """Report row as listed by the public page dashboard."""
    id: int
    page_id: int
    platform: str
    file_name: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    total_views: int
    total_likes: int
    total_comments: int
    total_shares: int
    total_saves: int
    total_link_clicks: int
    engagement_rate: float
    historical_avg: Optional[float] = None
    top_performers: Optional[Any] = None
    public_uuid: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class PublicReportResponse(ReportSummary):
    """Single shared report with everything the viewer renders."""
    report_data: Optional[Any] = None
    page: PageSummary


class PublicShareResponse(BaseModel):
    page_name: str
    platform: str
    reports: Paginated[ReportSummary]
    view_count: int
    history: list[ShareLogResponse]
