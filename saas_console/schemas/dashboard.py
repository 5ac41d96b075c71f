"""
Dashboard Schemas

Platform-wide metrics for the super admin home page.
"""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel


class ChartPoint(BaseModel):
    date: str
    count: int


class ActivityUser(BaseModel):
    id: int
    name: str
    email: str

    class Config:
        from_attributes = True


class ActivityItem(BaseModel):
    id: int
    amount: int
    type: str
    description: Optional[str] = None
    created_at: datetime
    user: Optional[ActivityUser] = None

    class Config:
        from_attributes = True


class DashboardResponse(BaseModel):
    total_users: int
    total_reports: int
    tokens_outstanding: int
    tokens_spent: int
    chart_data: list[ChartPoint]
    recent_activity: list[ActivityItem]
