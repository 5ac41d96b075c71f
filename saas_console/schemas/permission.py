"""
Permission Schemas

Request/response models for the permission registry.
"""
from typing import Optional
from pydantic import BaseModel, Field


class PermissionResponse(BaseModel):
    id: int
    name: str
    label: Optional[str] = None
    module: Optional[str] = None
    is_active: bool

    class Config:
        from_attributes = True


class AvailableFeature(BaseModel):
    """Permission offered as a plan feature."""
    id: int
    name: str
    label: Optional[str] = None
    module: Optional[str] = None

    class Config:
        from_attributes = True


class PermissionCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=125, pattern=r"^[a-z][a-z0-9_]*$")
    label: Optional[str] = Field(None, max_length=255)
    module: Optional[str] = Field(None, max_length=255)
    is_active: bool = True


class PermissionUpdate(BaseModel):
    """Only display metadata is editable; the machine name is fixed."""
    label: str = Field(..., min_length=1, max_length=255)
    module: str = Field(..., min_length=1, max_length=255)


class PermissionSavedResponse(BaseModel):
    message: str
    permission: PermissionResponse


class PermissionToggleResponse(BaseModel):
    message: str
    is_active: bool
