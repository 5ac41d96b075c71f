"""
Color Schemas

Request/response models for plan brand colors.
"""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, model_validator

HEX_PATTERN = r"^#([A-Fa-f0-9]{6}|[A-Fa-f0-9]{3})$"


class ColorCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=50)
    hex_code: str = Field(..., pattern=HEX_PATTERN)
    hex_dark: Optional[str] = Field(None, pattern=HEX_PATTERN)
    is_gradient: bool = False
    hex_start: Optional[str] = Field(None, pattern=HEX_PATTERN)
    hex_end: Optional[str] = Field(None, pattern=HEX_PATTERN)
    default_icon_svg: Optional[str] = None
    is_active: bool = True

    @model_validator(mode="after")
    def gradient_needs_stops(self):
        if self.is_gradient and not (self.hex_start and self.hex_end):
            raise ValueError("Gradient colors need hex_start and hex_end")
        return self


class ColorUpdate(BaseModel):
    """Partial update. Gradient stops are re-checked against the merged record."""
    name: Optional[str] = Field(None, min_length=1, max_length=50)
    hex_code: Optional[str] = Field(None, pattern=HEX_PATTERN)
    hex_dark: Optional[str] = Field(None, pattern=HEX_PATTERN)
    is_gradient: Optional[bool] = None
    hex_start: Optional[str] = Field(None, pattern=HEX_PATTERN)
    hex_end: Optional[str] = Field(None, pattern=HEX_PATTERN)
    default_icon_svg: Optional[str] = None
    is_active: Optional[bool] = None


class ColorResponse(BaseModel):
    id: int
    name: str
    hex_code: str
    hex_dark: Optional[str] = None
    is_gradient: bool
    hex_start: Optional[str] = None
    hex_end: Optional[str] = None
    default_icon_svg: Optional[str] = None
    is_active: bool
    contrast_text: str
    created_at: datetime

    class Config:
        from_attributes = True
