"""
Color Model

Brand colors assigned to plans on the pricing page. A color is either a
solid hex value or a two-stop gradient, with an optional dark-mode variant.
"""
from sqlalchemy import Column, String, Boolean, DateTime, Integer, Text
from sqlalchemy.orm import relationship
from datetime import datetime
from saas_console.database import Base


def expand_hex(hex_code: str) -> str:
    """Normalize '#abc' / 'abc' / '#aabbcc' to 'aabbcc'."""
    value = hex_code.lstrip("#")
    if len(value) == 3:
        value = "".join(ch * 2 for ch in value)
    return value.lower()


def contrast_text_for(hex_code: str) -> str:
    """
    Pick black or white text for a background color.

    YIQ brightness of 128 or more reads better with black text.
    """
    value = expand_hex(hex_code)
    r, g, b = (int(value[i:i + 2], 16) for i in (0, 2, 4))
    yiq = ((r * 299) + (g * 587) + (b * 114)) / 1000
    return "#000000" if yiq >= 128 else "#FFFFFF"


class Color(Base):
    __tablename__ = "colors"

    id = Column(Integer, primary_key=True, autoincrement=True)

    name = Column(String(50), nullable=False)
    hex_code = Column(String(7), nullable=False)
    hex_dark = Column(String(7), nullable=True)

    # Gradient stops (used when is_gradient is set)
    is_gradient = Column(Boolean, default=False, nullable=False)
    hex_start = Column(String(7), nullable=True)
    hex_end = Column(String(7), nullable=True)

    # Icon suggested for plans that pick this color
    default_icon_svg = Column(Text, nullable=True)

    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    plans = relationship("Plan", back_populates="color")

    def __repr__(self):
        return f"<Color {self.name} {self.hex_code}>"

    @property
    def contrast_text(self) -> str:
        return contrast_text_for(self.hex_code)

    def in_use(self) -> bool:
        return len(self.plans) > 0
