"""
Plan Model

A plan is a subscription tier. Teams reference plans by slug, and a plan's
features list names the permissions it unlocks (its ceiling).
"""
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, Integer, Numeric, Text, JSON
from sqlalchemy.orm import relationship
from datetime import datetime
from saas_console.database import Base

# Feature entry that unlocks every active permission
ALL_FEATURES = "all"


class Plan(Base):
    __tablename__ = "plans"

    id = Column(Integer, primary_key=True, autoincrement=True)

    name = Column(String(255), nullable=False)
    slug = Column(String(100), unique=True, nullable=False, index=True)
    price = Column(Numeric(8, 2, asdecimal=False), default=0, nullable=False)

    # Limits & quotas
    member_limit = Column(Integer, default=1, nullable=False)
    max_tokens = Column(Integer, default=0, nullable=False)
    max_workspaces = Column(Integer, default=1, nullable=False)

    # Permission names, e.g. ["report_facebook_basic", "share_report_link"]
    features = Column(JSON, nullable=False, default=list)

    is_active = Column(Boolean, default=True, nullable=False)
    is_popular = Column(Boolean, default=False, nullable=False)

    # Pricing page styling
    description = Column(Text, nullable=True)
    badge_label = Column(String(50), nullable=True)
    color_id = Column(Integer, ForeignKey("colors.id"), nullable=True, index=True)
    icon_svg = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    color = relationship("Color", back_populates="plans")

    def __repr__(self):
        return f"<Plan {self.slug}>"

    @property
    def feature_names(self) -> list[str]:
        return list(self.features or [])

    @property
    def unlocks_everything(self) -> bool:
        return ALL_FEATURES in self.feature_names
