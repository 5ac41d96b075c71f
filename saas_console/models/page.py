"""
Page and Share Link Models

A page is a Facebook or TikTok account a team reports on. A page can be
shared publicly through a single share token; every public visit is
recorded in the share log, which is pruned to the newest few entries.
Unique-view locks live in their own table so pruning never forgets them.
"""
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, Integer, Float, Text, Index, UniqueConstraint
from sqlalchemy.orm import relationship
from datetime import datetime
from saas_console.database import Base


class Page(Base):
    __tablename__ = "pages"

    id = Column(Integer, primary_key=True, autoincrement=True)

    team_id = Column(
        Integer,
        ForeignKey("teams.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True
    )

    name = Column(String(255), nullable=False)
    platform = Column(String(20), nullable=False)  # facebook, tiktok
    username = Column(String(255), nullable=True)
    avatar = Column(String(512), nullable=True)
    notes = Column(Text, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    team = relationship("Team", back_populates="pages")
    creator = relationship("User", foreign_keys=[user_id])
    reports = relationship("Report", back_populates="page", cascade="all, delete-orphan")
    share_token = relationship(
        "PageShareToken",
        back_populates="page",
        uselist=False,
        cascade="all, delete-orphan"
    )

    __table_args__ = (
        Index("idx_page_team_platform", "team_id", "platform"),
    )

    def __repr__(self):
        return f"<Page {self.name} ({self.platform})>"


class PageShareToken(Base):
    __tablename__ = "page_share_tokens"

    id = Column(Integer, primary_key=True, autoincrement=True)

    page_id = Column(
        Integer,
        ForeignKey("pages.id", ondelete="CASCADE"),
        unique=True,
        nullable=False
    )
    token = Column(String(128), unique=True, nullable=False, index=True)
    is_active = Column(Boolean, default=True, nullable=False)

    # Visit summary
    view_count = Column(Integer, default=0, nullable=False)
    last_accessed_at = Column(DateTime, nullable=True)
    last_location = Column(String(255), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    page = relationship("Page", back_populates="share_token")
    logs = relationship(
        "PageShareLog",
        back_populates="share_token",
        cascade="all, delete-orphan",
        order_by="PageShareLog.id.desc()"
    )
    views = relationship("PageShareView", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<PageShareToken page={self.page_id} active={self.is_active}>"


class PageShareLog(Base):
    __tablename__ = "page_share_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)

    page_share_token_id = Column(
        Integer,
        ForeignKey("page_share_tokens.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    ip_address = Column(String(45), nullable=True)
    location = Column(String(255), nullable=True)
    device = Column(String(20), nullable=True)  # Mobile, Tablet, Desktop
    lat = Column(Float, nullable=True)
    lng = Column(Float, nullable=True)
    accessed_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    share_token = relationship("PageShareToken", back_populates="logs")

    __table_args__ = (
        Index("idx_share_log_token_ip", "page_share_token_id", "ip_address", "accessed_at"),
    )

    def __repr__(self):
        return f"<PageShareLog token={self.page_share_token_id} ip={self.ip_address}>"


class PageShareView(Base):
    """Last counted view per client IP on a share token."""

    __tablename__ = "page_share_views"

    id = Column(Integer, primary_key=True, autoincrement=True)

    page_share_token_id = Column(
        Integer,
        ForeignKey("page_share_tokens.id", ondelete="CASCADE"),
        nullable=False
    )
    ip_address = Column(String(45), nullable=True)
    counted_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("page_share_token_id", "ip_address", name="uq_share_view_token_ip"),
    )

    def __repr__(self):
        return f"<PageShareView token={self.page_share_token_id} ip={self.ip_address}>"
