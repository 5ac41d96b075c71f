"""
Report Model

A generated analytics report for one page over a date range. Totals are
denormalized into columns for listing; the full analysis (posts, champions,
breakdowns) lives in report_data and is rendered by the public viewers.
"""
from sqlalchemy import Column, String, DateTime, Date, ForeignKey, Integer, BigInteger, Float, JSON, Index
from sqlalchemy.orm import relationship
from datetime import datetime
from saas_console.database import Base


class Report(Base):
    __tablename__ = "reports"

    id = Column(Integer, primary_key=True, autoincrement=True)

    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    team_id = Column(Integer, ForeignKey("teams.id", ondelete="CASCADE"), nullable=True, index=True)
    page_id = Column(Integer, ForeignKey("pages.id", ondelete="CASCADE"), nullable=False, index=True)

    platform = Column(String(20), nullable=False)  # facebook, tiktok
    file_name = Column(String(255), nullable=True)
    report_data = Column(JSON, nullable=True)
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)

    # Metrics
    total_views = Column(BigInteger, default=0, nullable=False)
    total_likes = Column(BigInteger, default=0, nullable=False)
    total_comments = Column(BigInteger, default=0, nullable=False)
    total_shares = Column(BigInteger, default=0, nullable=False)
    total_saves = Column(BigInteger, default=0, nullable=False)
    total_link_clicks = Column(BigInteger, default=0, nullable=False)
    engagement_rate = Column(Float, default=0, nullable=False)

    top_performers = Column(JSON, nullable=True)

    # Set when someone shares the report; NULL keeps it private
    public_uuid = Column(String(36), unique=True, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    page = relationship("Page", back_populates="reports")

    __table_args__ = (
        Index("idx_report_page_platform", "page_id", "platform", "id"),
    )

    def __repr__(self):
        return f"<Report {self.id} {self.platform} (page={self.page_id})>"
