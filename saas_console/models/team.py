"""
Team Model

The team (workspace) is the tenant boundary. Its subscription is a plan
slug plus an optional expiry; limits are read from the plan so changing a
plan changes every subscribed team at once.
"""
from sqlalchemy import Column, String, DateTime, ForeignKey, Integer, Index
from sqlalchemy.orm import relationship
from datetime import datetime
from saas_console.database import Base

# Used when a team points at a plan slug that no longer exists
DEFAULT_MEMBER_LIMIT = 5
DEFAULT_MAX_TOKENS = 0


class Team(Base):
    __tablename__ = "teams"

    id = Column(Integer, primary_key=True, autoincrement=True)

    name = Column(String(255), nullable=False)

    # Owner (the user who created the workspace)
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    # Plan slug. Not a foreign key: a team keeps its slug when the plan is gone
    plan_type = Column(String(100), default="free", nullable=False, index=True)

    # NULL = never expires
    subscription_expires_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    owner = relationship("User", foreign_keys=[user_id], back_populates="owned_teams")
    plan = relationship(
        "Plan",
        primaryjoin="foreign(Team.plan_type) == Plan.slug",
        viewonly=True
    )
    memberships = relationship("TeamMember", back_populates="team", cascade="all, delete-orphan")
    roles = relationship("Role", back_populates="team", cascade="all, delete-orphan")
    pages = relationship("Page", back_populates="team", cascade="all, delete-orphan")

    __table_args__ = (
        Index("idx_team_plan_expiry", "plan_type", "subscription_expires_at"),
    )

    def __repr__(self):
        return f"<Team {self.name} (plan={self.plan_type})>"

    @property
    def member_limit(self) -> int:
        return self.plan.member_limit if self.plan else DEFAULT_MEMBER_LIMIT

    @property
    def plan_max_tokens(self) -> int:
        return self.plan.max_tokens if self.plan else DEFAULT_MAX_TOKENS

    @property
    def members_count(self) -> int:
        return len(self.memberships)

    @property
    def member_ids(self) -> set[int]:
        return {membership.user_id for membership in self.memberships}

    @property
    def is_expired(self) -> bool:
        if self.subscription_expires_at is None:
            return False
        return self.subscription_expires_at < datetime.utcnow()


class TeamMember(Base):
    """Membership pivot: which users belong to which team, and as what."""

    __tablename__ = "team_user"

    team_id = Column(Integer, ForeignKey("teams.id", ondelete="CASCADE"), primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)

    role = Column(String(50), default="member", nullable=False)
    token_limit = Column(Integer, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    team = relationship("Team", back_populates="memberships")
    user = relationship("User", back_populates="memberships")

    def __repr__(self):
        return f"<TeamMember team={self.team_id} user={self.user_id} role={self.role}>"
