"""
User Model

A user can belong to many teams but acts in one at a time: team_id is the
active workspace. Role lookups are always scoped to that team.
"""
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, Integer, JSON, Index
from sqlalchemy.orm import relationship
from datetime import datetime
from saas_console.database import Base
from saas_console.models.access import user_has_roles, user_has_permissions


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)

    # Credentials and profile
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    hashed_password = Column(String(255), nullable=False)
    avatar = Column(String(512), nullable=True)

    # Report generation credits
    token_balance = Column(Integer, default=0, nullable=False)

    # Active workspace. use_alter breaks the users <-> teams cycle at DDL time.
    team_id = Column(
        Integer,
        ForeignKey("teams.id", ondelete="SET NULL", use_alter=True, name="fk_users_team_id"),
        nullable=True,
        index=True
    )

    # Free-form admin settings such as member_limit
    settings = Column(JSON, nullable=True, default=dict)

    is_active = Column(Boolean, default=True, nullable=False, index=True)
    email_verified_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
    last_login_at = Column(DateTime, nullable=True)

    # Relationships
    current_team = relationship("Team", foreign_keys=[team_id], post_update=True)
    owned_teams = relationship(
        "Team",
        foreign_keys="Team.user_id",
        back_populates="owner",
        cascade="all, delete-orphan"
    )
    memberships = relationship("TeamMember", back_populates="user", cascade="all, delete-orphan")
    roles = relationship("Role", secondary=user_has_roles, back_populates="users")
    direct_permissions = relationship("Permission", secondary=user_has_permissions)
    transactions = relationship("Transaction", back_populates="user", cascade="all, delete-orphan")

    __table_args__ = (
        Index("idx_user_created", "created_at"),
    )

    def __repr__(self):
        return f"<User {self.email}>"

    @property
    def role_names(self) -> list[str]:
        """Role names held in the active team."""
        return sorted({role.name for role in self.roles if role.team_id == self.team_id})
