"""
Role and Permission Models

Permissions are global, named capabilities ("report_tiktok_basic").
Roles always belong to a team context: the same role name can exist in
many teams, each with its own permission set.

Users get permissions two ways: through roles in their active team, and
through direct grants that apply everywhere.
"""
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, Integer, Table, UniqueConstraint, Index
from sqlalchemy.orm import relationship
from datetime import datetime
from saas_console.database import Base


role_has_permissions = Table(
    "role_has_permissions",
    Base.metadata,
    Column("role_id", Integer, ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True),
    Column("permission_id", Integer, ForeignKey("permissions.id", ondelete="CASCADE"), primary_key=True),
)

user_has_roles = Table(
    "user_has_roles",
    Base.metadata,
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("role_id", Integer, ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True),
)

user_has_permissions = Table(
    "user_has_permissions",
    Base.metadata,
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("permission_id", Integer, ForeignKey("permissions.id", ondelete="CASCADE"), primary_key=True),
)


class Permission(Base):
    __tablename__ = "permissions"

    id = Column(Integer, primary_key=True, autoincrement=True)

    # Machine name referenced by plan features and access checks.
    # Never renamed through the API.
    name = Column(String(125), unique=True, nullable=False, index=True)
    guard_name = Column(String(50), default="web", nullable=False)

    # Display metadata for the admin registry
    label = Column(String(255), nullable=True)
    module = Column(String(255), nullable=True)

    is_active = Column(Boolean, default=True, nullable=False, index=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    roles = relationship("Role", secondary=role_has_permissions, back_populates="permissions")

    def __repr__(self):
        return f"<Permission {self.name}>"


class Role(Base):
    __tablename__ = "roles"

    id = Column(Integer, primary_key=True, autoincrement=True)

    # Team context the role lives in
    team_id = Column(
        Integer,
        ForeignKey("teams.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    name = Column(String(125), nullable=False)
    guard_name = Column(String(50), default="web", nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    team = relationship("Team", back_populates="roles")
    permissions = relationship("Permission", secondary=role_has_permissions, back_populates="roles")
    users = relationship("User", secondary=user_has_roles, back_populates="roles")

    __table_args__ = (
        UniqueConstraint("team_id", "name", "guard_name", name="uq_role_team_name_guard"),
        Index("idx_role_team_name", "team_id", "name"),
    )

    def __repr__(self):
        return f"<Role {self.name} (team={self.team_id})>"
