"""
Permission System (RBAC)

Team-scoped roles plus a plan ceiling:

    effective permissions = (role permissions in team + direct grants)
                            intersected with what the team's plan allows

The platform owner (super admin) bypasses both layers. A super admin is
the configured SUPER_ADMIN_EMAIL or anyone holding the "admin" role inside
the admin workspace (ADMIN_TEAM_ID). Holding "admin" in your own
workspace does NOT make you a super admin.
"""
from typing import Iterable, Optional
from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from saas_console.config import get_settings
from saas_console.models.access import Permission, Role
from saas_console.models.plan import Plan
from saas_console.models.team import Team
from saas_console.models.user import User
from saas_console.core.exceptions import InvalidInputError, PlanFeatureUnavailable

settings = get_settings()

ADMIN_ROLE = "admin"
DEFAULT_TEAM_ROLES = ("admin", "user", "member")


class PermissionDenied(HTTPException):
    """Custom exception for permission denied errors."""

    def __init__(self, detail: str = "Permission denied"):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail
        )


def is_super_admin(user: User) -> bool:
    if user.email and user.email.lower() == settings.SUPER_ADMIN_EMAIL.lower():
        return True
    return any(
        role.name == ADMIN_ROLE and role.team_id == settings.ADMIN_TEAM_ID
        for role in user.roles
    )


def role_names(user: User, team_id: Optional[int]) -> list[str]:
    """Names of the roles the user holds in a team."""
    if team_id is None:
        return []
    return sorted({role.name for role in user.roles if role.team_id == team_id})


def user_permission_names(db: Session, user: User, team_id: Optional[int]) -> set[str]:
    """
    Permissions from the user's roles in the team plus direct grants.

    The team "admin" role holds every permission; the plan still caps it.
    """
    names = {permission.name for permission in user.direct_permissions}
    if ADMIN_ROLE in role_names(user, team_id):
        names.update(all_permission_names(db))
    for role in user.roles:
        if role.team_id == team_id:
            names.update(permission.name for permission in role.permissions)
    return names


def plan_permission_names(db: Session, plan: Optional[Plan]) -> set[str]:
    """
    Active permissions a plan unlocks.

    Features that do not name an active permission are ignored, except the
    "all" wildcard which unlocks every active permission.
    """
    if plan is None:
        return set()

    query = db.query(Permission.name).filter(Permission.is_active.is_(True))
    if not plan.unlocks_everything:
        features = plan.feature_names
        if not features:
            return set()
        query = query.filter(Permission.name.in_(features))
    return {name for (name,) in query.all()}


def all_permission_names(db: Session) -> list[str]:
    return [name for (name,) in db.query(Permission.name).order_by(Permission.name).all()]


def effective_permissions(db: Session, user: User, team: Optional[Team]) -> list[str]:
    """Sorted permission names the user can exercise in the team."""
    if is_super_admin(user):
        return all_permission_names(db)
    if team is None:
        return []

    granted = user_permission_names(db, user, team.id)
    allowed = plan_permission_names(db, team.plan)
    return sorted(granted & allowed)


def plan_supports(plan: Optional[Plan], feature: str) -> bool:
    """Plan ceiling check for a single feature."""
    if plan is None:
        return False
    if plan.unlocks_everything:
        return True
    return feature in plan.feature_names


def require_plan_feature_for(user: User, team: Optional[Team], feature: str) -> None:
    """Raise unless the team's plan includes the feature. Super admins pass."""
    if is_super_admin(user):
        return
    if team is None or not plan_supports(team.plan, feature):
        raise PlanFeatureUnavailable(feature)


def get_or_create_role(db: Session, name: str, team_id: int) -> Role:
    role = db.query(Role).filter(
        Role.team_id == team_id,
        Role.name == name,
        Role.guard_name == "web"
    ).first()
    if role is None:
        role = Role(name=name, team_id=team_id, guard_name="web")
        db.add(role)
        db.flush()
    return role


def assign_role(db: Session, user: User, name: str, team_id: int) -> Role:
    """Give the user a role in a team, creating the team role if needed."""
    role = get_or_create_role(db, name, team_id)
    if role not in user.roles:
        user.roles.append(role)
    return role


def sync_roles(db: Session, user: User, names: Iterable[str], team_id: int) -> None:
    """
    Replace the user's roles in one team with the given names.

    Roles held in other teams are left alone.
    """
    wanted = {get_or_create_role(db, name, team_id) for name in set(names)}
    kept = [role for role in user.roles if role.team_id != team_id]
    user.roles = kept + sorted(wanted, key=lambda role: role.name)


def sync_permissions(db: Session, user: User, names: Iterable[str]) -> None:
    """Replace the user's direct permission grants. Unknown names are rejected."""
    names = set(names)
    permissions = db.query(Permission).filter(Permission.name.in_(names)).all() if names else []
    unknown = names - {permission.name for permission in permissions}
    if unknown:
        raise InvalidInputError(f"Unknown permissions: {', '.join(sorted(unknown))}")
    user.direct_permissions = sorted(permissions, key=lambda permission: permission.name)
