"""
API Dependencies

Reusable FastAPI dependencies for authentication and authorization.
These are used across all API endpoints to ensure consistent security.

The active team comes from the X-Team-Id header (validated by
TeamContextMiddleware) and falls back to the user's current team.
"""
from typing import Optional
from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from saas_console.database import get_db
from saas_console.models.user import User
from saas_console.models.team import Team
from saas_console.core.security import decode_access_token
from saas_console.core.exceptions import AuthenticationError, TeamAccessError
from saas_console.core.permissions import PermissionDenied, is_super_admin, require_plan_feature_for
from saas_console.utils.logging import get_logger, log_security_event

logger = get_logger(__name__)

# A missing header is reported as 401 by get_current_user
security = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
) -> User:
    """
    Get current authenticated user.

    This dependency:
    1. Validates JWT token
    2. Loads user from database
    3. Checks user is active
    """
    if credentials is None:
        raise AuthenticationError("Not authenticated")

    payload = decode_access_token(credentials.credentials)
    if not payload:
        raise AuthenticationError("Invalid or expired token")

    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        raise AuthenticationError("Invalid token payload")

    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        logger.warning(f"Token for unknown user: {user_id}")
        raise AuthenticationError("User not found")

    if not user.is_active:
        raise AuthenticationError("User account is inactive")

    return user


async def get_current_team(
    request: Request,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> Optional[Team]:
    """
    Resolve the team the request acts in.

    Members and owners may act in a team; super admins may act in any.
    Returns None when the user has no current team and sent no header.
    """
    team_id = getattr(request.state, "team_id", None)
    if team_id is None:
        team_id = current_user.team_id
    if team_id is None:
        return None

    team = db.query(Team).filter(Team.id == team_id).first()
    if team is None or not (
        team.user_id == current_user.id
        or current_user.id in team.member_ids
        or is_super_admin(current_user)
    ):
        log_security_event(
            "team_access_violation",
            {"user_id": current_user.id, "team_id": team_id},
            logger
        )
        raise TeamAccessError()

    return team


async def require_super_admin(
    current_user: User = Depends(get_current_user)
) -> User:
    """
    Require the platform owner.

    Use this dependency for every /admin endpoint.
    """
    if not is_super_admin(current_user):
        log_security_event(
            "privilege_escalation",
            {"user_id": current_user.id, "required": "super_admin"},
            logger
        )
        raise PermissionDenied("Super admin privileges required")
    return current_user


def require_plan_feature(feature: str):
    """
    Dependency factory gating an endpoint on the active team's plan.

        @router.post("/x", dependencies=[Depends(require_plan_feature("share_report_link"))])
    """

    async def checker(
        current_user: User = Depends(get_current_user),
        team: Optional[Team] = Depends(get_current_team)
    ) -> None:
        require_plan_feature_for(current_user, team, feature)

    return checker
