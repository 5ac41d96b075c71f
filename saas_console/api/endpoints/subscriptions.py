"""
Team Subscription Endpoints

Super admin view of every workspace and its plan.
"""
from datetime import datetime
from fastapi import APIRouter, Depends, Query
from sqlalchemy import and_, or_
from sqlalchemy.orm import Session, joinedload
from typing import Optional

from saas_console.database import get_db
from saas_console.models.plan import Plan
from saas_console.models.team import Team
from saas_console.models.user import User
from saas_console.schemas.common import Paginated
from saas_console.schemas.team import TeamResponse, TeamPlanUpdate, TeamPlanResponse
from saas_console.api.deps import require_super_admin
from saas_console.core.exceptions import PlanNotFoundError, TeamNotFoundError
from saas_console.services.subscriptions import change_team_plan
from saas_console.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/admin/teams", tags=["admin-teams"])


@router.get("", response_model=Paginated[TeamResponse])
async def list_teams(
    search: Optional[str] = Query(None),
    plan: Optional[str] = Query(None),
    status: Optional[str] = Query(None, pattern="^(active|expired)$"),
    page: int = Query(1, ge=1),
    per_page: int = Query(10, ge=1, le=100),
    admin: User = Depends(require_super_admin),
    db: Session = Depends(get_db)
):
    """
    List teams with owner and plan limits.

    Search matches the team name or the owner's name or email.
    """
    query = db.query(Team).join(User, Team.user_id == User.id)

    if search:
        pattern = f"%{search}%"
        query = query.filter(or_(
            Team.name.ilike(pattern),
            User.name.ilike(pattern),
            User.email.ilike(pattern)
        ))

    if plan and plan != "all":
        query = query.filter(Team.plan_type == plan)

    now = datetime.utcnow()
    if status == "active":
        query = query.filter(or_(
            Team.subscription_expires_at.is_(None),
            Team.subscription_expires_at >= now
        ))
    elif status == "expired":
        query = query.filter(and_(
            Team.subscription_expires_at.isnot(None),
            Team.subscription_expires_at < now
        ))

    total = query.count()
    offset = (page - 1) * per_page
    teams = (
        query.options(joinedload(Team.owner), joinedload(Team.plan))
        .order_by(Team.created_at.desc(), Team.id.desc())
        .offset(offset)
        .limit(per_page)
        .all()
    )

    return Paginated[TeamResponse].build(
        [TeamResponse.model_validate(team) for team in teams],
        total=total,
        page=page,
        per_page=per_page
    )


@router.put("/{team_id}/plan", response_model=TeamPlanResponse)
async def update_team_plan(
    team_id: int,
    payload: TeamPlanUpdate,
    admin: User = Depends(require_super_admin),
    db: Session = Depends(get_db)
):
    """
    Move a team to another plan.

    The owner's token balance is reset to the plan allowance. With a
    duration, the expiry is extended by that many calendar months.
    """
    team = db.query(Team).filter(Team.id == team_id).first()
    if not team:
        raise TeamNotFoundError(team_id)

    plan = db.query(Plan).filter(Plan.slug == payload.plan).first()
    if not plan:
        raise PlanNotFoundError(payload.plan)

    change_team_plan(db, team, plan, payload.duration_months)
    db.commit()
    db.refresh(team)

    return TeamPlanResponse(
        message=f"Team moved to {plan.name}",
        team=TeamResponse.model_validate(team)
    )
