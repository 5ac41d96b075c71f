"""
Subscription Service

Plan changes for teams, including expiry extension by calendar months.
"""
from datetime import datetime
from typing import Optional
import logging

from dateutil.relativedelta import relativedelta
from sqlalchemy.orm import Session

from saas_console.models.plan import Plan
from saas_console.models.team import Team

logger = logging.getLogger(__name__)


def extend_expiry(current: Optional[datetime], months: int, now: datetime = None) -> datetime:
    """
    Add calendar months to a subscription.

    A subscription still running is extended from its expiry; a lapsed or
    open-ended one starts from now. Month ends clamp (Jan 31 + 1 = Feb 28/29).
    """
    now = now or datetime.utcnow()
    start = current if current is not None and current > now else now
    return start + relativedelta(months=months)


def change_team_plan(db: Session, team: Team, plan: Plan, duration_months: Optional[int] = None) -> Team:
    """Move a team to a plan and reset its owner's token balance to the plan allowance."""
    previous = team.plan_type
    team.plan_type = plan.slug
    db.flush()
    db.expire(team, ["plan"])

    if team.owner is not None:
        team.owner.token_balance = plan.max_tokens

    if duration_months:
        team.subscription_expires_at = extend_expiry(team.subscription_expires_at, duration_months)

    logger.info(
        f"Team {team.id} moved from {previous} to {plan.slug}",
        extra={"team_id": team.id}
    )
    return team
