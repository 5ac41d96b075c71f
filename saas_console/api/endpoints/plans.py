"""
Plan Endpoints

Public plan catalogue plus super admin plan management.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from saas_console.database import get_db
from saas_console.models.access import Permission
from saas_console.models.color import Color
from saas_console.models.plan import ALL_FEATURES, Plan
from saas_console.models.team import Team
from saas_console.models.user import User
from saas_console.schemas.common import MessageResponse
from saas_console.schemas.permission import AvailableFeature
from saas_console.schemas.plan import PlanBase, PlanCreate, PlanUpdate, PlanResponse, PlanSavedResponse
from saas_console.api.deps import require_super_admin
from saas_console.core.exceptions import (
    DuplicateResourceError,
    InvalidInputError,
    PlanNotFoundError,
    ResourceInUseError
)
from saas_console.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["plans"])


def _get_plan(db: Session, plan_id: int) -> Plan:
    plan = db.query(Plan).filter(Plan.id == plan_id).first()
    if not plan:
        raise PlanNotFoundError(plan_id)
    return plan


def _check_references(db: Session, data: PlanBase) -> list[str]:
    """Validate color and features; returns the de-duplicated feature list."""
    if data.color_id is not None and not db.query(Color.id).filter(Color.id == data.color_id).first():
        raise InvalidInputError(f"Unknown color_id: {data.color_id}")

    features = list(dict.fromkeys(data.features))
    named = [feature for feature in features if feature != ALL_FEATURES]
    if named:
        known = {name for (name,) in db.query(Permission.name).filter(Permission.name.in_(named)).all()}
        unknown = [feature for feature in named if feature not in known]
        if unknown:
            raise InvalidInputError(f"Unknown features: {', '.join(unknown)}")
    return features


def _apply(plan: Plan, data: PlanBase, features: list[str]) -> None:
    for field, value in data.model_dump(exclude={"features", "slug"}).items():
        setattr(plan, field, value)
    plan.features = features


@router.get("/plans", response_model=list[PlanResponse])
async def public_plans(db: Session = Depends(get_db)):
    """Active plans for the pricing page, cheapest first."""
    return db.query(Plan).filter(Plan.is_active.is_(True)).order_by(Plan.price, Plan.id).all()


@router.get("/admin/plans", response_model=list[PlanResponse])
async def list_plans(
    admin: User = Depends(require_super_admin),
    db: Session = Depends(get_db)
):
    return db.query(Plan).order_by(Plan.price, Plan.id).all()


@router.post("/admin/plans", response_model=PlanSavedResponse, status_code=status.HTTP_201_CREATED)
async def create_plan(
    plan_data: PlanCreate,
    admin: User = Depends(require_super_admin),
    db: Session = Depends(get_db)
):
    """
    Create a plan.

    Features must name registered permissions (or "all").
    """
    if db.query(Plan.id).filter(Plan.slug == plan_data.slug).first():
        raise DuplicateResourceError(f"Plan slug already exists: {plan_data.slug}")

    features = _check_references(db, plan_data)

    plan = Plan(slug=plan_data.slug)
    _apply(plan, plan_data, features)
    db.add(plan)
    db.commit()
    db.refresh(plan)

    logger.info(f"Plan created: {plan.slug}", extra={"user_id": admin.id})

    return PlanSavedResponse(message="Plan created successfully", plan=PlanResponse.model_validate(plan))


@router.put("/admin/plans/{plan_id}", response_model=PlanSavedResponse)
async def update_plan(
    plan_id: int,
    plan_data: PlanUpdate,
    admin: User = Depends(require_super_admin),
    db: Session = Depends(get_db)
):
    """Replace a plan's editable fields. Subscribed teams see the new limits at once."""
    plan = _get_plan(db, plan_id)
    features = _check_references(db, plan_data)

    _apply(plan, plan_data, features)
    db.commit()
    db.refresh(plan)

    logger.info(f"Plan updated: {plan.slug}", extra={"user_id": admin.id})

    return PlanSavedResponse(message="Plan updated successfully", plan=PlanResponse.model_validate(plan))


@router.delete("/admin/plans/{plan_id}", response_model=MessageResponse)
async def delete_plan(
    plan_id: int,
    admin: User = Depends(require_super_admin),
    db: Session = Depends(get_db)
):
    """Delete a plan no team is subscribed to."""
    plan = _get_plan(db, plan_id)

    subscribed = db.query(Team).filter(Team.plan_type == plan.slug).count()
    if subscribed:
        raise ResourceInUseError(f"Plan '{plan.slug}' is used by {subscribed} team(s)")

    db.delete(plan)
    db.commit()

    logger.info(f"Plan deleted: {plan.slug}", extra={"user_id": admin.id})

    return MessageResponse(message="Plan deleted successfully")


@router.get("/admin/permissions/available", response_model=list[AvailableFeature])
async def available_features(
    admin: User = Depends(require_super_admin),
    db: Session = Depends(get_db)
):
    """Active permissions that can be listed as plan features."""
    return (
        db.query(Permission)
        .filter(Permission.is_active.is_(True))
        .order_by(Permission.module, Permission.name)
        .all()
    )
