"""
Color Endpoints

Brand colors used to theme plans on the pricing page.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from saas_console.database import get_db
from saas_console.models.color import Color
from saas_console.models.user import User
from saas_console.schemas.color import ColorCreate, ColorUpdate, ColorResponse
from saas_console.schemas.common import MessageResponse
from saas_console.api.deps import require_super_admin
from saas_console.core.exceptions import ColorNotFoundError, InvalidInputError, ResourceInUseError
from saas_console.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/admin/colors", tags=["admin-colors"])


def _get_color(db: Session, color_id: int) -> Color:
    color = db.query(Color).filter(Color.id == color_id).first()
    if not color:
        raise ColorNotFoundError(color_id)
    return color


@router.get("", response_model=list[ColorResponse])
async def list_colors(
    admin: User = Depends(require_super_admin),
    db: Session = Depends(get_db)
):
    return db.query(Color).order_by(Color.created_at.desc(), Color.id.desc()).all()


@router.post("", response_model=ColorResponse, status_code=status.HTTP_201_CREATED)
async def create_color(
    color_data: ColorCreate,
    admin: User = Depends(require_super_admin),
    db: Session = Depends(get_db)
):
    color = Color(**color_data.model_dump())
    db.add(color)
    db.commit()
    db.refresh(color)

    logger.info(f"Color created: {color.name}", extra={"user_id": admin.id})

    return color


@router.put("/{color_id}", response_model=ColorResponse)
async def update_color(
    color_id: int,
    color_data: ColorUpdate,
    admin: User = Depends(require_super_admin),
    db: Session = Depends(get_db)
):
    """Partial update; a color left as a gradient must still have both stops."""
    color = _get_color(db, color_id)

    for field, value in color_data.model_dump(exclude_unset=True).items():
        if field in ("name", "hex_code", "is_gradient", "is_active") and value is None:
            continue
        setattr(color, field, value)

    if color.is_gradient and not (color.hex_start and color.hex_end):
        db.rollback()
        raise InvalidInputError("Gradient colors need hex_start and hex_end")

    db.commit()
    db.refresh(color)

    logger.info(f"Color updated: {color.id}", extra={"user_id": admin.id})

    return color


@router.delete("/{color_id}", response_model=MessageResponse)
async def delete_color(
    color_id: int,
    admin: User = Depends(require_super_admin),
    db: Session = Depends(get_db)
):
    """Delete a color no plan uses."""
    color = _get_color(db, color_id)
    if color.in_use():
        raise ResourceInUseError("Color is used by one or more plans")

    db.delete(color)
    db.commit()

    logger.info(f"Color deleted: {color_id}", extra={"user_id": admin.id})

    return MessageResponse(message="Color deleted successfully")
