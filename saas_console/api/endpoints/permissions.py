"""
Permission Registry Endpoints

The global list of capabilities that roles grant and plans unlock.
"""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from saas_console.database import get_db
from saas_console.models.access import Permission, user_has_permissions
from saas_console.models.user import User
from saas_console.schemas.common import MessageResponse
from saas_console.schemas.permission import (
    PermissionCreate,
    PermissionUpdate,
    PermissionResponse,
    PermissionSavedResponse,
    PermissionToggleResponse
)
from saas_console.api.deps import require_super_admin
from saas_console.core.exceptions import DuplicateResourceError, PermissionNotFoundError
from saas_console.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/admin/permissions", tags=["admin-permissions"])


def _get_permission(db: Session, permission_id: int) -> Permission:
    permission = db.query(Permission).filter(Permission.id == permission_id).first()
    if not permission:
        raise PermissionNotFoundError(permission_id)
    return permission


@router.get("", response_model=list[PermissionResponse])
async def list_permissions(
    only_active: bool = Query(False),
    admin: User = Depends(require_super_admin),
    db: Session = Depends(get_db)
):
    query = db.query(Permission)
    if only_active:
        query = query.filter(Permission.is_active.is_(True))
    return query.order_by(Permission.module, Permission.name).all()


@router.post("", response_model=PermissionSavedResponse, status_code=status.HTTP_201_CREATED)
async def create_permission(
    permission_data: PermissionCreate,
    admin: User = Depends(require_super_admin),
    db: Session = Depends(get_db)
):
    if db.query(Permission.id).filter(Permission.name == permission_data.name).first():
        raise DuplicateResourceError(f"Permission already exists: {permission_data.name}")

    permission = Permission(guard_name="web", **permission_data.model_dump())
    db.add(permission)
    db.commit()
    db.refresh(permission)

    logger.info(f"Permission registered: {permission.name}", extra={"user_id": admin.id})

    return PermissionSavedResponse(message="Permission created successfully", permission=PermissionResponse.model_validate(permission))


@router.put("/{permission_id}", response_model=PermissionSavedResponse)
async def update_permission(
    permission_id: int,
    permission_data: PermissionUpdate,
    admin: User = Depends(require_super_admin),
    db: Session = Depends(get_db)
):
    """Update display metadata. The machine name is referenced by plans and code and never changes."""
    permission = _get_permission(db, permission_id)
    permission.label = permission_data.label
    permission.module = permission_data.module
    db.commit()
    db.refresh(permission)

    return PermissionSavedResponse(message="Permission updated successfully", permission=PermissionResponse.model_validate(permission))


@router.post("/{permission_id}/toggle", response_model=PermissionToggleResponse)
async def toggle_permission(
    permission_id: int,
    admin: User = Depends(require_super_admin),
    db: Session = Depends(get_db)
):
    """Inactive permissions drop out of every plan ceiling."""
    permission = _get_permission(db, permission_id)
    permission.is_active = not permission.is_active
    db.commit()

    state = "activated" if permission.is_active else "deactivated"
    logger.info(f"Permission {permission.name} {state}", extra={"user_id": admin.id})

    return PermissionToggleResponse(message=f"Permission {state}", is_active=permission.is_active)


@router.delete("/{permission_id}", response_model=MessageResponse)
async def delete_permission(
    permission_id: int,
    admin: User = Depends(require_super_admin),
    db: Session = Depends(get_db)
):
    permission = _get_permission(db, permission_id)
    permission.roles = []
    db.execute(user_has_permissions.delete().where(user_has_permissions.c.permission_id == permission.id))
    db.delete(permission)
    db.commit()

    logger.info(f"Permission deleted: {permission.name}", extra={"user_id": admin.id})

    return MessageResponse(message="Permission deleted successfully")
