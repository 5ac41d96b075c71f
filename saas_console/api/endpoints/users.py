"""
Admin User Management Endpoints

Super admin tooling for every account on the platform.

- List users: search, sort and paginate
- Update user: profile, password and roles in the user's active team
- Permissions: direct grants and per-user settings
- Tokens: manual balance adjustments, recorded in the ledger
- Delete user: anyone but yourself
"""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import or_
from sqlalchemy.orm import Session
from typing import Optional

from saas_console.database import get_db
from saas_console.models.access import Role
from saas_console.models.transaction import Transaction, TransactionType
from saas_console.models.user import User
from saas_console.schemas.common import MessageResponse, Paginated
from saas_console.schemas.user import (
    UserResponse,
    UserUpdate,
    UserPermissionsUpdate,
    UserDetailsResponse,
    TokenAdjustment,
    TokenAdjustmentResponse
)
from saas_console.api.deps import require_super_admin
from saas_console.core.security import get_password_hash
from saas_console.core.permissions import (
    PermissionDenied,
    all_permission_names,
    sync_permissions,
    sync_roles,
    user_permission_names
)
from saas_console.core.exceptions import DuplicateResourceError, InvalidInputError, UserNotFoundError
from saas_console.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/admin/users", tags=["admin-users"])

SORTABLE_COLUMNS = {
    "created_at": User.created_at,
    "name": User.name,
    "email": User.email,
    "token_balance": User.token_balance,
    "id": User.id,
}


def _get_user(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise UserNotFoundError(user_id)
    return user


@router.get("", response_model=Paginated[UserResponse])
async def list_users(
    search: Optional[str] = Query(None),
    sort_by: str = Query("created_at"),
    sort_dir: str = Query("desc", pattern="^(asc|desc)$"),
    page: int = Query(1, ge=1),
    per_page: int = Query(10, ge=1, le=100),
    admin: User = Depends(require_super_admin),
    db: Session = Depends(get_db)
):
    """
    List users with their roles in their active team.

    Search matches name or email by substring.
    """
    column = SORTABLE_COLUMNS.get(sort_by)
    if column is None:
        raise InvalidInputError(f"Cannot sort by '{sort_by}'")

    query = db.query(User)
    if search:
        pattern = f"%{search}%"
        query = query.filter(or_(User.name.ilike(pattern), User.email.ilike(pattern)))

    total = query.count()

    order = column.asc() if sort_dir == "asc" else column.desc()
    offset = (page - 1) * per_page
    users = query.order_by(order, User.id.desc()).offset(offset).limit(per_page).all()

    return Paginated[UserResponse].build(
        [UserResponse.model_validate(user) for user in users],
        total=total,
        page=page,
        per_page=per_page
    )


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: int,
    user_data: UserUpdate,
    admin: User = Depends(require_super_admin),
    db: Session = Depends(get_db)
):
    """
    Update profile fields, password and team roles.

    Roles are synced in the user's active team only.
    """
    user = _get_user(db, user_id)

    taken = db.query(User.id).filter(User.email == user_data.email, User.id != user.id).first()
    if taken:
        raise DuplicateResourceError("The email has already been taken")

    user.name = user_data.name
    user.email = user_data.email
    if user_data.password:
        user.hashed_password = get_password_hash(user_data.password)

    if user_data.roles is not None:
        if user.team_id is None:
            raise InvalidInputError("User has no active team to assign roles in")
        sync_roles(db, user, user_data.roles, user.team_id)

    db.commit()
    db.refresh(user)

    logger.info(f"User updated: {user.id} by admin {admin.id}", extra={"user_id": admin.id})

    return user


@router.put("/{user_id}/permissions", response_model=MessageResponse)
async def update_user_permissions(
    user_id: int,
    payload: UserPermissionsUpdate,
    admin: User = Depends(require_super_admin),
    db: Session = Depends(get_db)
):
    """Sync direct permission grants and merge per-user settings."""
    user = _get_user(db, user_id)

    if payload.permissions is not None:
        sync_permissions(db, user, payload.permissions)

    # Reassign so the JSON column is flagged dirty
    user.settings = {**(user.settings or {}), "member_limit": payload.member_limit}

    db.commit()

    logger.info(f"Permissions updated for user {user.id}", extra={"user_id": admin.id})

    return MessageResponse(message="User permissions updated successfully")


@router.get("/{user_id}/details", response_model=UserDetailsResponse)
async def user_details(
    user_id: int,
    admin: User = Depends(require_super_admin),
    db: Session = Depends(get_db)
):
    """Everything the permission editor needs for one user."""
    user = _get_user(db, user_id)

    all_roles = [name for (name,) in db.query(Role.name).distinct().order_by(Role.name).all()]

    return UserDetailsResponse(
        user_permissions=sorted(user_permission_names(db, user, user.team_id)),
        user_settings=user.settings or {"member_limit": 0},
        all_permissions=all_permission_names(db),
        all_roles=all_roles
    )


@router.post("/{user_id}/tokens", response_model=TokenAdjustmentResponse)
async def adjust_tokens(
    user_id: int,
    adjustment: TokenAdjustment,
    admin: User = Depends(require_super_admin),
    db: Session = Depends(get_db)
):
    """
    Add or remove tokens.

    The balance update and its ledger entry are committed together; a
    deduction larger than the balance is refused.
    """
    user = db.query(User).filter(User.id == user_id).with_for_update().first()
    if not user:
        raise UserNotFoundError(user_id)

    new_balance = user.token_balance + adjustment.amount
    if new_balance < 0:
        raise InvalidInputError(
            f"Cannot deduct {abs(adjustment.amount)} tokens; balance is {user.token_balance}"
        )

    user.token_balance = new_balance
    db.add(Transaction(
        user_id=user.id,
        amount=adjustment.amount,
        type=TransactionType.ADMIN_ADJUSTMENT.value,
        description=f"{adjustment.description} (By Admin)"
    ))
    db.commit()

    logger.info(
        f"Tokens adjusted for user {user.id}: {adjustment.amount:+d} -> {new_balance}",
        extra={"user_id": admin.id}
    )

    return TokenAdjustmentResponse(message="Tokens updated successfully", new_balance=new_balance)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: int,
    admin: User = Depends(require_super_admin),
    db: Session = Depends(get_db)
):
    """Delete a user and everything they own. Admins cannot delete themselves."""
    if user_id == admin.id:
        raise PermissionDenied("You cannot delete your own account")

    user = _get_user(db, user_id)
    user.roles = []
    user.direct_permissions = []
    db.delete(user)
    db.commit()

    logger.info(f"User deleted: {user_id} by admin {admin.id}", extra={"user_id": admin.id})

    return None
