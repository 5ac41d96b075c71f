"""
Page Endpoints

Team members list and manage the pages of their active team, and manage
each page's public link.

- Overview: owners and team admins see every page, others their own
- Update, toggle active, delete: the page's creator, the team owner or a team admin
- Share links: creating or rotating one needs a plan with share_report_link
"""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import func
from sqlalchemy.orm import Session
from typing import Optional

from saas_console.database import get_db
from saas_console.models.page import Page, PageShareToken
from saas_console.models.report import Report
from saas_console.models.team import Team
from saas_console.models.user import User
from saas_console.schemas.common import MessageResponse
from saas_console.schemas.page import (
    PageActiveResponse,
    PageCreate,
    PageDeleteRequest,
    PageOverview,
    PageResponse,
    PageSavedResponse,
    PageUpdate
)
from saas_console.schemas.share import (
    ShareLinkResponse,
    ShareLogResponse,
    ShareStatusResponse,
    ShareToggleResponse
)
from saas_console.api.deps import get_current_user, get_current_team, require_plan_feature
from saas_console.core.exceptions import InvalidInputError, PageNotFoundError, ShareLinkUnavailableError
from saas_console.core.permissions import (
    ADMIN_ROLE,
    PermissionDenied,
    effective_permissions,
    is_super_admin,
    role_names
)
from saas_console.services import share_links
from saas_console.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/pages", tags=["pages"])

SHARE_FEATURE = "share_report_link"
VIEW_ALL_FEATURE = "view_all_team_reports"


def _is_team_admin(user: User, team: Team) -> bool:
    """Team owner, "admin" on the membership, or the team "admin" role."""
    if team.user_id == user.id:
        return True
    if any(m.user_id == user.id and m.role == ADMIN_ROLE for m in team.memberships):
        return True
    return ADMIN_ROLE in role_names(user, team.id)


def _find_team_page(db: Session, user: User, team: Optional[Team], page_id: int) -> Page:
    page = db.query(Page).filter(Page.id == page_id).first()
    if page is None:
        raise PageNotFoundError(page_id)
    if is_super_admin(user):
        return page
    if team is None or page.team_id != team.id:
        raise PageNotFoundError(page_id)
    return page


def _check_can_manage(user: User, team: Optional[Team], page: Page) -> None:
    if is_super_admin(user) or page.user_id == user.id:
        return
    if team is not None and _is_team_admin(user, team):
        return
    raise PermissionDenied("You do not have permission to manage this account.")


def get_team_page(
    page_id: int,
    current_user: User = Depends(get_current_user),
    team: Optional[Team] = Depends(get_current_team),
    db: Session = Depends(get_db)
) -> Page:
    """The page, if it belongs to the active team. Other teams' pages look missing."""
    return _find_team_page(db, current_user, team, page_id)


def get_manageable_page(
    page: Page = Depends(get_team_page),
    current_user: User = Depends(get_current_user),
    team: Optional[Team] = Depends(get_current_team)
) -> Page:
    _check_can_manage(current_user, team, page)
    return page


def _require_token(page: Page) -> PageShareToken:
    if page.share_token is None:
        raise ShareLinkUnavailableError()
    return page.share_token


def _parse_user_ids(raw: str, me: int) -> set[int]:
    ids = set()
    for part in raw.split(","):
        part = part.strip()
        if not part:
            continue
        if part == "me":
            ids.add(me)
        elif part.isdigit():
            ids.add(int(part))
        else:
            raise InvalidInputError(f"Invalid user id: {part}")
    return ids


@router.get("/overview", response_model=list[PageOverview])
async def pages_overview(
    user_ids: Optional[str] = Query(None, description="Comma separated user ids; 'me' is the caller"),
    current_user: User = Depends(get_current_user),
    team: Optional[Team] = Depends(get_current_team),
    db: Session = Depends(get_db)
):
    """
    Pages of the active team, most recently updated first.

    Owners, team admins and holders of view_all_team_reports see every
    page and may filter by creator; everyone else sees the pages they
    created.
    """
    if team is None:
        return []

    query = db.query(Page).filter(Page.team_id == team.id)

    sees_all = (
        is_super_admin(current_user)
        or _is_team_admin(current_user, team)
        or VIEW_ALL_FEATURE in effective_permissions(db, current_user, team)
    )
    if not sees_all:
        query = query.filter(Page.user_id == current_user.id)
    elif user_ids:
        wanted = _parse_user_ids(user_ids, current_user.id)
        if wanted:
            query = query.filter(Page.user_id.in_(wanted))

    pages = query.order_by(Page.updated_at.desc(), Page.id.desc()).all()

    counts = dict(
        db.query(Report.page_id, func.count(Report.id))
        .filter(Report.page_id.in_([page.id for page in pages]))
        .group_by(Report.page_id)
        .all()
    ) if pages else {}

    return [
        PageOverview(
            id=page.id,
            page_name=page.name,
            platform=page.platform,
            total_reports=counts.get(page.id, 0),
            last_updated=page.updated_at,
            avatar=page.avatar,
            username=page.username,
            notes=page.notes,
            is_active=page.is_active,
            owner_name=page.creator.name if page.creator else "Unknown",
            user_id=page.user_id
        )
        for page in pages
    ]


@router.post("", response_model=PageResponse, status_code=status.HTTP_201_CREATED)
async def create_page(
    page_data: PageCreate,
    current_user: User = Depends(get_current_user),
    team: Optional[Team] = Depends(get_current_team),
    db: Session = Depends(get_db)
):
    """Add a page to the active team; the caller becomes its creator."""
    if team is None:
        raise InvalidInputError("No active team")

    page = Page(team_id=team.id, user_id=current_user.id, is_active=True, **page_data.model_dump())
    db.add(page)
    db.commit()
    db.refresh(page)

    logger.info(f"Page created: {page.id} ({page.platform})", extra={"user_id": current_user.id, "team_id": team.id})

    return page


@router.put("/{page_id}", response_model=PageSavedResponse)
async def update_page(
    page_data: PageUpdate,
    page: Page = Depends(get_manageable_page),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    old_name = page.name
    for field, value in page_data.model_dump().items():
        setattr(page, field, value)
    db.commit()
    db.refresh(page)

    logger.info(f"Updated details for page '{old_name}'", extra={"user_id": current_user.id, "team_id": page.team_id})

    return PageSavedResponse(message="Account updated successfully", page=PageResponse.model_validate(page))


@router.post("/{page_id}/active", response_model=PageActiveResponse)
async def toggle_page_active(
    page: Page = Depends(get_manageable_page),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    page.is_active = not page.is_active
    db.commit()

    logger.info(
        f"{'Activated' if page.is_active else 'Deactivated'} page '{page.name}'",
        extra={"user_id": current_user.id, "team_id": page.team_id}
    )

    return PageActiveResponse(
        message="Account activated" if page.is_active else "Account deactivated",
        is_active=page.is_active
    )


@router.post("/delete", response_model=MessageResponse)
async def delete_page(
    deletion: PageDeleteRequest,
    current_user: User = Depends(get_current_user),
    team: Optional[Team] = Depends(get_current_team),
    db: Session = Depends(get_db)
):
    """Delete a page with its reports and share link."""
    if deletion.id is not None:
        page = _find_team_page(db, current_user, team, deletion.id)
    else:
        page = None
        if team is not None:
            page = db.query(Page).filter(
                Page.team_id == team.id,
                Page.name == deletion.page_name,
                Page.platform == deletion.platform
            ).first()
        if page is None:
            raise PageNotFoundError(deletion.page_name)

    _check_can_manage(current_user, team, page)

    name = page.name
    db.delete(page)
    db.commit()

    logger.info(f"Deleted page '{name}'", extra={"user_id": current_user.id})

    return MessageResponse(message="Account deleted.")


@router.post(
    "/{page_id}/share",
    response_model=ShareLinkResponse,
    dependencies=[Depends(require_plan_feature(SHARE_FEATURE))]
)
async def share_page(
    page: Page = Depends(get_team_page),
    db: Session = Depends(get_db)
):
    """Return the page's public link, creating it on first use."""
    share = share_links.get_or_create_share_token(db, page)
    db.commit()
    return ShareLinkResponse(url=share_links.share_url(share.token), token=share.token)


@router.post(
    "/{page_id}/regenerate-share",
    response_model=ShareLinkResponse,
    dependencies=[Depends(require_plan_feature(SHARE_FEATURE))]
)
async def regenerate_share(
    page: Page = Depends(get_team_page),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Invalidate the old link and its history and issue a new one."""
    share = share_links.regenerate_share_token(db, page)
    db.commit()

    logger.info(f"Share link regenerated for page {page.id}", extra={"user_id": current_user.id})

    return ShareLinkResponse(url=share_links.share_url(share.token), token=share.token)


@router.get("/{page_id}/share-status", response_model=ShareStatusResponse)
async def share_status(
    page: Page = Depends(get_team_page),
    db: Session = Depends(get_db)
):
    share = page.share_token
    if share is None:
        return ShareStatusResponse(exists=False, is_active=False, view_count=0, token=None, history=[])

    return ShareStatusResponse(
        exists=True,
        is_active=share.is_active,
        view_count=share.view_count,
        token=share.token,
        history=[ShareLogResponse.model_validate(log) for log in share_links.recent_logs(db, share)]
    )


@router.post("/{page_id}/toggle-share", response_model=ShareToggleResponse)
async def toggle_share(
    page: Page = Depends(get_team_page),
    db: Session = Depends(get_db)
):
    share = _require_token(page)
    share.is_active = not share.is_active
    db.commit()

    state = "enabled" if share.is_active else "disabled"
    return ShareToggleResponse(is_active=share.is_active, message=f"Share link {state}")


@router.post("/{page_id}/reset-share-history", response_model=MessageResponse)
async def reset_share_history(
    page: Page = Depends(get_team_page),
    db: Session = Depends(get_db)
):
    """Clear visit logs and counters; the link itself keeps working."""
    share = _require_token(page)
    share_links.reset_history(db, share)
    db.commit()
    return MessageResponse(message="Share history reset")
