"""
Public Report Endpoints

Read-only viewers reached through a share token or a report UUID.
No authentication; the whole /public prefix is rate limited per client IP.
"""
from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session, joinedload
from typing import Optional

from saas_console.database import get_db
from saas_console.models.page import PageShareToken
from saas_console.models.report import Report
from saas_console.schemas.common import Paginated
from saas_console.schemas.share import (
    ExactLocationRequest,
    PublicReportResponse,
    PublicShareResponse,
    ReportSummary,
    ShareLogResponse
)
from saas_console.core.exceptions import ReportNotFoundError, ShareLinkUnavailableError
from saas_console.services import share_links
from saas_console.services.geolocation import locate_ip
from saas_console.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/public", tags=["public"])

REPORTS_PER_PAGE = 15


def _client_ip(request: Request) -> Optional[str]:
    return request.client.host if request.client else None


@router.get("/share/{token}", response_model=PublicShareResponse)
async def view_shared_page(
    token: str,
    request: Request,
    page: int = Query(1, ge=1),
    lat: Optional[float] = Query(None, ge=-90, le=90),
    lng: Optional[float] = Query(None, ge=-180, le=180),
    db: Session = Depends(get_db)
):
    """
    Public page dashboard.

    Every call is logged as a visit; coordinates from the browser win
    over the IP-based guess.
    """
    share = db.query(PageShareToken).filter(
        PageShareToken.token == token,
        PageShareToken.is_active.is_(True)
    ).first()
    if share is None:
        raise ShareLinkUnavailableError()

    ip = _client_ip(request)
    geo = await locate_ip(ip)

    share_links.record_visit(
        db,
        share,
        ip_address=ip,
        location=geo.location,
        device=share_links.detect_device(request.headers.get("User-Agent")),
        lat=lat if lat is not None else geo.lat,
        lng=lng if lng is not None else geo.lon
    )
    db.commit()

    query = db.query(Report).filter(Report.page_id == share.page_id)
    total = query.count()
    reports = (
        query.order_by(Report.created_at.desc(), Report.id.desc())
        .offset((page - 1) * REPORTS_PER_PAGE)
        .limit(REPORTS_PER_PAGE)
        .all()
    )

    items = []
    for report in reports:
        item = ReportSummary.model_validate(report)
        item.historical_avg = share_links.historical_average(db, report)
        items.append(item)

    return PublicShareResponse(
        page_name=share.page.name,
        platform=share.page.platform,
        reports=Paginated[ReportSummary].build(items, total=total, page=page, per_page=REPORTS_PER_PAGE),
        view_count=share.view_count,
        history=[ShareLogResponse.model_validate(log) for log in share_links.recent_logs(db, share)]
    )


@router.post("/share/{token}/exact-location")
async def exact_location(
    token: str,
    coords: ExactLocationRequest,
    db: Session = Depends(get_db)
):
    """Precise browser coordinates for the visit that was just logged."""
    share = db.query(PageShareToken).filter(PageShareToken.token == token).first()
    if share is None:
        raise ShareLinkUnavailableError()

    share_links.apply_exact_location(db, share, coords.lat, coords.lng)
    db.commit()

    return {"status": "success"}


@router.get("/reports/{public_uuid}", response_model=PublicReportResponse)
async def view_report(
    public_uuid: str,
    db: Session = Depends(get_db)
):
    report = (
        db.query(Report)
        .options(joinedload(Report.page))
        .filter(Report.public_uuid == public_uuid)
        .first()
    )
    if report is None:
        raise ReportNotFoundError(public_uuid)

    response = PublicReportResponse.model_validate(report)
    response.historical_avg = share_links.historical_average(db, report)
    return response
