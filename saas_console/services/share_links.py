"""
Share Link Service

Share token lifecycle and visit tracking for public page dashboards.
"""
from datetime import datetime, timedelta
from typing import Optional
import secrets
import uuid

from sqlalchemy import func
from sqlalchemy.orm import Session

from saas_console.config import get_settings
from saas_console.models.page import Page, PageShareToken, PageShareLog, PageShareView
from saas_console.models.report import Report

settings = get_settings()

UNIQUE_VIEW_WINDOW = timedelta(hours=24)
EXACT_LOCATION_WINDOW = timedelta(minutes=2)
HISTORICAL_SAMPLE = 5

MOBILE_MARKERS = ("iPhone", "Android", "Mobile")
TABLET_MARKERS = ("iPad", "Tablet")


def detect_device(user_agent: Optional[str]) -> str:
    """Mobile, Tablet or Desktop, from User-Agent substrings."""
    user_agent = user_agent or ""
    if any(marker in user_agent for marker in MOBILE_MARKERS):
        return "Mobile"
    if any(marker in user_agent for marker in TABLET_MARKERS):
        return "Tablet"
    return "Desktop"


def generate_token() -> str:
    return secrets.token_urlsafe(48)


def _frontend_url(path: str, key: str) -> str:
    return f"{settings.PUBLIC_BASE_URL.rstrip('/')}/{path.strip('/')}/{key}"


def share_url(token: str) -> str:
    return _frontend_url(settings.SHARE_PAGE_PATH, token)


def report_share_url(public_uuid: str) -> str:
    return _frontend_url(settings.SHARE_REPORT_PATH, public_uuid)


def publish_report(db: Session, report: Report) -> str:
    """Give the report its public UUID on first share; later shares reuse it."""
    if not report.public_uuid:
        report.public_uuid = str(uuid.uuid4())
        db.flush()
    return report.public_uuid


def get_or_create_share_token(db: Session, page: Page) -> PageShareToken:
    share = page.share_token
    if share is None:
        share = PageShareToken(page=page, token=generate_token(), is_active=True, view_count=0)
        db.add(share)
        db.flush()
    return share


def regenerate_share_token(db: Session, page: Page) -> PageShareToken:
    """Drop the page's token and its visit history, then issue a fresh one."""
    if page.share_token is not None:
        db.delete(page.share_token)
        db.flush()
        db.refresh(page)
    return get_or_create_share_token(db, page)


def reset_history(db: Session, share: PageShareToken) -> None:
    db.query(PageShareLog).filter(PageShareLog.page_share_token_id == share.id).delete(
        synchronize_session=False
    )
    db.query(PageShareView).filter(PageShareView.page_share_token_id == share.id).delete(
        synchronize_session=False
    )
    share.view_count = 0
    share.last_accessed_at = None
    share.last_location = None
    db.expire(share, ["logs", "views"])


def recent_logs(db: Session, share: PageShareToken, limit: int = None) -> list[PageShareLog]:
    return (
        db.query(PageShareLog)
        .filter(PageShareLog.page_share_token_id == share.id)
        .order_by(PageShareLog.id.desc())
        .limit(limit or settings.SHARE_LOG_RETENTION)
        .all()
    )


def record_visit(
    db: Session,
    share: PageShareToken,
    ip_address: Optional[str],
    location: str,
    device: str,
    lat: Optional[float],
    lng: Optional[float],
    now: datetime = None
) -> PageShareLog:
    """
    Log a public view and update the token summary.

    The view counter moves only for an IP not counted on this token within
    the last 24 hours. Older log rows beyond the retention size are pruned;
    the per-IP view locks are kept apart from them.
    """
    now = now or datetime.utcnow()
    counted = count_view(db, share, ip_address, now)

    log = PageShareLog(
        page_share_token_id=share.id,
        ip_address=ip_address,
        location=location,
        device=device,
        lat=lat,
        lng=lng,
        accessed_at=now,
        created_at=now
    )
    db.add(log)

    share.last_accessed_at = now
    share.last_location = location
    if counted:
        share.view_count = (share.view_count or 0) + 1
    db.flush()

    prune_logs(db, share)
    return log


def count_view(db: Session, share: PageShareToken, ip_address: Optional[str], now: datetime) -> bool:
    """Take the 24-hour view lock for an IP. False while an earlier lock still holds."""
    view = db.query(PageShareView).filter(
        PageShareView.page_share_token_id == share.id,
        PageShareView.ip_address == ip_address
    ).first()
    if view is None:
        db.add(PageShareView(page_share_token_id=share.id, ip_address=ip_address, counted_at=now))
        return True
    if view.counted_at > now - UNIQUE_VIEW_WINDOW:
        return False
    view.counted_at = now
    return True


def prune_logs(db: Session, share: PageShareToken) -> None:
    keep = [log.id for log in recent_logs(db, share)]
    db.query(PageShareLog).filter(
        PageShareLog.page_share_token_id == share.id,
        PageShareLog.id.notin_(keep)
    ).delete(synchronize_session=False)
    db.expire(share, ["logs"])


def apply_exact_location(db: Session, share: PageShareToken, lat: float, lng: float, now: datetime = None) -> None:
    """Replace the IP guess with GPS coordinates on the summary and the visit just logged."""
    now = now or datetime.utcnow()
    label = f"GPS: {lat}, {lng}"
    share.last_location = label

    latest = (
        db.query(PageShareLog)
        .filter(
            PageShareLog.page_share_token_id == share.id,
            PageShareLog.created_at >= now - EXACT_LOCATION_WINDOW
        )
        .order_by(PageShareLog.id.desc())
        .first()
    )
    if latest is not None:
        latest.lat = lat
        latest.lng = lng
        latest.location = label


def historical_average(db: Session, report: Report) -> Optional[float]:
    """
    Mean engagement rate of up to five earlier reports for the same page and platform.

    Only the five most recent earlier reports count, so the baseline follows
    recent performance rather than the page's whole history.
    """
    earlier = (
        db.query(Report.engagement_rate)
        .filter(
            Report.page_id == report.page_id,
            Report.platform == report.platform,
            Report.id < report.id
        )
        .order_by(Report.id.desc())
        .limit(HISTORICAL_SAMPLE)
        .subquery()
    )
    return db.query(func.avg(earlier.c.engagement_rate)).scalar()
