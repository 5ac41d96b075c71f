"""
Report Share Endpoints

Publishing a single report gives it a public UUID readable through
/public/reports/{uuid}. Reports start private.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import Optional

from saas_console.database import get_db
from saas_console.models.report import Report
from saas_console.models.team import Team
from saas_console.models.user import User
from saas_console.schemas.share import ReportShareResponse
from saas_console.api.deps import get_current_user, get_current_team, require_plan_feature
from saas_console.core.exceptions import ReportNotFoundError
from saas_console.core.permissions import is_super_admin
from saas_console.services import share_links
from saas_console.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/reports", tags=["reports"])


def get_team_report(
    report_id: int,
    current_user: User = Depends(get_current_user),
    team: Optional[Team] = Depends(get_current_team),
    db: Session = Depends(get_db)
) -> Report:
    report = db.query(Report).filter(Report.id == report_id).first()
    if report is None:
        raise ReportNotFoundError(report_id)
    if is_super_admin(current_user):
        return report
    if team is None or report.page.team_id != team.id:
        raise ReportNotFoundError(report_id)
    return report


@router.post(
    "/{report_id}/share",
    response_model=ReportShareResponse,
    dependencies=[Depends(require_plan_feature("share_report_link"))]
)
async def share_report(
    report: Report = Depends(get_team_report),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Return the report's public link, publishing it on first use."""
    public_uuid = share_links.publish_report(db, report)
    db.commit()

    logger.info(f"Report {report.id} shared", extra={"user_id": current_user.id})

    return ReportShareResponse(uuid=public_uuid, url=share_links.report_share_url(public_uuid))
