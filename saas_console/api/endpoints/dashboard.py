"""
Admin Dashboard Endpoint

Platform-wide usage numbers. A report generation is recorded as a
"spend" transaction, so reports are counted from the ledger.
"""
from datetime import datetime, timedelta
from fastapi import APIRouter, Depends
from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from saas_console.database import get_db
from saas_console.models.transaction import Transaction, TransactionType
from saas_console.models.user import User
from saas_console.schemas.dashboard import ActivityItem, ChartPoint, DashboardResponse
from saas_console.api.deps import require_super_admin

router = APIRouter(prefix="/admin/dashboard", tags=["admin-dashboard"])

CHART_DAYS = 7
RECENT_ACTIVITY = 5


@router.get("", response_model=DashboardResponse)
async def dashboard(
    admin: User = Depends(require_super_admin),
    db: Session = Depends(get_db)
):
    spend = TransactionType.SPEND.value

    total_users = db.query(func.count(User.id)).scalar()
    total_reports = db.query(func.count(Transaction.id)).filter(Transaction.type == spend).scalar()
    tokens_outstanding = db.query(func.coalesce(func.sum(User.token_balance), 0)).scalar()
    tokens_spent = db.query(func.coalesce(func.sum(Transaction.amount), 0)).filter(Transaction.type == spend).scalar()

    day = func.date(Transaction.created_at)
    rows = (
        db.query(day.label("date"), func.count(Transaction.id))
        .filter(
            Transaction.type == spend,
            Transaction.created_at >= datetime.utcnow() - timedelta(days=CHART_DAYS)
        )
        .group_by(day)
        .order_by(day)
        .all()
    )

    recent = (
        db.query(Transaction)
        .options(joinedload(Transaction.user))
        .order_by(Transaction.created_at.desc(), Transaction.id.desc())
        .limit(RECENT_ACTIVITY)
        .all()
    )

    return DashboardResponse(
        total_users=total_users,
        total_reports=total_reports,
        tokens_outstanding=int(tokens_outstanding),
        tokens_spent=abs(int(tokens_spent)),
        chart_data=[ChartPoint(date=str(date), count=count) for date, count in rows],
        recent_activity=[ActivityItem.model_validate(item) for item in recent]
    )
