from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from salepdv.db.session import get_db
from salepdv.services import reporting
from salepdv.services.access import authorize, enforce
from salepdv.services.auth import require_roles

router = APIRouter(prefix="/stats", tags=["Stats"])


@router.get("/revenue/summary")
def revenue_summary(db: Session = Depends(get_db), current_user=Depends(require_roles("admin"))):
    """
    Revenue of delivered/archived orders for today, this month and this year.

    Returns: { "today": float, "thisMonth": float, "thisYear": float }
    """
    enforce(authorize(current_user, "stats.view"))
    return reporting.revenue_summary(db, current_user.id)


@router.get("/revenue/daily")
def revenue_daily(db: Session = Depends(get_db), current_user=Depends(require_roles("admin"))):
    """
    Revenue per local day over the last 30 days, days without sales omitted.

    Returns: [{ "date": "YYYY-MM-DD", "total": float }]
    """
    enforce(authorize(current_user, "stats.view"))
    return reporting.daily_revenue(db, current_user.id)


@router.get("/revenue/monthly")
def revenue_monthly(db: Session = Depends(get_db), current_user=Depends(require_roles("admin"))):
    """Returns: [{ "month": "YYYY-MM", "total": float }] for the last 12 months."""
    enforce(authorize(current_user, "stats.view"))
    return reporting.monthly_revenue(db, current_user.id)


@router.get("/revenue/yearly")
def revenue_yearly(db: Session = Depends(get_db), current_user=Depends(require_roles("admin"))):
    """Returns: [{ "year": "YYYY", "total": float }] for the last 5 years."""
    enforce(authorize(current_user, "stats.view"))
    return reporting.yearly_revenue(db, current_user.id)
