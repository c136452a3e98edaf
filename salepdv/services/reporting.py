"""Read-only revenue projections over a seller's completed orders.

Only ``entregue`` and ``arquivado`` orders count as revenue. Rows are
bucketed in Python after converting ``created_at`` to the local timezone,
so day boundaries follow the cart's clock rather than UTC.
"""
from collections import OrderedDict
from datetime import datetime, time, timedelta, timezone
from decimal import Decimal
from typing import Dict, List

from sqlalchemy.orm import Session

from salepdv.core.timezone_utils import LOCAL_TZ, local_today, to_local
from salepdv.crud import order_crud

REVENUE_STATUSES = ("entregue", "arquivado")


def _local_midnight(day) -> datetime:
    # compared against stored UTC timestamps
    return datetime.combine(day, time.min).replace(tzinfo=LOCAL_TZ).astimezone(timezone.utc)


def _revenue_rows(db: Session, seller_id: int, since_day):
    return order_crud.orders_in_statuses_since(db, seller_id, REVENUE_STATUSES, _local_midnight(since_day))


def _bucket(rows, fmt: str) -> Dict[str, Decimal]:
    buckets: Dict[str, Decimal] = {}
    for order in rows:
        created = to_local(order.created_at)
        if created is None:
            continue
        key = created.strftime(fmt)
        buckets[key] = buckets.get(key, Decimal("0")) + Decimal(order.total or 0)
    return OrderedDict(sorted(buckets.items()))


def revenue_summary(db: Session, seller_id: int) -> dict:
    today = local_today()
    rows = _revenue_rows(db, seller_id, today.replace(month=1, day=1))
    out = {"today": Decimal("0"), "thisMonth": Decimal("0"), "thisYear": Decimal("0")}
    for order in rows:
        created = to_local(order.created_at)
        if created is None:
            continue
        total = Decimal(order.total or 0)
        d = created.date()
        if d.year == today.year:
            out["thisYear"] += total
            if d.month == today.month:
                out["thisMonth"] += total
                if d == today:
                    out["today"] += total
    return {k: float(v) for k, v in out.items()}


def daily_revenue(db: Session, seller_id: int, days: int = 30) -> List[dict]:
    since = local_today() - timedelta(days=days)
    buckets = _bucket(_revenue_rows(db, seller_id, since), "%Y-%m-%d")
    return [{"date": k, "total": float(v)} for k, v in buckets.items()]


def monthly_revenue(db: Session, seller_id: int) -> List[dict]:
    today = local_today()
    since = today.replace(year=today.year - 1, day=1)
    buckets = _bucket(_revenue_rows(db, seller_id, since), "%Y-%m")
    return [{"month": k, "total": float(v)} for k, v in buckets.items()]


def yearly_revenue(db: Session, seller_id: int, years: int = 5) -> List[dict]:
    today = local_today()
    since = today.replace(year=today.year - years, month=1, day=1)
    buckets = _bucket(_revenue_rows(db, seller_id, since), "%Y")
    return [{"year": k, "total": float(v)} for k, v in buckets.items()]


def daily_orders(db: Session, seller_id: int) -> dict:
    """Count and total of today's orders, cancelled ones excluded."""
    start = _local_midnight(local_today())
    rows = [
        o for o in order_crud.list_orders(db, seller_id=seller_id, start=start)
        if o.status != "cancelado"
    ]
    total = sum((Decimal(o.total or 0) for o in rows), Decimal("0"))
    return {"total": float(total), "count": len(rows)}
