"""Order queries used by the lifecycle services and the orders routes.

Thin wrappers over the session; none of these commit.
"""
from datetime import datetime
from typing import Iterable, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from salepdv.models.pedido import Pedido
from salepdv.services.order_status import ACTIVE_STATUSES


def get_order(db: Session, order_id: int) -> Optional[Pedido]:
    return db.query(Pedido).filter(Pedido.id == order_id).first()


def orders_for_table(db: Session, table_id: int, statuses: Optional[Iterable[str]] = None) -> List[Pedido]:
    """Orders referencing a table, newest first, optionally limited to some statuses."""
    q = db.query(Pedido).filter(Pedido.table_id == table_id)
    if statuses is not None:
        q = q.filter(Pedido.status.in_(list(statuses)))
    return q.order_by(Pedido.created_at.desc(), Pedido.id.desc()).all()


def count_active_for_table(db: Session, table_id: int) -> int:
    return (
        db.query(func.count(Pedido.id))
        .filter(Pedido.table_id == table_id, Pedido.status.in_(sorted(ACTIVE_STATUSES)))
        .scalar()
    )


def active_orders_for_client(db: Session, user_id: int, seller_id: int) -> List[Pedido]:
    return (
        db.query(Pedido)
        .filter(
            Pedido.user_id == user_id,
            Pedido.seller_id == seller_id,
            Pedido.status.in_(sorted(ACTIVE_STATUSES)),
        )
        .all()
    )


def list_orders(
    db: Session,
    seller_id: Optional[int] = None,
    user_id: Optional[int] = None,
    status: Optional[str] = None,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    limit: Optional[int] = None,
) -> List[Pedido]:
    q = db.query(Pedido)
    if seller_id is not None:
        q = q.filter(Pedido.seller_id == seller_id)
    if user_id is not None:
        q = q.filter(Pedido.user_id == user_id)
    if status:
        q = q.filter(Pedido.status == status)
    if start is not None:
        q = q.filter(Pedido.created_at >= start)
    if end is not None:
        q = q.filter(Pedido.created_at <= end)
    q = q.order_by(Pedido.created_at.desc(), Pedido.id.desc())
    if limit:
        q = q.limit(limit)
    return q.all()


def orders_in_statuses_since(db: Session, seller_id: int, statuses: Iterable[str], since: datetime) -> List[Pedido]:
    return (
        db.query(Pedido)
        .filter(
            Pedido.seller_id == seller_id,
            Pedido.status.in_(list(statuses)),
            Pedido.created_at >= since,
        )
        .all()
    )
