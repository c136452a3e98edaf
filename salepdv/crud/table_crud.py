from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from salepdv.models.table import Mesa


def get_table(db: Session, table_id: int) -> Optional[Mesa]:
    return db.query(Mesa).filter(Mesa.id == table_id).first()


def get_table_by_number(db: Session, seller_id: int, number: int) -> Optional[Mesa]:
    return db.query(Mesa).filter(Mesa.seller_id == seller_id, Mesa.number == number).first()


def max_table_number(db: Session, seller_id: int) -> int:
    """Highest table number a seller owns, 0 when the seller has none."""
    return db.query(func.coalesce(func.max(Mesa.number), 0)).filter(Mesa.seller_id == seller_id).scalar()


def list_tables(db: Session, seller_id: Optional[int] = None, status: Optional[str] = None) -> List[Mesa]:
    q = db.query(Mesa)
    if seller_id is not None:
        q = q.filter(Mesa.seller_id == seller_id)
    if status:
        q = q.filter(Mesa.status == status)
    return q.order_by(Mesa.number.asc()).all()
