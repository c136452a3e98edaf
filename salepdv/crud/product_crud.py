from typing import List, Optional

from sqlalchemy.orm import Session

from salepdv.models.product import Produto


def get_product(db: Session, product_id: int) -> Optional[Produto]:
    return db.query(Produto).filter(Produto.id == product_id).first()


def get_seller_product(db: Session, seller_id: int, product_id) -> Optional[Produto]:
    """Product lookup restricted to one cart's menu; tolerates non-numeric ids."""
    try:
        pid = int(product_id)
    except (TypeError, ValueError):
        return None
    return db.query(Produto).filter(Produto.id == pid, Produto.seller_id == seller_id).first()


def list_products(db: Session, seller_id: Optional[int] = None, only_active: bool = False) -> List[Produto]:
    q = db.query(Produto)
    if seller_id is not None:
        q = q.filter(Produto.seller_id == seller_id)
    if only_active:
        q = q.filter(Produto.is_active.is_(True))
    return q.order_by(Produto.category.asc(), Produto.name.asc()).all()
