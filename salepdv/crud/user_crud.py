from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from salepdv.models.pedido import Pedido
from salepdv.models.product import Produto
from salepdv.models.table import Mesa
from salepdv.models.user import RoleEnum, User


def get_user(db: Session, user_id: int) -> Optional[User]:
    return db.query(User).filter(User.id == user_id).first()


def get_user_by_username(db: Session, username: str) -> Optional[User]:
    return db.query(User).filter(User.username == username).first()


def find_user(db: Session, identifier: str) -> Optional[User]:
    """Lookup by username or phone, as typed on the password recovery screen."""
    ident = (identifier or "").strip()
    if not ident:
        return None
    return db.query(User).filter(or_(User.username == ident, User.phone == ident)).order_by(User.id.asc()).first()


def get_seller(db: Session, seller_id) -> Optional[User]:
    return db.query(User).filter(User.id == seller_id, User.papel == RoleEnum.admin).first()


def list_users(db: Session, seller_id: Optional[int] = None, limit: int = 200) -> List[User]:
    q = db.query(User)
    if seller_id is not None:
        q = q.filter(User.seller_id == seller_id)
    return q.order_by(User.id.desc()).limit(limit).all()


def list_sellers(db: Session) -> List[User]:
    return db.query(User).filter(User.papel == RoleEnum.admin).order_by(User.name.asc(), User.username.asc()).all()


def seller_has_dependents(db: Session, seller_id: int) -> bool:
    """True while tables, products, orders or customers still point at the cart."""
    for model in (Mesa, Produto, Pedido, User):
        if db.query(model.id).filter(model.seller_id == seller_id).first() is not None:
            return True
    return False


def detach_orders(db: Session, user_id: int) -> int:
    # orders keep user_name for history; only the reference goes
    return (
        db.query(Pedido)
        .filter(Pedido.user_id == user_id)
        .update({Pedido.user_id: None}, synchronize_session=False)
    )
