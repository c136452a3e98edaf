"""Order lifecycle: creation, status transitions, item edits and deletion.

Every mutation commits its own read-modify-write and then asks the
occupancy coordinator to re-derive the table status. Concurrent writes to
the same order are last-write-wins.
"""
import logging
import random
from decimal import Decimal
from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from salepdv.core.errors import DuplicateActiveTable, Forbidden, LifecycleError, NotFound
from salepdv.core.timezone_utils import utcnow
from salepdv.crud import order_crud, product_crud, table_crud
from salepdv.models.pedido import Pedido
from salepdv.models.pedido_item import PedidoItem
from salepdv.services import occupancy
from salepdv.services.order_status import ADMIN, CLIENT, check_transition, role_value, status_value

logger = logging.getLogger(__name__)

PAYMENT_METHODS = ("dinheiro", "cartao_credito", "cartao_debito", "pix")


def _field(item, name, default=None):
    # items arrive as pydantic models from the routes and as dicts from scripts/tests
    if isinstance(item, dict):
        return item.get(name, default)
    return getattr(item, name, default)


def normalize_items(db: Session, seller_id: int, items: Iterable) -> List[PedidoItem]:
    """Build PedidoItem rows, snapshotting price and name from the seller's catalog.

    When ``product_id`` does not resolve to one of the seller's products the
    submitted name and price are kept as-is.
    """
    rows = []
    for position, it in enumerate(items):
        quantity = _field(it, "quantity", 1)
        if quantity is None or int(quantity) < 1:
            raise LifecycleError("Quantidade do item deve ser pelo menos 1")
        product_id = _field(it, "product_id")
        name = _field(it, "product_name")
        price = _field(it, "price", 0)
        product = product_crud.get_seller_product(db, seller_id, product_id) if product_id is not None else None
        if product is not None:
            if not product.is_active:
                raise LifecycleError(f"Produto indisponível: {product.name}")
            name = product.name
            price = product.price
        if not name:
            raise LifecycleError("Item sem nome de produto")
        if Decimal(str(price or 0)) < 0:
            raise LifecycleError("Preço do item não pode ser negativo")
        rows.append(
            PedidoItem(
                position=position,
                product_id=product.id if product is not None else product_id,
                product_name=name,
                price=Decimal(str(price or 0)),
                quantity=int(quantity),
                notes=_field(it, "notes"),
            )
        )
    return rows


def compute_total(items: Iterable) -> Decimal:
    total = Decimal("0")
    for it in items:
        total += Decimal(str(_field(it, "price", 0) or 0)) * int(_field(it, "quantity", 0) or 0)
    return total.quantize(Decimal("0.01"))


def _get_order_or_404(db: Session, order_id: int) -> Pedido:
    order = order_crud.get_order(db, order_id)
    if order is None:
        raise NotFound("Pedido não encontrado")
    return order


def _check_owner(order: Pedido, role: Optional[str], requester_id: Optional[int]) -> None:
    if role == CLIENT and requester_id is not None and order.user_id != requester_id:
        raise Forbidden("Este pedido pertence a outro cliente")


def create_order(
    db: Session,
    seller_id: int,
    table_id: int,
    items: Iterable,
    requester_id: Optional[int] = None,
    requester_role=None,
    requester_name: Optional[str] = None,
    customer_phone: Optional[str] = None,
    seller_name: Optional[str] = None,
) -> Pedido:
    table = table_crud.get_table(db, table_id)
    if table is None or table.seller_id != seller_id:
        raise NotFound("Mesa não encontrada")

    role = role_value(requester_role)
    if role == CLIENT and requester_id is not None:
        for other in order_crud.active_orders_for_client(db, requester_id, seller_id):
            if other.table_id != table_id:
                raise DuplicateActiveTable()

    rows = normalize_items(db, seller_id, items)
    if not rows:
        raise LifecycleError("O pedido precisa de pelo menos um item")

    now = utcnow()
    order = Pedido(
        order_code=random.randint(1000, 9999),
        table_id=table.id,
        table_number=table.number,
        status="aguardando",
        total=compute_total(rows),
        user_id=requester_id,
        user_name=requester_name,
        seller_id=seller_id,
        seller_name=seller_name or table.seller_name,
        is_paid=False,
        created_at=now,
        updated_at=now,
    )
    order.items = rows
    db.add(order)
    db.commit()
    db.refresh(order)
    logger.info(
        "order %s (#%s) created on table %s for seller %s total=%s",
        order.id, order.order_code, table.number, seller_id, order.total,
    )
    occupancy.occupy_table(db, table.id, customer_name=requester_name, customer_phone=customer_phone)
    db.refresh(order)
    return order


def transition_order(db: Session, order_id: int, target_status, requester_role, requester_id: Optional[int] = None) -> Pedido:
    order = _get_order_or_404(db, order_id)
    previous = order.status
    target = status_value(target_status)
    check_transition(previous, target, requester_role, requester_id=requester_id, owner_id=order.user_id)
    order.status = target
    order.updated_at = utcnow()
    db.commit()
    logger.info("order %s: %s -> %s by %s", order.id, previous, target, role_value(requester_role))
    occupancy.reconcile_table(db, order.table_id, missing_ok=True)
    db.refresh(order)
    return order


def replace_order_items(db: Session, order_id: int, items: Iterable, requester_role, requester_id: Optional[int] = None) -> Pedido:
    """Replace the items of a waiting order.

    An empty list cancels the order and leaves its items untouched.
    """
    order = _get_order_or_404(db, order_id)
    role = role_value(requester_role)
    if order.status == "em_preparo" and role != ADMIN:
        raise Forbidden("Não é possível alterar um pedido que já está em preparo")
    if order.status != "aguardando":
        raise Forbidden("Apenas pedidos aguardando podem ser alterados")
    _check_owner(order, role, requester_id)

    items = list(items or [])
    if not items:
        order.status = "cancelado"
        logger.info("order %s cancelled by empty item list", order.id)
    else:
        rows = normalize_items(db, order.seller_id, items)
        order.items = rows
        order.total = compute_total(rows)
    order.updated_at = utcnow()
    db.commit()
    occupancy.reconcile_table(db, order.table_id, missing_ok=True)
    db.refresh(order)
    return order


def delete_order(db: Session, order_id: int, requester_role, requester_id: Optional[int] = None) -> None:
    order = _get_order_or_404(db, order_id)
    role = role_value(requester_role)
    if order.status != "aguardando" and role != ADMIN:
        raise Forbidden("Apenas pedidos aguardando podem ser cancelados")
    _check_owner(order, role, requester_id)
    table_id = order.table_id
    db.delete(order)
    db.commit()
    logger.info("order %s deleted by %s", order_id, role)
    occupancy.reconcile_table(db, table_id, missing_ok=True)


def mark_paid(db: Session, order_id: int, payment_method: Optional[str] = None, is_paid: bool = True) -> Pedido:
    """Record payment. The status machine is not involved."""
    order = _get_order_or_404(db, order_id)
    if payment_method is not None and payment_method not in PAYMENT_METHODS:
        raise LifecycleError("Forma de pagamento inválida")
    order.is_paid = bool(is_paid)
    if payment_method is not None:
        order.payment_method = payment_method
    order.updated_at = utcnow()
    db.commit()
    db.refresh(order)
    return order
