from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session
from typing import List, Optional

from salepdv.db.session import get_db
from salepdv.core.timezone_utils import local_day_range_to_utc
from salepdv.crud import order_crud, table_crud
from salepdv.models.pedido import Pedido as PedidoModel
from salepdv.schemas.pedido import (
    PedidoCreate,
    PedidoItemsReplace,
    PedidoPaymentUpdate,
    PedidoRead,
    PedidoStatusUpdate,
)
from salepdv.services import lifecycle, reporting
from salepdv.services.access import authorize, enforce, resolve_seller, seller_scope
from salepdv.services.auth import get_current_user, require_roles
from salepdv.services.order_status import ACTIVE_STATUSES, ADMIN, role_value

router = APIRouter(prefix="/orders", tags=["Orders"])


def _load_order(db: Session, order_id: int, current_user, action: str) -> PedidoModel:
    order = order_crud.get_order(db, order_id)
    if not order:
        raise HTTPException(status_code=404, detail="Pedido não encontrado")
    enforce(authorize(current_user, action, order))
    return order


def _visible_orders(db: Session, current_user, **filters) -> List[PedidoModel]:
    # admins see their cart's orders, clients only the ones they placed
    if role_value(current_user.papel) == ADMIN:
        return order_crud.list_orders(db, seller_id=current_user.id, **filters)
    return order_crud.list_orders(db, user_id=current_user.id, **filters)


@router.get("", response_model=List[PedidoRead])
@router.get("/", response_model=List[PedidoRead], include_in_schema=False)
def list_orders(
    status_filter: Optional[str] = Query(None, alias="status"),
    date: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    """List orders visible to the requester.

    ``date`` (YYYY-MM-DD) restricts to one local day; ``status`` to one status.
    """
    start, end = local_day_range_to_utc(date) if date else (None, None)
    if date and start is None:
        raise HTTPException(status_code=400, detail="Data inválida, use YYYY-MM-DD")
    return _visible_orders(db, current_user, status=status_filter, start=start, end=end)


@router.get("/recent", response_model=List[PedidoRead])
def recent_orders(limit: int = 10, db: Session = Depends(get_db), current_user=Depends(require_roles("admin"))):
    return order_crud.list_orders(db, seller_id=current_user.id, limit=max(1, min(limit, 100)))


@router.get("/daily")
def daily_orders(db: Session = Depends(get_db), current_user=Depends(require_roles("admin"))):
    return reporting.daily_orders(db, current_user.id)


@router.get("/status/{order_status}", response_model=List[PedidoRead])
def orders_by_status(order_status: str, db: Session = Depends(get_db), current_user=Depends(get_current_user)):
    return _visible_orders(db, current_user, status=order_status)


@router.get("/table/{table_id}", response_model=List[PedidoRead])
def orders_by_table(
    table_id: int,
    active_only: bool = False,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    table = table_crud.get_table(db, table_id)
    if not table or table.seller_id != seller_scope(current_user):
        raise HTTPException(status_code=404, detail="Mesa não encontrada")
    orders = order_crud.orders_for_table(db, table_id, statuses=ACTIVE_STATUSES if active_only else None)
    if role_value(current_user.papel) != ADMIN:
        orders = [o for o in orders if o.user_id == current_user.id]
    return orders


@router.get("/{order_id}", response_model=PedidoRead)
def get_order(order_id: int, db: Session = Depends(get_db), current_user=Depends(get_current_user)):
    return _load_order(db, order_id, current_user, "order.view")


@router.post("", response_model=PedidoRead, status_code=status.HTTP_201_CREATED)
@router.post("/", response_model=PedidoRead, status_code=status.HTTP_201_CREATED, include_in_schema=False)
def create_order(payload: PedidoCreate, db: Session = Depends(get_db), current_user=Depends(get_current_user)):
    enforce(authorize(current_user, "order.create"))
    seller_id = resolve_seller(current_user, payload.seller_id)
    if seller_id is None:
        raise HTTPException(status_code=400, detail="Informe o carrinho do pedido")
    return lifecycle.create_order(
        db,
        seller_id=seller_id,
        table_id=payload.table_id,
        items=payload.items,
        requester_id=current_user.id,
        requester_role=current_user.papel,
        requester_name=current_user.display_name,
        customer_phone=payload.customer_phone or current_user.phone,
    )


@router.patch("/{order_id}/status", response_model=PedidoRead)
def update_order_status(
    order_id: int,
    payload: PedidoStatusUpdate,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    _load_order(db, order_id, current_user, "order.transition")
    return lifecycle.transition_order(
        db, order_id, payload.status, current_user.papel, requester_id=current_user.id
    )


@router.put("/{order_id}/items", response_model=PedidoRead)
def replace_items(
    order_id: int,
    payload: PedidoItemsReplace,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    _load_order(db, order_id, current_user, "order.edit")
    return lifecycle.replace_order_items(
        db, order_id, payload.items, current_user.papel, requester_id=current_user.id
    )


@router.patch("/{order_id}/payment", response_model=PedidoRead)
def update_payment(
    order_id: int,
    payload: PedidoPaymentUpdate,
    db: Session = Depends(get_db),
    current_user=Depends(require_roles("admin")),
):
    _load_order(db, order_id, current_user, "order.pay")
    return lifecycle.mark_paid(db, order_id, payment_method=payload.payment_method, is_paid=payload.is_paid)


@router.delete("/{order_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_order(order_id: int, db: Session = Depends(get_db), current_user=Depends(get_current_user)):
    _load_order(db, order_id, current_user, "order.delete")
    lifecycle.delete_order(db, order_id, current_user.papel, requester_id=current_user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
