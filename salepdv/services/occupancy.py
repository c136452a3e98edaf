"""Table occupancy coordinator.

A table is ``occupied`` while at least one active order (``aguardando`` or
``em_preparo``) references it. That is an eventual invariant: every order
mutation calls ``reconcile_table`` afterwards, and ``reconcile_seller_tables``
re-derives all of a seller's tables to heal anything left behind (for
example a crash in the middle of ``release_table``).
"""
import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session, sessionmaker

from salepdv.core.config import settings
from salepdv.core.errors import DuplicateTableNumber, InvalidQuantity, LifecycleError, NotFound, TableInUse
from salepdv.core.timezone_utils import utcnow
from salepdv.crud import order_crud, table_crud
from salepdv.models.pedido import Pedido
from salepdv.models.table import Mesa
from salepdv.services.order_status import (
    ADMIN,
    TABLE_AVAILABLE,
    TABLE_OCCUPIED,
    check_transition,
    occupancy_for,
)

logger = logging.getLogger(__name__)


@dataclass
class ReleaseResult:
    table: Mesa
    archived: List[int] = field(default_factory=list)
    # (order_id, error message) for every archive that did not go through
    failed: List[Tuple[int, str]] = field(default_factory=list)

    @property
    def partial(self) -> bool:
        return bool(self.failed)


def _get_table_or_404(db: Session, table_id: int) -> Mesa:
    table = table_crud.get_table(db, table_id)
    if table is None:
        raise NotFound("Mesa não encontrada")
    return table


def _apply_status(table: Mesa, status: str) -> bool:
    """Set the table status, keeping occupied_at and the customer snapshot in step."""
    if table.status == status:
        return False
    if status == TABLE_OCCUPIED:
        table.occupied_at = utcnow()
    else:
        table.occupied_at = None
        table.customer_name = None
        table.customer_phone = None
    table.status = status
    return True


def reconcile_table(db: Session, table_id: int, missing_ok: bool = False) -> Optional[Mesa]:
    """Recompute a table's status from the orders currently referencing it."""
    table = table_crud.get_table(db, table_id)
    if table is None:
        if missing_ok:
            return None
        raise NotFound("Mesa não encontrada")
    statuses = [o.status for o in order_crud.orders_for_table(db, table_id)]
    if _apply_status(table, occupancy_for(statuses)):
        logger.info("table %s (number=%s) reconciled to %s", table.id, table.number, table.status)
    db.commit()
    db.refresh(table)
    return table


def reconcile_seller_tables(db: Session, seller_id: int) -> List[Mesa]:
    """Idempotent sweep over every table of one seller."""
    tables = table_crud.list_tables(db, seller_id=seller_id)
    changed = 0
    for table in tables:
        statuses = [o.status for o in order_crud.orders_for_table(db, table.id)]
        if _apply_status(table, occupancy_for(statuses)):
            changed += 1
    db.commit()
    if changed:
        logger.info("reconciliation sweep for seller %s changed %s of %s tables", seller_id, changed, len(tables))
    return tables


def occupy_table(db: Session, table_id: int, customer_name: Optional[str] = None, customer_phone: Optional[str] = None) -> Mesa:
    """Mark a table occupied and record who is sitting there."""
    table = _get_table_or_404(db, table_id)
    _apply_status(table, TABLE_OCCUPIED)
    if customer_name:
        table.customer_name = customer_name
    if customer_phone:
        table.customer_phone = customer_phone
    db.commit()
    db.refresh(table)
    return table


def _archive_delivered(factory: sessionmaker, order_id: int) -> int:
    with factory() as session:
        order = session.query(Pedido).filter(Pedido.id == order_id).first()
        if order is None:
            raise NotFound("Pedido não encontrado")
        check_transition(order.status, "arquivado", ADMIN)
        order.status = "arquivado"
        order.updated_at = utcnow()
        session.commit()
    return order_id


def release_table(db: Session, table_id: int, max_workers: Optional[int] = None) -> ReleaseResult:
    """Archive every delivered order on the table, then free it.

    Archives run in parallel, each in its own session and transaction.
    Failures are collected in the result rather than aborting; the table is
    freed regardless. Orders still ``aguardando``/``em_preparo`` are left
    alone. Not atomic: a crash before the table update leaves it occupied
    until the next reconciliation.
    """
    _get_table_or_404(db, table_id)
    delivered = [o.id for o in order_crud.orders_for_table(db, table_id, statuses=("entregue",))]
    # end the read so the workers' commits are visible to this session afterwards
    db.commit()

    result_archived: List[int] = []
    result_failed: List[Tuple[int, str]] = []
    if delivered:
        factory = sessionmaker(bind=db.get_bind(), autoflush=False)
        workers = min(max_workers or settings.RELEASE_TABLE_WORKERS, len(delivered))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = {pool.submit(_archive_delivered, factory, oid): oid for oid in delivered}
            for fut in as_completed(futures):
                oid = futures[fut]
                try:
                    fut.result()
                    result_archived.append(oid)
                except Exception as exc:
                    logger.warning("release_table %s: failed to archive order %s: %s", table_id, oid, exc)
                    result_failed.append((oid, str(exc)))

    db.expire_all()
    table = _get_table_or_404(db, table_id)
    _apply_status(table, TABLE_AVAILABLE)
    db.commit()
    db.refresh(table)
    logger.info(
        "table %s (number=%s) released: archived=%s failed=%s",
        table.id, table.number, len(result_archived), len(result_failed),
    )
    return ReleaseResult(table=table, archived=sorted(result_archived), failed=sorted(result_failed))


def create_tables(db: Session, seller_id: int, quantity: int, seller_name: Optional[str] = None) -> List[Mesa]:
    """Create ``quantity`` tables numbered right after the seller's highest one."""
    if quantity is None or quantity <= 0:
        raise InvalidQuantity()
    start = table_crud.max_table_number(db, seller_id) + 1
    tables = [
        Mesa(number=start + i, status=TABLE_AVAILABLE, seller_id=seller_id, seller_name=seller_name)
        for i in range(quantity)
    ]
    db.add_all(tables)
    db.commit()
    for t in tables:
        db.refresh(t)
    logger.info("seller %s created tables %s..%s", seller_id, start, start + quantity - 1)
    return tables


def create_table(db: Session, seller_id: int, number: int, seller_name: Optional[str] = None) -> Mesa:
    if number is None or number < 1:
        raise LifecycleError("Número da mesa deve ser maior que 0")
    if table_crud.get_table_by_number(db, seller_id, number):
        raise DuplicateTableNumber()
    table = Mesa(number=number, status=TABLE_AVAILABLE, seller_id=seller_id, seller_name=seller_name)
    db.add(table)
    db.commit()
    db.refresh(table)
    return table


def update_table(
    db: Session,
    table_id: int,
    number: Optional[int] = None,
    customer_name: Optional[str] = None,
    customer_phone: Optional[str] = None,
) -> Mesa:
    """Edit table details. Status is never set here; it follows the orders."""
    table = _get_table_or_404(db, table_id)
    if number is not None and number != table.number:
        if number < 1:
            raise LifecycleError("Número da mesa deve ser maior que 0")
        if table_crud.get_table_by_number(db, table.seller_id, number):
            raise DuplicateTableNumber()
        table.number = number
        # orders carry a copy of the number
        for order in order_crud.orders_for_table(db, table.id):
            order.table_number = number
    if customer_name is not None:
        table.customer_name = customer_name
    if customer_phone is not None:
        table.customer_phone = customer_phone
    db.commit()
    db.refresh(table)
    return table


def delete_table(db: Session, table_id: int) -> None:
    table = _get_table_or_404(db, table_id)
    if order_crud.count_active_for_table(db, table_id):
        raise TableInUse()
    db.delete(table)
    db.commit()
    logger.info("table %s (number=%s) deleted by seller %s", table_id, table.number, table.seller_id)
