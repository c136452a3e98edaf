from fastapi import APIRouter, Depends, HTTPException, Response, status
from typing import List
from sqlalchemy.orm import Session

from salepdv.db.session import get_db
from salepdv.crud import table_crud, user_crud
from salepdv.schemas.table import (
    AvailableTablesRead,
    ReleaseResultRead,
    TableBulkCreate,
    TableCreate,
    TableRead,
    TableUpdate,
)
from salepdv.services import occupancy
from salepdv.services.access import authorize, enforce, seller_scope
from salepdv.services.auth import get_current_user, require_roles
from salepdv.services.order_status import TABLE_AVAILABLE, TABLE_OCCUPIED

router = APIRouter(prefix="/tables", tags=["Tables"])


def _owned_table(db: Session, table_id: int, current_user):
    table = table_crud.get_table(db, table_id)
    if not table:
        raise HTTPException(status_code=404, detail="Mesa não encontrada")
    enforce(authorize(current_user, "table.manage", table))
    return table


@router.get("", response_model=List[TableRead])
@router.get("/", response_model=List[TableRead], include_in_schema=False)
def list_tables(db: Session = Depends(get_db), current_user=Depends(get_current_user)):
    seller_id = seller_scope(current_user)
    if seller_id is None:
        return []
    return table_crud.list_tables(db, seller_id=seller_id)


@router.get("/available", response_model=AvailableTablesRead)
def list_available_tables(sellerId: int, db: Session = Depends(get_db)):
    """Public: free tables of one cart, used by the customer registration screen."""
    seller = user_crud.get_seller(db, sellerId)
    if not seller:
        raise HTTPException(status_code=404, detail="Carrinho não encontrado")
    return {
        "tables": table_crud.list_tables(db, seller_id=seller.id, status=TABLE_AVAILABLE),
        "table_naming": seller.table_naming or "mesa",
        "show_order_status": bool(seller.show_order_status),
    }


@router.get("/occupied", response_model=List[TableRead])
def list_occupied_tables(db: Session = Depends(get_db), current_user=Depends(require_roles("admin"))):
    return table_crud.list_tables(db, seller_id=current_user.id, status=TABLE_OCCUPIED)


@router.post("/reconcile", response_model=List[TableRead])
def reconcile_all_tables(db: Session = Depends(get_db), current_user=Depends(require_roles("admin"))):
    return occupancy.reconcile_seller_tables(db, current_user.id)


@router.post("", response_model=TableRead, status_code=status.HTTP_201_CREATED)
@router.post("/", response_model=TableRead, status_code=status.HTTP_201_CREATED, include_in_schema=False)
def create_table(payload: TableCreate, db: Session = Depends(get_db), current_user=Depends(require_roles("admin"))):
    return occupancy.create_table(db, current_user.id, payload.number, seller_name=current_user.display_name)


@router.post("/bulk", response_model=List[TableRead], status_code=status.HTTP_201_CREATED)
def create_tables_bulk(payload: TableBulkCreate, db: Session = Depends(get_db), current_user=Depends(require_roles("admin"))):
    return occupancy.create_tables(db, current_user.id, payload.quantity, seller_name=current_user.display_name)


@router.get("/{table_id}", response_model=TableRead)
def get_table(table_id: int, db: Session = Depends(get_db), current_user=Depends(get_current_user)):
    table = table_crud.get_table(db, table_id)
    if not table or table.seller_id != seller_scope(current_user):
        raise HTTPException(status_code=404, detail="Mesa não encontrada")
    return table


@router.patch("/{table_id}", response_model=TableRead)
def update_table(table_id: int, payload: TableUpdate, db: Session = Depends(get_db), current_user=Depends(require_roles("admin"))):
    _owned_table(db, table_id, current_user)
    return occupancy.update_table(
        db,
        table_id,
        number=payload.number,
        customer_name=payload.customer_name,
        customer_phone=payload.customer_phone,
    )


@router.delete("/{table_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_table(table_id: int, db: Session = Depends(get_db), current_user=Depends(require_roles("admin"))):
    _owned_table(db, table_id, current_user)
    occupancy.delete_table(db, table_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{table_id}/release", response_model=ReleaseResultRead)
def release_table(table_id: int, db: Session = Depends(get_db), current_user=Depends(require_roles("admin"))):
    """Archive the delivered orders of a table and free it for the next customer."""
    _owned_table(db, table_id, current_user)
    result = occupancy.release_table(db, table_id)
    return ReleaseResultRead(
        table=TableRead.model_validate(result.table),
        archived=result.archived,
        failed=result.failed,
        partial=result.partial,
    )


@router.post("/{table_id}/reconcile", response_model=TableRead)
def reconcile_table(table_id: int, db: Session = Depends(get_db), current_user=Depends(require_roles("admin"))):
    _owned_table(db, table_id, current_user)
    return occupancy.reconcile_table(db, table_id)
