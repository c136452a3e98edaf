from fastapi import APIRouter, Depends, HTTPException, Response, status
import logging
from typing import List, Optional
from sqlalchemy.orm import Session

from salepdv.db.session import get_db
from salepdv.crud import product_crud
from salepdv.models.product import Produto as ProdutoModel
from salepdv.schemas.product import ProdutoCreate, ProdutoRead, ProdutoUpdate
from salepdv.services.access import authorize, enforce, resolve_seller
from salepdv.services.auth import get_current_user, require_roles

router = APIRouter(prefix="/products", tags=["Products"])

logger = logging.getLogger(__name__)


def _scoped_seller(current_user, sellerId: Optional[int]):
    # only users not yet bound to a cart may pick one with sellerId
    return resolve_seller(current_user, sellerId)


def _owned_product(db: Session, product_id: int, current_user) -> ProdutoModel:
    p = product_crud.get_product(db, product_id)
    if not p:
        raise HTTPException(status_code=404, detail="Produto não encontrado")
    enforce(authorize(current_user, "product.manage", p))
    return p


@router.get("", response_model=List[ProdutoRead])
@router.get("/", response_model=List[ProdutoRead], include_in_schema=False)
def list_products(sellerId: Optional[int] = None, db: Session = Depends(get_db), current_user=Depends(get_current_user)):
    seller_id = _scoped_seller(current_user, sellerId)
    if seller_id is None:
        return []
    return product_crud.list_products(db, seller_id=seller_id)


@router.get("/active", response_model=List[ProdutoRead])
def list_active_products(sellerId: Optional[int] = None, db: Session = Depends(get_db), current_user=Depends(get_current_user)):
    seller_id = _scoped_seller(current_user, sellerId)
    if seller_id is None:
        return []
    return product_crud.list_products(db, seller_id=seller_id, only_active=True)


@router.get("/{product_id}", response_model=ProdutoRead)
def get_product(product_id: int, db: Session = Depends(get_db), current_user=Depends(get_current_user)):
    p = product_crud.get_product(db, product_id)
    if not p:
        raise HTTPException(status_code=404, detail="Produto não encontrado")
    return p


@router.post("", response_model=ProdutoRead, status_code=status.HTTP_201_CREATED)
@router.post("/", response_model=ProdutoRead, status_code=status.HTTP_201_CREATED, include_in_schema=False)
def create_product(payload: ProdutoCreate, db: Session = Depends(get_db), current_user=Depends(require_roles("admin"))):
    p = ProdutoModel(
        **payload.model_dump(),
        seller_id=current_user.id,
        seller_name=current_user.display_name,
    )
    db.add(p)
    db.commit()
    db.refresh(p)
    logger.info("created product id=%s seller=%s category=%r", p.id, p.seller_id, p.category)
    return p


@router.put("/{product_id}", response_model=ProdutoRead)
def update_product(product_id: int, payload: ProdutoUpdate, db: Session = Depends(get_db), current_user=Depends(require_roles("admin"))):
    p = _owned_product(db, product_id, current_user)
    for key, value in payload.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(p, key, value)
    db.commit()
    db.refresh(p)
    return p


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_product(product_id: int, db: Session = Depends(get_db), current_user=Depends(require_roles("admin"))):
    p = _owned_product(db, product_id, current_user)
    # order items keep their own name/price snapshot, so history survives the delete
    db.delete(p)
    db.commit()
    logger.info("deleted product id=%s seller=%s", product_id, current_user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
