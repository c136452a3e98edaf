from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session
from typing import List
import logging

from salepdv.db.session import get_db
from salepdv.crud import order_crud, user_crud
from salepdv.models.user import User as UserModel, RoleEnum
from salepdv.schemas.pedido import PedidoRead
from salepdv.schemas.user import (
    PasswordReset,
    SellerRead,
    UserCreate,
    UserFind,
    UserLookupRead,
    UserRead,
    UserUpdate,
)
from salepdv.services import auth as auth_service
from salepdv.services.access import authorize, enforce
from salepdv.services.auth import get_current_user
from salepdv.services.order_status import ADMIN, role_value

router = APIRouter(prefix="/users", tags=["Users"])

logger = logging.getLogger(__name__)


def _get_user_or_404(db: Session, user_id: int) -> UserModel:
    user = user_crud.get_user(db, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="Usuário não encontrado")
    return user


def _check_username(db: Session, username: str, user_id=None) -> str:
    username = username.strip()
    if any(c.isupper() for c in username):
        raise HTTPException(status_code=400, detail="Nome de usuário não pode conter letras maiúsculas")
    existing = user_crud.get_user_by_username(db, username)
    if existing and existing.id != user_id:
        raise HTTPException(status_code=400, detail="Nome de usuário já em uso")
    return username


@router.get("", response_model=List[UserRead])
@router.get("/", response_model=List[UserRead], include_in_schema=False)
def list_users(limit: int = 200, db: Session = Depends(get_db), current_user=Depends(get_current_user)):
    """Customers registered against the requesting cart."""
    enforce(authorize(current_user, "users.manage"))
    return user_crud.list_users(db, seller_id=current_user.id, limit=max(1, min(limit, 500)))


@router.post("", response_model=UserRead, status_code=status.HTTP_201_CREATED)
@router.post("/", response_model=UserRead, status_code=status.HTTP_201_CREATED, include_in_schema=False)
def create_user(user_in: UserCreate, db: Session = Depends(get_db), current_user=Depends(get_current_user)):
    """Register a customer on behalf of the requesting cart.

    The new user is always a client bound to the cart; ``seller_id`` and
    ``table_id`` from the payload are not used. Carts sign up through
    ``/auth/register``.
    """
    enforce(authorize(current_user, "users.manage"))
    if user_in.papel != RoleEnum.client.value:
        raise HTTPException(status_code=400, detail="Apenas clientes podem ser cadastrados por um carrinho")
    username = _check_username(db, user_in.username)

    user = UserModel(
        username=username,
        name=user_in.name,
        phone=user_in.phone,
        senha_hash=auth_service.get_password_hash(user_in.password),
        papel=RoleEnum.client,
        seller_id=current_user.id,
        seller_name=current_user.display_name,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("seller %s created user id=%s", current_user.id, user.id)
    return user


@router.get("/sellers", response_model=List[SellerRead])
def list_sellers(db: Session = Depends(get_db)):
    # public: the registration screen lists carts to pick from
    return user_crud.list_sellers(db)


@router.post("/find", response_model=UserLookupRead)
def find_user(payload: UserFind, db: Session = Depends(get_db)):
    # public: first step of password recovery
    user = user_crud.find_user(db, payload.identifier)
    if not user:
        raise HTTPException(status_code=404, detail="Usuário não encontrado")
    return user


@router.patch("/{user_id}/password")
def reset_password(user_id: int, payload: PasswordReset, db: Session = Depends(get_db)):
    """Set a new password for a user who proves the phone number on file."""
    user = _get_user_or_404(db, user_id)
    if not user.phone or user.phone.strip() != payload.phone.strip():
        raise HTTPException(status_code=403, detail="Telefone não confere com o cadastro")
    user.senha_hash = auth_service.get_password_hash(payload.password)
    db.commit()
    logger.info("password reset for user id=%s", user.id)
    return {"message": "Senha atualizada com sucesso"}


@router.put("/{user_id}", response_model=UserRead)
def update_user(
    user_id: int,
    user_in: UserUpdate,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    target = _get_user_or_404(db, user_id)
    enforce(authorize(current_user, "users.manage", target))

    if user_in.username is not None:
        target.username = _check_username(db, user_in.username, user_id=target.id)
    if user_in.name is not None:
        target.name = user_in.name
    if user_in.phone is not None:
        target.phone = user_in.phone
    if user_in.password:
        target.senha_hash = auth_service.get_password_hash(user_in.password)
    db.commit()
    db.refresh(target)
    return target


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(user_id: int, db: Session = Depends(get_db), current_user=Depends(get_current_user)):
    """Delete a user. Admins delete their customers, anyone may delete themself.

    A cart that still has tables, products, orders or customers cannot be deleted.
    """
    target = _get_user_or_404(db, user_id)
    enforce(authorize(current_user, "user.delete", target))
    if target.papel == RoleEnum.admin and user_crud.seller_has_dependents(db, target.id):
        raise HTTPException(status_code=409, detail="Carrinho ainda possui mesas, produtos, pedidos ou clientes")

    requester_id = current_user.id
    detached = user_crud.detach_orders(db, target.id)
    db.delete(target)
    db.commit()
    logger.info("user id=%s deleted by %s (orders detached=%s)", user_id, requester_id, detached)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{user_id}/orders", response_model=List[PedidoRead])
def user_orders(user_id: int, db: Session = Depends(get_db), current_user=Depends(get_current_user)):
    target = _get_user_or_404(db, user_id)
    enforce(authorize(current_user, "orders.history", target))
    if role_value(current_user.papel) == ADMIN:
        # a cart owner only sees what the customer ordered from this cart
        return order_crud.list_orders(db, seller_id=current_user.id, user_id=user_id)
    return order_crud.list_orders(db, user_id=user_id)
