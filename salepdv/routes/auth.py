from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
import logging

from salepdv.schemas.user import UserCreate, UserRead, Token, LoginRequest, SellerSettingsUpdate
from salepdv.services import auth as auth_service
from salepdv.services import occupancy
from salepdv.db.session import get_db
from salepdv.models.user import User as UserModel, RoleEnum
from salepdv.crud import table_crud, user_crud
from salepdv.services.order_status import TABLE_AVAILABLE

router = APIRouter(prefix="/auth", tags=["Auth"])

logger = logging.getLogger(__name__)


@router.post("/register", response_model=UserRead, status_code=status.HTTP_201_CREATED)
def register(user_in: UserCreate, db: Session = Depends(get_db)):
    username = user_in.username.strip()
    if any(c.isupper() for c in username):
        raise HTTPException(status_code=400, detail="Nome de usuário não pode conter letras maiúsculas")
    if user_crud.get_user_by_username(db, username):
        raise HTTPException(status_code=400, detail="Nome de usuário já em uso")

    user = UserModel(
        username=username,
        name=user_in.name,
        phone=user_in.phone,
        senha_hash=auth_service.get_password_hash(user_in.password),
        papel=RoleEnum(user_in.papel),
    )

    table = None
    if user.papel == RoleEnum.client and user_in.seller_id is not None:
        seller = user_crud.get_seller(db, user_in.seller_id)
        if seller is None:
            raise HTTPException(status_code=404, detail="Carrinho não encontrado")
        user.seller_id = seller.id
        user.seller_name = seller.display_name
        if user_in.table_id is not None:
            table = table_crud.get_table(db, user_in.table_id)
            if table is None or table.seller_id != seller.id:
                raise HTTPException(status_code=404, detail="Mesa não encontrada")
            if table.status != TABLE_AVAILABLE:
                raise HTTPException(status_code=409, detail="Mesa já ocupada")
            user.table_id = table.id
            user.table_number = table.number

    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("registered user id=%s papel=%s seller=%s", user.id, user.role, user.seller_id)

    if table is not None:
        occupancy.occupy_table(db, table.id, customer_name=user.display_name, customer_phone=user.phone)
        db.refresh(user)
    return user


@router.post("/login", response_model=Token)
def login(form_data: LoginRequest, db: Session = Depends(get_db)):
    user = auth_service.authenticate_user(db, form_data.username, form_data.password)
    if not user:
        raise HTTPException(status_code=400, detail="Usuário ou senha incorretos")
    access_token = auth_service.create_access_token(user)
    return {"access_token": access_token, "token_type": "bearer", "user": user}


@router.get("/me", response_model=UserRead)
def read_users_me(current_user=Depends(auth_service.get_current_user)):
    return current_user


@router.patch("/me/settings", response_model=UserRead)
def update_my_settings(
    payload: SellerSettingsUpdate,
    db: Session = Depends(get_db),
    current_user=Depends(auth_service.require_roles("admin")),
):
    """Display settings shown to customers of this cart (table label, status visibility)."""
    if payload.table_naming is not None:
        current_user.table_naming = payload.table_naming
    if payload.show_order_status is not None:
        current_user.show_order_status = payload.show_order_status
    db.commit()
    db.refresh(current_user)
    return current_user
