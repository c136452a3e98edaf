from pydantic import BaseModel, ConfigDict, Field
from typing import List, Literal, Optional
from datetime import datetime


class PedidoItemIn(BaseModel):
    product_id: Optional[int] = None
    product_name: Optional[str] = None
    # ignored when product_id matches a product of the cart
    price: float = Field(default=0.0, ge=0)
    quantity: int = Field(default=1, ge=1)
    notes: Optional[str] = None


class PedidoItemRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    product_id: Optional[int] = None
    product_name: str
    price: float
    quantity: int
    notes: Optional[str] = None


class PedidoCreate(BaseModel):
    table_id: int
    # admins create orders for their own cart; clients fall back to their binding
    seller_id: Optional[int] = None
    items: List[PedidoItemIn] = []
    customer_phone: Optional[str] = None
    # accepted for compatibility, always recomputed from the items
    total: Optional[float] = None


class PedidoStatusUpdate(BaseModel):
    status: str


class PedidoItemsReplace(BaseModel):
    items: List[PedidoItemIn] = []


class PedidoPaymentUpdate(BaseModel):
    is_paid: bool = True
    payment_method: Optional[Literal["dinheiro", "cartao_credito", "cartao_debito", "pix"]] = None


class PedidoRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    order_code: int
    table_id: int
    table_number: int
    status: str
    total: float
    user_id: Optional[int] = None
    user_name: Optional[str] = None
    seller_id: int
    seller_name: Optional[str] = None
    is_paid: bool = False
    payment_method: Optional[str] = None
    items: List[PedidoItemRead] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
