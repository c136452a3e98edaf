from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime


class ProdutoCreate(BaseModel):
    name: str = Field(min_length=2)
    price: float = Field(ge=0)
    stock: Optional[int] = Field(default=None, ge=0)
    category: Optional[str] = None
    description: Optional[str] = None
    image: Optional[str] = None
    is_active: bool = True


class ProdutoUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=2)
    price: Optional[float] = Field(default=None, ge=0)
    stock: Optional[int] = Field(default=None, ge=0)
    category: Optional[str] = None
    description: Optional[str] = None
    image: Optional[str] = None
    is_active: Optional[bool] = None


class ProdutoRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    price: float
    stock: Optional[int] = None
    category: Optional[str] = None
    description: Optional[str] = None
    image: Optional[str] = None
    is_active: bool = True
    seller_id: int
    seller_name: Optional[str] = None
    criado_em: Optional[datetime] = None
