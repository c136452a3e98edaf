from pydantic import BaseModel, Field
from pydantic import ConfigDict
from typing import Literal, Optional
import datetime

from salepdv.models.user import RoleEnum


class UserCreate(BaseModel):
    username: str = Field(min_length=3)
    password: str = Field(min_length=6)
    name: Optional[str] = None
    phone: Optional[str] = None
    papel: Literal["admin", "client"] = "client"
    # a client registers against one cart and, optionally, one of its tables
    seller_id: Optional[int] = None
    table_id: Optional[int] = None


class UserRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    name: Optional[str] = None
    phone: Optional[str] = None
    papel: RoleEnum
    seller_id: Optional[int] = None
    seller_name: Optional[str] = None
    table_id: Optional[int] = None
    table_number: Optional[int] = None
    table_naming: Optional[str] = "mesa"
    show_order_status: bool = True
    criado_em: Optional[datetime.datetime] = None


class SellerRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    name: Optional[str] = None
    table_naming: Optional[str] = "mesa"


class SellerSettingsUpdate(BaseModel):
    table_naming: Optional[Literal["mesa", "guarda-sol"]] = None
    show_order_status: Optional[bool] = None


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: Optional[UserRead] = None


class LoginRequest(BaseModel):
    username: str
    password: str


class UserUpdate(BaseModel):
    username: Optional[str] = Field(default=None, min_length=3)
    name: Optional[str] = None
    phone: Optional[str] = None
    password: Optional[str] = Field(default=None, min_length=6)


class UserFind(BaseModel):
    # username or phone
    identifier: str = Field(min_length=1)


class UserLookupRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    name: Optional[str] = None


class PasswordReset(BaseModel):
    phone: str = Field(min_length=1)
    password: str = Field(min_length=6)
