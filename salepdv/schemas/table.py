from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional, Tuple
from datetime import datetime


class TableCreate(BaseModel):
    number: int = Field(ge=1)


class TableBulkCreate(BaseModel):
    # validated by the occupancy service so a zero quantity maps to its own error
    quantity: int


class TableUpdate(BaseModel):
    number: Optional[int] = Field(default=None, ge=1)
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None


class TableRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    number: int
    status: str
    seller_id: int
    seller_name: Optional[str] = None
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    occupied_at: Optional[datetime] = None


class AvailableTablesRead(BaseModel):
    tables: List[TableRead] = []
    table_naming: str = "mesa"
    show_order_status: bool = True


class ReleaseResultRead(BaseModel):
    table: TableRead
    archived: List[int] = []
    failed: List[Tuple[int, str]] = []
    partial: bool = False
