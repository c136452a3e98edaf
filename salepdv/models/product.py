from sqlalchemy import Column, Integer, String, Boolean, Text, DateTime, Numeric, ForeignKey
from sqlalchemy.sql import func
from salepdv.db.session import Base


class Produto(Base):
    __tablename__ = "produtos"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    price = Column(Numeric(10, 2), nullable=False, default=0)
    stock = Column(Integer, nullable=True)
    category = Column(String(100), nullable=True)
    description = Column(Text, nullable=True)
    image = Column(String(500), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    # each cart has its own menu
    seller_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    seller_name = Column(String(255), nullable=True)
    criado_em = Column(DateTime(timezone=True), server_default=func.now())
