from sqlalchemy import Column, Integer, String, DateTime, Enum, Boolean, ForeignKey
from sqlalchemy.sql import func
from salepdv.db.session import Base
import enum


class RoleEnum(str, enum.Enum):
    admin = "admin"  # dono do carrinho
    client = "client"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(150), unique=True, index=True, nullable=False)
    name = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    senha_hash = Column(String(255), nullable=False)
    papel = Column(Enum(RoleEnum), nullable=False, default=RoleEnum.client, server_default=RoleEnum.client.value)
    # client binding: which cart's menu and which table this client orders against
    seller_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    seller_name = Column(String(255), nullable=True)
    # plain column: tables reference users, so no FK back to avoid a cycle
    table_id = Column(Integer, nullable=True)
    table_number = Column(Integer, nullable=True)
    # seller display settings ('mesa' or 'guarda-sol')
    table_naming = Column(String(20), nullable=False, default="mesa", server_default="mesa")
    show_order_status = Column(Boolean, nullable=False, default=True)
    criado_em = Column(DateTime(timezone=True), server_default=func.now())

    @property
    def role(self) -> str:
        return self.papel.value if hasattr(self.papel, "value") else str(self.papel)

    @property
    def display_name(self) -> str:
        return self.name or self.username
