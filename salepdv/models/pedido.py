from sqlalchemy import Column, Integer, String, Numeric, DateTime, Boolean, ForeignKey, SmallInteger
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from salepdv.db.session import Base
from salepdv.models.pedido_item import PedidoItem  # noqa: F401  registers the items mapper


class Pedido(Base):
    __tablename__ = 'pedidos'

    id = Column(Integer, primary_key=True, index=True)
    # 4-digit display code; not unique, never used as a key
    order_code = Column(SmallInteger, nullable=False)
    # plain reference: tables can be deleted while archived orders remain for reporting
    table_id = Column(Integer, nullable=False, index=True)
    table_number = Column(Integer, nullable=False)
    status = Column(String(20), nullable=False, default='aguardando', index=True)
    total = Column(Numeric(12, 2), nullable=False, default=0)
    user_id = Column(Integer, ForeignKey('users.id'), nullable=True, index=True)
    user_name = Column(String(255), nullable=True)
    seller_id = Column(Integer, ForeignKey('users.id'), nullable=False, index=True)
    seller_name = Column(String(255), nullable=True)
    is_paid = Column(Boolean, nullable=False, default=False)
    payment_method = Column(String(20), nullable=True)  # dinheiro | cartao_credito | cartao_debito | pix
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now())

    items = relationship(
        'PedidoItem',
        backref='pedido',
        cascade='all, delete-orphan',
        lazy='selectin',
        order_by='PedidoItem.position',
    )
