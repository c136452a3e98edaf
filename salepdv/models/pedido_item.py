from sqlalchemy import Column, Integer, ForeignKey, String, Numeric, Text
from salepdv.db.session import Base


class PedidoItem(Base):
    __tablename__ = 'pedido_items'

    id = Column(Integer, primary_key=True, index=True)
    pedido_id = Column(Integer, ForeignKey('pedidos.id'), nullable=False, index=True)
    # keeps the submitted item order stable across reads
    position = Column(Integer, nullable=False, default=0)
    product_id = Column(Integer, nullable=True)
    product_name = Column(String(255), nullable=False)
    # price snapshot at the moment the item was placed
    price = Column(Numeric(12, 2), nullable=False, default=0)
    quantity = Column(Integer, nullable=False, default=1)
    notes = Column(Text, nullable=True)  # ex.: "sem gelo", "bem passado"

    @property
    def line_total(self):
        return self.price * self.quantity
