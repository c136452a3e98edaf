from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.sql import func
from salepdv.db.session import Base


class Mesa(Base):
    __tablename__ = "mesas"
    # numbering is per seller, not global
    __table_args__ = (UniqueConstraint("seller_id", "number", name="uq_mesas_seller_number"),)

    id = Column(Integer, primary_key=True, index=True)
    number = Column(Integer, nullable=False)
    status = Column(String(20), nullable=False, default="available")  # 'available' | 'occupied'
    seller_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    seller_name = Column(String(255), nullable=True)
    # snapshot of who is sitting here, shown on the table details page
    customer_name = Column(String(255), nullable=True)
    customer_phone = Column(String(50), nullable=True)
    occupied_at = Column(DateTime(timezone=True), nullable=True)
    criado_em = Column(DateTime(timezone=True), server_default=func.now())
