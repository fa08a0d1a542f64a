import uuid

from sqlalchemy import Column, DateTime, ForeignKey, Numeric, String, func

from pdv_api.core.database import Base


class Order(Base):
    __tablename__ = "orders"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    tenant_id = Column(String(36), ForeignKey("tenants.id"), nullable=False, index=True)

    seller_id = Column(String(36), nullable=True, index=True)
    seller_name = Column(String, nullable=True)
    customer_name = Column(String, nullable=False, default="")
    amount_paid = Column(Numeric(12, 2), nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), index=True)
