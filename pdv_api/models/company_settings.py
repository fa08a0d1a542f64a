import uuid

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, Numeric, String, func

from pdv_api.core.database import Base


class CompanySettings(Base):
    """Cópia em nuvem das configurações da empresa.

    Todos os campos aceitam NULL: ausência na nuvem significa "usar o valor local".
    """

    __tablename__ = "company_settings"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    tenant_id = Column(String(36), ForeignKey("tenants.id"), nullable=False, unique=True, index=True)

    name = Column(String, nullable=True)
    cnpj = Column(String(32), nullable=True)
    address = Column(String, nullable=True)
    phone = Column(String(32), nullable=True)
    phone2 = Column(String(32), nullable=True)
    email = Column(String, nullable=True)
    logo_url = Column(String, nullable=True)
    login_header_color = Column(String(32), nullable=True)

    uses_stock = Column(Boolean, nullable=True)
    low_stock_threshold = Column(Integer, nullable=True)
    print_logo_on_receipts = Column(Boolean, nullable=True)
    auto_print_on_sale = Column(Boolean, nullable=True)
    notify_low_stock = Column(Boolean, nullable=True)
    notify_new_sales = Column(Boolean, nullable=True)
    notify_pending_payments = Column(Boolean, nullable=True)
    notify_order_status = Column(Boolean, nullable=True)

    uses_commission = Column(Boolean, nullable=True)
    commission_percentage = Column(Numeric(5, 2), nullable=True)

    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )
