import uuid

from sqlalchemy import Column, DateTime, String, func

from pdv_api.core.database import Base


class Tenant(Base):
    __tablename__ = "tenants"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String, nullable=False, default="Minha Empresa")
    slug = Column(String, unique=True, index=True, nullable=False)
    # Usuário que criou o tenant; sempre admin dele.
    owner_id = Column(String(36), index=True, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
