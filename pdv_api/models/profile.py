from sqlalchemy import Column, DateTime, ForeignKey, String, func

from pdv_api.core.database import Base


class Profile(Base):
    __tablename__ = "profiles"

    # Mesmo id do usuário autenticado no provedor de identidade.
    id = Column(String(36), primary_key=True)
    name = Column(String, nullable=False)
    email = Column(String, nullable=True, index=True)
    tenant_id = Column(String(36), ForeignKey("tenants.id"), nullable=True, index=True)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )
