import enum
import uuid

from sqlalchemy import Column, ForeignKey, String

from pdv_api.core.database import Base


class Role(str, enum.Enum):
    ADMIN = "admin"
    MANAGER = "manager"
    SELLER = "seller"

    @property
    def is_privileged(self) -> bool:
        return self in {Role.ADMIN, Role.MANAGER}

    @classmethod
    def parse(cls, value: str | None) -> "Role":
        normalized = (value or "").strip().lower()
        try:
            return cls(normalized)
        except ValueError:
            return cls.SELLER


class UserRole(Base):
    __tablename__ = "user_roles"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), nullable=False, unique=True, index=True)
    role = Column(String(20), nullable=False, default=Role.SELLER.value)  # admin | manager | seller
    tenant_id = Column(String(36), ForeignKey("tenants.id"), nullable=True, index=True)
