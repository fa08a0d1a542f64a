import uuid

from sqlalchemy import Column, DateTime, String, Text, func

from pdv_api.core.database import Base


class RecoveryToken(Base):
    __tablename__ = "password_recovery_tokens"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), nullable=False, index=True)
    email = Column(String, nullable=False)
    # Só o sha256 do token é persistido.
    token_hash = Column(String(64), nullable=False, unique=True, index=True)
    redirect_to = Column(Text, nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    used_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
