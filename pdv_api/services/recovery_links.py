from __future__ import annotations

import hashlib
import secrets
from datetime import datetime, timedelta, timezone
from urllib.parse import urlencode

from sqlalchemy.orm import Session

from pdv_api.core.config import PUBLIC_API_URL, RECOVERY_TOKEN_TTL_MINUTES
from pdv_api.models.recovery_token import RecoveryToken
from pdv_api.services.auth import create_access_token

RECOVERY_VERIFY_PATH = "/api/auth/recovery/verify"
RECOVERY_SESSION_MINUTES = 15


class RecoveryTokenError(Exception):
    def __init__(self, status_code: int, detail: str):
        super().__init__(detail)
        self.status_code = status_code
        self.detail = detail


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    # SQLite devolve datetimes sem tzinfo; tudo é gravado em UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def generate_recovery_link(db: Session, *, user_id: str, email: str, redirect_to: str) -> str:
    """Cria um token de uso único para o email do usuário e devolve o link de verificação."""
    token = secrets.token_urlsafe(32)
    db.add(
        RecoveryToken(
            user_id=user_id,
            email=email,
            token_hash=hash_token(token),
            redirect_to=redirect_to,
            expires_at=utcnow() + timedelta(minutes=RECOVERY_TOKEN_TTL_MINUTES),
        )
    )
    db.commit()
    query = urlencode({"token": token, "type": "recovery"})
    return f"{PUBLIC_API_URL}{RECOVERY_VERIFY_PATH}?{query}"


def consume_recovery_token(db: Session, token: str) -> str:
    """Valida e inutiliza o token. Retorna a URL de redirecionamento com a sessão de recuperação."""
    record = (
        db.query(RecoveryToken)
        .filter(RecoveryToken.token_hash == hash_token(token or ""))
        .first()
    )
    if record is None:
        raise RecoveryTokenError(404, "Link de recuperação inválido")
    if record.used_at is not None:
        raise RecoveryTokenError(410, "Link de recuperação já utilizado")
    if _as_utc(record.expires_at) < utcnow():
        raise RecoveryTokenError(410, "Link de recuperação expirado")

    record.used_at = utcnow()
    db.commit()

    access_token = create_access_token(
        record.user_id,
        email=record.email,
        extra={"amr": "recovery"},
        expires_minutes=RECOVERY_SESSION_MINUTES,
    )
    fragment = urlencode({"access_token": access_token, "type": "recovery"})
    return f"{record.redirect_to}#{fragment}"
