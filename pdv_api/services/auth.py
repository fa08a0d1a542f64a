from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import jwt

from pdv_api.core.config import (
    AUTH_JWT_ALGORITHM,
    AUTH_JWT_AUDIENCE,
    AUTH_JWT_EXPIRE_MINUTES,
    AUTH_JWT_SECRET,
)


@dataclass(frozen=True)
class Identity:
    """Usuário autenticado, como o provedor de identidade o descreve no JWT."""

    id: str
    email: str | None = None
    user_metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def display_name(self) -> str | None:
        name = self.user_metadata.get("name")
        if isinstance(name, str) and name.strip():
            return name.strip()
        return None

    @property
    def company_name(self) -> str | None:
        company = self.user_metadata.get("company_name")
        if isinstance(company, str) and company.strip():
            return company.strip()
        return None


# =========================
# JWT HELPERS
# =========================
def create_access_token(
    user_id: str,
    email: str | None = None,
    user_metadata: Optional[Dict[str, Any]] = None,
    extra: Optional[Dict[str, Any]] = None,
    expires_minutes: int = AUTH_JWT_EXPIRE_MINUTES,
) -> str:
    """
    Emite um token no mesmo formato do provedor de identidade.
    "sub" precisa ser STRING (senão dá 'Subject must be a string').
    """
    now = datetime.now(timezone.utc)
    exp = now + timedelta(minutes=expires_minutes)

    payload: Dict[str, Any] = {
        "sub": str(user_id),
        "email": email,
        "user_metadata": user_metadata or {},
        "role": "authenticated",
        "iat": int(now.timestamp()),
        "exp": int(exp.timestamp()),
    }
    if AUTH_JWT_AUDIENCE:
        payload["aud"] = AUTH_JWT_AUDIENCE
    if extra:
        payload.update(extra)

    return jwt.encode(payload, AUTH_JWT_SECRET, algorithm=AUTH_JWT_ALGORITHM)


def decode_access_token(token: str) -> Dict[str, Any]:
    """
    Retorna o payload do JWT ou levanta ValueError se inválido.
    """
    try:
        return jwt.decode(
            token,
            AUTH_JWT_SECRET,
            algorithms=[AUTH_JWT_ALGORITHM],
            audience=AUTH_JWT_AUDIENCE,
            options={"verify_aud": bool(AUTH_JWT_AUDIENCE)},
        )
    except Exception as e:
        raise ValueError("Token inválido ou expirado") from e


def identity_from_token(token: str) -> Identity:
    payload = decode_access_token(token)
    subject = payload.get("sub")
    if not isinstance(subject, str) or not subject.strip():
        raise ValueError("Token inválido (sem sub)")

    metadata = payload.get("user_metadata")
    email = payload.get("email")
    return Identity(
        id=subject.strip(),
        email=email if isinstance(email, str) and email else None,
        user_metadata=metadata if isinstance(metadata, dict) else {},
    )
