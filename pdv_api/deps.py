# pdv_api/deps.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from pdv_api.core.database import get_db
from pdv_api.core.request_context import set_request_context
from pdv_api.models.profile import Profile
from pdv_api.models.user_role import Role, UserRole
from pdv_api.services.auth import Identity, identity_from_token

bearer_scheme = HTTPBearer(auto_error=False)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Member:
    """Usuário autenticado já resolvido para o seu tenant e papel."""

    id: str
    tenant_id: str
    role: Role
    name: str | None = None
    email: str | None = None


def identity_from_request(request: Request) -> Identity | None:
    """Lê o bearer token do header Authorization; None quando ausente ou inválido."""
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    try:
        return identity_from_token(token.strip())
    except ValueError:
        return None


def get_current_identity(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> Identity:
    """Valida o JWT e devolve a identidade do usuário."""
    if credentials is None or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Não autorizado",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        identity = identity_from_token(credentials.credentials)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token inválido ou expirado",
            headers={"WWW-Authenticate": "Bearer"},
        )

    request.state.user = identity
    set_request_context(user_id=identity.id)
    return identity


def get_current_member(
    request: Request,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
) -> Member:
    profile = db.query(Profile).filter(Profile.id == identity.id).first()
    if profile is None or not profile.tenant_id:
        logger.warning("Access denied (no_tenant): user_id=%s endpoint=%s", identity.id, request.url.path)
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Tenant não encontrado")

    user_role = db.query(UserRole).filter(UserRole.user_id == identity.id).first()
    role = Role.parse(user_role.role if user_role else None)
    if user_role is not None and user_role.tenant_id and user_role.tenant_id != profile.tenant_id:
        logger.warning(
            "Access denied (tenant_mismatch): user_id=%s profile_tenant=%s role_tenant=%s",
            identity.id,
            profile.tenant_id,
            user_role.tenant_id,
        )
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Tenant não autorizado")

    request.state.tenant_id = profile.tenant_id
    set_request_context(tenant_id=profile.tenant_id)
    return Member(
        id=identity.id,
        tenant_id=profile.tenant_id,
        role=role,
        name=profile.name,
        email=profile.email,
    )


def require_role(roles: Iterable[Role]):
    allowed = set(roles)

    def _dependency(
        request: Request,
        member: Member = Depends(get_current_member),
    ) -> Member:
        if member.role not in allowed:
            logger.warning(
                "Access denied (role_denied): user_id=%s user_role=%s tenant_id=%s endpoint=%s %s",
                member.id,
                member.role.value,
                member.tenant_id,
                request.method,
                request.url.path,
            )
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Permissão insuficiente")
        return member

    return _dependency
