from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from pdv_api.core.config import PUBLIC_APP_URL
from pdv_api.models.profile import Profile
from pdv_api.models.tenant import Tenant
from pdv_api.services.recovery_links import generate_recovery_link

logger = logging.getLogger(__name__)

PASSWORD_RESET_PREFIX = "[PASSWORD_RESET]"
MIN_NAME_LENGTH = 2
GENERIC_SUCCESS_MESSAGE = "Se o usuário existir, um email de recuperação será enviado."
ADMIN_NOTIFIED_MESSAGE = "Link de recuperação será enviado para o email do administrador."


class PasswordResetError(Exception):
    """Falha que deve chegar ao cliente como erro (status + mensagem)."""

    def __init__(self, status_code: int, detail: str):
        super().__init__(detail)
        self.status_code = status_code
        self.detail = detail


@dataclass
class PasswordResetResult:
    message: str
    admin_notified: bool = False
    admin_email: str | None = None
    user_name: str | None = None
    action_link: str | None = None

    def to_payload(self) -> dict:
        payload = {"success": True, "message": self.message}
        if self.admin_notified:
            payload.update(
                {
                    "adminNotified": True,
                    "adminEmail": self.admin_email,
                    "userName": self.user_name,
                    "actionLink": self.action_link,
                }
            )
        return payload


def default_redirect_url() -> str:
    return f"{PUBLIC_APP_URL}/reset-password"


def validate_display_name(name: object) -> str:
    if not isinstance(name, str) or len(name.strip()) < MIN_NAME_LENGTH:
        raise PasswordResetError(400, "Nome é obrigatório e deve ter pelo menos 2 caracteres")
    return name.strip()


def _find_profile_by_name(db: Session, name: str) -> Profile | None:
    try:
        return (
            db.query(Profile)
            .filter(func.lower(Profile.name) == name.lower())
            .order_by(Profile.created_at.asc())
            .first()
        )
    except SQLAlchemyError as exc:
        logger.exception("%s profile lookup failed", PASSWORD_RESET_PREFIX)
        raise PasswordResetError(500, "Erro ao buscar usuário") from exc


def _resolve_admin_email(db: Session, profile: Profile) -> str:
    try:
        tenant = db.query(Tenant).filter(Tenant.id == profile.tenant_id).first()
    except SQLAlchemyError as exc:
        logger.exception("%s tenant lookup failed", PASSWORD_RESET_PREFIX)
        raise PasswordResetError(500, "Erro ao buscar informações do tenant") from exc
    if tenant is None:
        logger.error("%s tenant not found tenant_id=%s", PASSWORD_RESET_PREFIX, profile.tenant_id)
        raise PasswordResetError(500, "Erro ao buscar informações do tenant")

    try:
        admin_profile = db.query(Profile).filter(Profile.id == tenant.owner_id).first()
    except SQLAlchemyError as exc:
        logger.exception("%s admin lookup failed", PASSWORD_RESET_PREFIX)
        raise PasswordResetError(500, "Erro ao buscar email do administrador") from exc
    if admin_profile is None or not admin_profile.email:
        logger.error("%s admin email missing tenant_id=%s", PASSWORD_RESET_PREFIX, tenant.id)
        raise PasswordResetError(500, "Erro ao buscar email do administrador")

    return admin_profile.email


def request_password_reset(db: Session, name: object, redirect_url: str | None = None) -> PasswordResetResult:
    """Gera o link de recuperação do usuário e indica o email do admin que deve recebê-lo.

    Usuário inexistente (ou sem email) recebe a mesma resposta de sucesso genérica.
    """
    display_name = validate_display_name(name)
    logger.info("%s requested name=%s", PASSWORD_RESET_PREFIX, display_name)

    profile = _find_profile_by_name(db, display_name)
    if profile is None:
        logger.info("%s no user found name=%s", PASSWORD_RESET_PREFIX, display_name)
        return PasswordResetResult(message=GENERIC_SUCCESS_MESSAGE)

    admin_email = _resolve_admin_email(db, profile)

    if not profile.email:
        logger.error("%s no email for user_id=%s", PASSWORD_RESET_PREFIX, profile.id)
        return PasswordResetResult(message=GENERIC_SUCCESS_MESSAGE)

    try:
        action_link = generate_recovery_link(
            db,
            user_id=profile.id,
            email=profile.email,
            redirect_to=redirect_url or default_redirect_url(),
        )
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("%s generate link failed user_id=%s", PASSWORD_RESET_PREFIX, profile.id)
        raise PasswordResetError(500, "Erro ao gerar link de recuperação") from exc

    logger.info(
        "%s link generated user_id=%s notify_admin=%s link=%s",
        PASSWORD_RESET_PREFIX,
        profile.id,
        admin_email,
        action_link,
    )
    return PasswordResetResult(
        message=ADMIN_NOTIFIED_MESSAGE,
        admin_notified=True,
        admin_email=admin_email,
        user_name=profile.name,
        action_link=action_link,
    )
