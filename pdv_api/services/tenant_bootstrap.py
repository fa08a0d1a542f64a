from __future__ import annotations

import logging
import re
import unicodedata

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from pdv_api.models.profile import Profile
from pdv_api.models.tenant import Tenant
from pdv_api.models.user_role import Role, UserRole
from pdv_api.services.auth import Identity

logger = logging.getLogger(__name__)

ENSURE_USER_PREFIX = "[ENSURE_USER]"
DEFAULT_COMPANY_NAME = "Minha Empresa"
DEFAULT_PROFILE_NAME = "Usuário"
SLUG_USER_FRAGMENT = 8


def normalize_slug(value: str) -> str:
    if not value:
        return ""

    value = unicodedata.normalize("NFKD", value)
    value = value.encode("ascii", "ignore").decode("ascii")
    value = value.lower()
    value = re.sub(r"\s+", "-", value)
    value = re.sub(r"[^a-z0-9-]", "", value)

    return value


def build_tenant_slug(company_name: str, user_id: str) -> str:
    """Slug do tenant: nome normalizado + fragmento do id do dono."""
    return f"{normalize_slug(company_name)}-{user_id[:SLUG_USER_FRAGMENT]}"


def _available_slug(db: Session, company_name: str, user_id: str) -> str:
    slug = build_tenant_slug(company_name, user_id)
    if db.query(Tenant.id).filter(Tenant.slug == slug).first() is None:
        return slug
    # fragmento do id já usado por outro dono com o mesmo nome
    logger.warning("%s slug taken slug=%s user_id=%s", ENSURE_USER_PREFIX, slug, user_id)
    return f"{normalize_slug(company_name)}-{user_id}"


def _resolve_tenant_id(db: Session, identity: Identity, profile: Profile | None) -> str:
    if profile is not None and profile.tenant_id:
        return profile.tenant_id

    owned = db.query(Tenant).filter(Tenant.owner_id == identity.id).first()
    if owned is not None:
        logger.info("%s adopting owned tenant user_id=%s tenant_id=%s", ENSURE_USER_PREFIX, identity.id, owned.id)
        return owned.id

    company_name = identity.company_name or DEFAULT_COMPANY_NAME
    tenant = Tenant(
        name=company_name,
        slug=_available_slug(db, company_name, identity.id),
        owner_id=identity.id,
    )
    db.add(tenant)
    db.commit()
    db.refresh(tenant)
    logger.info(
        "%s tenant created user_id=%s tenant_id=%s slug=%s",
        ENSURE_USER_PREFIX,
        identity.id,
        tenant.id,
        tenant.slug,
    )
    return tenant.id


def _ensure_profile(db: Session, identity: Identity, profile: Profile | None, tenant_id: str) -> None:
    if profile is None:
        db.add(
            Profile(
                id=identity.id,
                name=identity.display_name or identity.email or DEFAULT_PROFILE_NAME,
                email=identity.email,
                tenant_id=tenant_id,
            )
        )
        db.commit()
        logger.info("%s profile created user_id=%s", ENSURE_USER_PREFIX, identity.id)
        return

    if not profile.tenant_id:
        profile.tenant_id = tenant_id
        db.commit()
        logger.info("%s profile tenant backfilled user_id=%s", ENSURE_USER_PREFIX, identity.id)


def _ensure_role(db: Session, identity: Identity, tenant_id: str) -> None:
    existing = db.query(UserRole).filter(UserRole.user_id == identity.id).first()
    if existing is None:
        tenant = db.query(Tenant).filter(Tenant.id == tenant_id).first()
        is_owner = tenant is not None and tenant.owner_id == identity.id
        role = Role.ADMIN if is_owner else Role.SELLER
        db.add(UserRole(user_id=identity.id, role=role.value, tenant_id=tenant_id))
        db.commit()
        logger.info("%s role created user_id=%s role=%s", ENSURE_USER_PREFIX, identity.id, role.value)
        return

    if not existing.tenant_id:
        existing.tenant_id = tenant_id
        db.commit()
        logger.info("%s role tenant backfilled user_id=%s", ENSURE_USER_PREFIX, identity.id)


def _sync_profile_contact(db: Session, identity: Identity) -> None:
    try:
        profile = db.query(Profile).filter(Profile.id == identity.id).first()
        if profile is None:
            return
        changed = False
        if profile.email != identity.email:
            profile.email = identity.email
            changed = True
        if identity.display_name and profile.name != identity.display_name:
            profile.name = identity.display_name
            changed = True
        if changed:
            db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.warning("%s profile sync failed user_id=%s", ENSURE_USER_PREFIX, identity.id, exc_info=True)


def ensure_user(db: Session, identity: Identity) -> str:
    """Garante perfil, tenant e papel do usuário autenticado. Retorna o tenant_id.

    Cada etapa confere o estado antes de agir e grava sozinha; uma falha no meio
    deixa o banco num estado que a próxima chamada completa.
    """
    profile = db.query(Profile).filter(Profile.id == identity.id).first()

    tenant_id = _resolve_tenant_id(db, identity, profile)
    _ensure_profile(db, identity, profile, tenant_id)
    _ensure_role(db, identity, tenant_id)
    _sync_profile_contact(db, identity)

    return tenant_id
