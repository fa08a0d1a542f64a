from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from pdv_api.core.database import get_db
from pdv_api.deps import Member, get_current_member, require_role
from pdv_api.models.company_settings import CompanySettings
from pdv_api.models.user_role import Role
from pdv_api.schemas.company_settings import (
    CompanySettingsPartial,
    CompanySettingsUpdate,
    EffectiveSettingsResponse,
    LocalCompanySettings,
)
from pdv_api.services.settings_merge import merge_company_settings

router = APIRouter(prefix="/api/company-settings", tags=["company-settings"])

logger = logging.getLogger(__name__)


def _get_cloud_settings(db: Session, tenant_id: str) -> CompanySettings | None:
    return db.query(CompanySettings).filter(CompanySettings.tenant_id == tenant_id).first()


@router.get("", response_model=Optional[CompanySettingsPartial])
def get_company_settings(
    member: Member = Depends(get_current_member),
    db: Session = Depends(get_db),
):
    row = _get_cloud_settings(db, member.tenant_id)
    if row is None:
        return None
    return CompanySettingsPartial.model_validate(row)


@router.put("", response_model=CompanySettingsPartial)
def update_company_settings(
    payload: CompanySettingsUpdate,
    member: Member = Depends(require_role([Role.ADMIN, Role.MANAGER])),
    db: Session = Depends(get_db),
):
    changes = payload.model_dump(exclude_unset=True, exclude={"id"})

    row = _get_cloud_settings(db, member.tenant_id)
    if row is None:
        row = CompanySettings(tenant_id=member.tenant_id)
        db.add(row)

    for field, value in changes.items():
        setattr(row, field, value)

    db.commit()
    db.refresh(row)
    logger.info(
        "[COMPANY_SETTINGS] updated tenant_id=%s fields=%s",
        member.tenant_id,
        ",".join(sorted(changes)),
    )
    return CompanySettingsPartial.model_validate(row)


@router.post("/effective", response_model=EffectiveSettingsResponse)
def get_effective_settings(
    local: Optional[LocalCompanySettings] = None,
    member: Member = Depends(get_current_member),
    db: Session = Depends(get_db),
):
    row = _get_cloud_settings(db, member.tenant_id)
    cloud = CompanySettingsPartial.model_validate(row) if row else None
    return EffectiveSettingsResponse(
        settings=merge_company_settings(cloud, local),
        is_cloud_connected=row is not None,
    )
