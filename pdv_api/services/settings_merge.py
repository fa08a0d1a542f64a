from __future__ import annotations

from typing import Any

from pdv_api.schemas.company_settings import (
    CompanySettingsPartial,
    EffectiveCompanySettings,
    LocalCompanySettings,
)

# Texto vazio na nuvem conta como ausente.
TEXT_FIELDS = (
    "name",
    "cnpj",
    "address",
    "phone",
    "phone2",
    "email",
    "logo_url",
    "login_header_color",
)

# Flags e números: só None conta como ausente (False/0 explícitos prevalecem).
VALUE_FIELDS = (
    "uses_stock",
    "low_stock_threshold",
    "print_logo_on_receipts",
    "auto_print_on_sale",
    "notify_low_stock",
    "notify_new_sales",
    "notify_pending_payments",
    "notify_order_status",
    "uses_commission",
    "commission_percentage",
)

_DEFAULTS = EffectiveCompanySettings()


def _first_truthy(*values: Any) -> Any:
    for value in values:
        if value:
            return value
    return None


def _first_present(*values: Any) -> Any:
    for value in values:
        if value is not None:
            return value
    return None


def merge_company_settings(
    cloud: CompanySettingsPartial | None,
    local: LocalCompanySettings | None = None,
) -> EffectiveCompanySettings:
    """Resolve campo a campo: nuvem, depois cópia local, depois padrão. Tema vem só da cópia local."""
    local = local or LocalCompanySettings()
    merged: dict[str, Any] = {}

    if cloud is None:
        sources: tuple[CompanySettingsPartial, ...] = (local,)
        merged["id"] = local.id
    else:
        sources = (cloud, local)
        merged["id"] = cloud.id

    for field in TEXT_FIELDS:
        value = _first_truthy(*(getattr(source, field) for source in sources))
        merged[field] = value if value is not None else getattr(_DEFAULTS, field)

    for field in VALUE_FIELDS:
        value = _first_present(*(getattr(source, field) for source in sources))
        merged[field] = value if value is not None else getattr(_DEFAULTS, field)

    merged["theme"] = local.theme or _DEFAULTS.theme
    return EffectiveCompanySettings(**merged)
