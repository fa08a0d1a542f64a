from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

Theme = Literal["light", "dark", "system"]


class CompanySettingsPartial(BaseModel):
    """Configurações como guardadas numa das fontes (nuvem ou local); qualquer campo pode faltar."""

    model_config = ConfigDict(from_attributes=True)

    id: Optional[str] = None
    name: Optional[str] = None
    cnpj: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    phone2: Optional[str] = None
    email: Optional[str] = None
    logo_url: Optional[str] = None
    login_header_color: Optional[str] = None

    uses_stock: Optional[bool] = None
    low_stock_threshold: Optional[int] = Field(default=None, ge=0)
    print_logo_on_receipts: Optional[bool] = None
    auto_print_on_sale: Optional[bool] = None
    notify_low_stock: Optional[bool] = None
    notify_new_sales: Optional[bool] = None
    notify_pending_payments: Optional[bool] = None
    notify_order_status: Optional[bool] = None

    uses_commission: Optional[bool] = None
    commission_percentage: Optional[Decimal] = Field(default=None, ge=0, le=100)


class LocalCompanySettings(CompanySettingsPartial):
    theme: Optional[Theme] = None


class CompanySettingsUpdate(CompanySettingsPartial):
    pass


class EffectiveCompanySettings(BaseModel):
    id: Optional[str] = None
    name: str = "Minha Empresa"
    cnpj: str = ""
    address: str = ""
    phone: str = ""
    phone2: str = ""
    email: str = ""
    logo_url: Optional[str] = None
    login_header_color: str = "#ffffff"

    uses_stock: bool = True
    low_stock_threshold: int = 10
    print_logo_on_receipts: bool = True
    auto_print_on_sale: bool = False
    notify_low_stock: bool = True
    notify_new_sales: bool = True
    notify_pending_payments: bool = True
    notify_order_status: bool = True

    uses_commission: bool = False
    commission_percentage: Decimal = Decimal("0")

    theme: Theme = "light"


class EffectiveSettingsResponse(BaseModel):
    settings: EffectiveCompanySettings
    is_cloud_connected: bool
