from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ReceivableCreate(BaseModel):
    order_id: str = Field(..., min_length=1)
    customer_id: Optional[str] = None
    customer_name: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    total_amount: Decimal = Field(..., ge=0)
    installment_number: Optional[int] = Field(default=None, ge=1)
    total_installments: Optional[int] = Field(default=None, ge=1)
    amount: Decimal = Field(..., ge=0)
    due_date: date
    notes: Optional[str] = None


class ReceivablePayment(BaseModel):
    payment_method: Optional[str] = None


class ReceivableRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    tenant_id: Optional[str]
    order_id: str
    customer_id: Optional[str]
    customer_name: str
    description: str
    total_amount: float
    installment_number: int
    total_installments: int
    amount: float
    due_date: date
    paid: bool
    paid_at: Optional[datetime]
    payment_method: Optional[str]
    notes: Optional[str]
    created_at: Optional[datetime]
