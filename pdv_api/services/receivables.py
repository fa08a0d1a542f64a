from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy.orm import Session

from pdv_api.models.receivable import Receivable
from pdv_api.schemas.receivables import ReceivableCreate


class ReceivableNotFoundError(LookupError):
    pass


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _build_receivable(tenant_id: str, data: ReceivableCreate) -> Receivable:
    return Receivable(
        tenant_id=tenant_id,
        order_id=data.order_id,
        customer_id=data.customer_id or None,
        customer_name=data.customer_name,
        description=data.description,
        total_amount=data.total_amount,
        installment_number=data.installment_number or 1,
        total_installments=data.total_installments or 1,
        amount=data.amount,
        due_date=data.due_date,
        notes=data.notes or None,
    )


def list_receivables(db: Session, tenant_id: str) -> list[Receivable]:
    return (
        db.query(Receivable)
        .filter(Receivable.tenant_id == tenant_id)
        .order_by(Receivable.due_date.asc())
        .all()
    )


def create_receivable(db: Session, tenant_id: str, data: ReceivableCreate) -> Receivable:
    receivable = _build_receivable(tenant_id, data)
    db.add(receivable)
    db.commit()
    db.refresh(receivable)
    return receivable


def create_receivables(db: Session, tenant_id: str, items: list[ReceivableCreate]) -> list[Receivable]:
    """Parcelas de um pedido: gravadas juntas, num único commit."""
    if not items:
        return []
    receivables = [_build_receivable(tenant_id, item) for item in items]
    db.add_all(receivables)
    db.commit()
    for receivable in receivables:
        db.refresh(receivable)
    return receivables


def _get_for_tenant(db: Session, tenant_id: str, receivable_id: str) -> Receivable:
    receivable = (
        db.query(Receivable)
        .filter(Receivable.id == receivable_id, Receivable.tenant_id == tenant_id)
        .first()
    )
    if receivable is None:
        raise ReceivableNotFoundError(receivable_id)
    return receivable


def mark_as_paid(
    db: Session,
    tenant_id: str,
    receivable_id: str,
    payment_method: str | None = None,
) -> Receivable:
    receivable = _get_for_tenant(db, tenant_id, receivable_id)
    receivable.paid = True
    receivable.paid_at = utcnow()
    receivable.payment_method = payment_method or None
    db.commit()
    db.refresh(receivable)
    return receivable


def delete_receivable(db: Session, tenant_id: str, receivable_id: str) -> None:
    receivable = _get_for_tenant(db, tenant_id, receivable_id)
    db.delete(receivable)
    db.commit()
