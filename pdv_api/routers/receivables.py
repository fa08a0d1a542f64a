from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from pdv_api.core.database import get_db
from pdv_api.deps import Member, get_current_member
from pdv_api.schemas.receivables import ReceivableCreate, ReceivablePayment, ReceivableRead
from pdv_api.services.receivables import (
    ReceivableNotFoundError,
    create_receivable,
    create_receivables,
    delete_receivable,
    list_receivables,
    mark_as_paid,
)

router = APIRouter(prefix="/api/receivables", tags=["receivables"])

NOT_FOUND_DETAIL = "Recebível não encontrado"


@router.get("", response_model=List[ReceivableRead])
def get_receivables(
    member: Member = Depends(get_current_member),
    db: Session = Depends(get_db),
):
    return list_receivables(db, member.tenant_id)


@router.post("", response_model=ReceivableRead, status_code=201)
def post_receivable(
    payload: ReceivableCreate,
    member: Member = Depends(get_current_member),
    db: Session = Depends(get_db),
):
    return create_receivable(db, member.tenant_id, payload)


@router.post("/batch", response_model=List[ReceivableRead], status_code=201)
def post_receivables_batch(
    payload: List[ReceivableCreate],
    member: Member = Depends(get_current_member),
    db: Session = Depends(get_db),
):
    return create_receivables(db, member.tenant_id, payload)


@router.post("/{receivable_id}/pay", response_model=ReceivableRead)
def pay_receivable(
    receivable_id: str,
    payload: ReceivablePayment | None = None,
    member: Member = Depends(get_current_member),
    db: Session = Depends(get_db),
):
    payment_method = payload.payment_method if payload else None
    try:
        return mark_as_paid(db, member.tenant_id, receivable_id, payment_method)
    except ReceivableNotFoundError:
        raise HTTPException(status_code=404, detail=NOT_FOUND_DETAIL)


@router.delete("/{receivable_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_receivable(
    receivable_id: str,
    member: Member = Depends(get_current_member),
    db: Session = Depends(get_db),
):
    try:
        delete_receivable(db, member.tenant_id, receivable_id)
    except ReceivableNotFoundError:
        raise HTTPException(status_code=404, detail=NOT_FOUND_DETAIL)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
