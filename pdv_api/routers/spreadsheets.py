from __future__ import annotations

import io
import logging

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from fastapi.responses import StreamingResponse
from pydantic import BaseModel
from sqlalchemy.orm import Session

from pdv_api.core.database import get_db
from pdv_api.deps import Member, get_current_member
from pdv_api.models.catalog import Customer, Product
from pdv_api.services.spreadsheets import (
    XLSX_MEDIA_TYPE,
    SpreadsheetError,
    customer_template,
    dated_filename,
    export_customers,
    export_products,
    parse_customers,
    parse_products,
    product_template,
)

router = APIRouter(prefix="/api/spreadsheets", tags=["spreadsheets"])

logger = logging.getLogger(__name__)

MAX_FILE_SIZE_BYTES = 10 * 1024 * 1024


class ImportResult(BaseModel):
    imported: int


def _read_upload(file: UploadFile) -> bytes:
    content = file.file.read(MAX_FILE_SIZE_BYTES + 1)
    if len(content) > MAX_FILE_SIZE_BYTES:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Arquivo excede 10MB")
    if not content:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Erro ao ler o arquivo")
    return content


def _xlsx_response(content: bytes, filename: str) -> StreamingResponse:
    return StreamingResponse(
        io.BytesIO(content),
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/customers/import", response_model=ImportResult)
def import_customers(
    file: UploadFile = File(...),
    member: Member = Depends(get_current_member),
    db: Session = Depends(get_db),
):
    try:
        rows = parse_customers(_read_upload(file))
    except SpreadsheetError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    db.add_all(
        Customer(
            tenant_id=member.tenant_id,
            name=row.nome,
            phone=row.telefone,
            doc=row.cpf_cnpj,
            email=row.email,
            notes=row.observacoes,
        )
        for row in rows
    )
    db.commit()
    logger.info("[SPREADSHEETS] customers imported tenant_id=%s count=%s", member.tenant_id, len(rows))
    return {"imported": len(rows)}


@router.post("/products/import", response_model=ImportResult)
def import_products(
    file: UploadFile = File(...),
    member: Member = Depends(get_current_member),
    db: Session = Depends(get_db),
):
    try:
        rows = parse_products(_read_upload(file))
    except SpreadsheetError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    existing_ids = [row.id for row in rows if row.id]
    existing = {}
    if existing_ids:
        existing = {
            product.id: product
            for product in db.query(Product)
            .filter(Product.tenant_id == member.tenant_id, Product.id.in_(existing_ids))
            .all()
        }

    updated = 0
    for row in rows:
        product = existing.get(row.id) if row.id else None
        if product is None:
            # id desconhecido neste tenant vira produto novo
            product = Product(tenant_id=member.tenant_id)
            db.add(product)
        else:
            updated += 1
        product.name = row.nome
        product.category = row.categoria
        product.subcategory = row.subcategoria
        product.price = row.preco
        product.stock = row.estoque
        product.type = "service" if row.tipo == "servico" else "product"
        product.pricing_mode = row.modo_calculo
        product.description = row.descricao

    db.commit()
    logger.info(
        "[SPREADSHEETS] products imported tenant_id=%s count=%s updated=%s",
        member.tenant_id,
        len(rows),
        updated,
    )
    return {"imported": len(rows)}


@router.get("/customers/export")
def download_customers(
    member: Member = Depends(get_current_member),
    db: Session = Depends(get_db),
):
    customers = (
        db.query(Customer)
        .filter(Customer.tenant_id == member.tenant_id)
        .order_by(Customer.name.asc())
        .all()
    )
    return _xlsx_response(export_customers(customers), dated_filename("clientes"))


@router.get("/products/export")
def download_products(
    member: Member = Depends(get_current_member),
    db: Session = Depends(get_db),
):
    products = (
        db.query(Product)
        .filter(Product.tenant_id == member.tenant_id)
        .order_by(Product.name.asc())
        .all()
    )
    return _xlsx_response(export_products(products), dated_filename("produtos"))


@router.get("/customers/template")
def download_customer_template(_member: Member = Depends(get_current_member)):
    return _xlsx_response(customer_template(), "modelo_clientes.xlsx")


@router.get("/products/template")
def download_product_template(_member: Member = Depends(get_current_member)):
    return _xlsx_response(product_template(), "modelo_produtos.xlsx")
