"""Importação e exportação de clientes e produtos em planilhas .xlsx.

A primeira aba é a de dados; a linha 1 traz os nomes das colunas. Uma linha
inválida aborta a importação inteira, com o número da linha na mensagem.
"""

from __future__ import annotations

import io
from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Iterator, Sequence
from zipfile import BadZipFile

from openpyxl import Workbook, load_workbook
from openpyxl.utils import get_column_letter
from openpyxl.utils.exceptions import InvalidFileException

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
INSTRUCTIONS_SHEET = "Instruções"
INSTRUCTIONS_HEADER = ("Coluna", "Descrição", "Exemplo")

CUSTOMER_COLUMNS = ("nome", "cpf_cnpj", "telefone", "email", "observacoes")
CUSTOMER_WIDTHS = (35, 20, 18, 30, 40)
CUSTOMER_INSTRUCTIONS = (
    ("nome", "Nome do cliente (obrigatório)", "Maria da Silva"),
    ("cpf_cnpj", "CPF ou CNPJ (opcional)", "123.456.789-00 ou 12.345.678/0001-99"),
    ("telefone", "Telefone (obrigatório)", "(11) 99999-8888"),
    ("email", "E-mail (opcional)", "cliente@email.com"),
    ("observacoes", "Observações (opcional)", "Cliente VIP, pagamento à vista"),
)
CUSTOMER_SAMPLES = (
    ("Maria da Silva", "123.456.789-00", "(11) 99999-8888", "maria@email.com", "Cliente VIP"),
    ("Empresa ABC Ltda", "12.345.678/0001-99", "(11) 3333-4444", "contato@empresaabc.com.br", "Pagamento a prazo"),
)

PRODUCT_COLUMNS = (
    "id",
    "nome",
    "categoria",
    "subcategoria",
    "preco",
    "estoque",
    "tipo",
    "modo_calculo",
    "descricao",
)
PRODUCT_WIDTHS = (38, 30, 20, 20, 12, 10, 10, 15, 40)
PRODUCT_INSTRUCTIONS = (
    ("id", "ID do produto (deixe vazio para novo, preencha para atualizar)", "abc123-def456-..."),
    ("nome", "Nome do produto/serviço (obrigatório)", "Cartão de Visita 4x4"),
    ("categoria", "Categoria principal (obrigatório)", "Impressos, Comunicação Visual, Serviços"),
    ("subcategoria", "Subcategoria (opcional)", "Cartões, Banners, Adesivos"),
    ("preco", "Preço unitário (obrigatório)", "89.90"),
    ("estoque", "Quantidade em estoque (0 para serviços)", "100"),
    ("tipo", "produto ou servico (obrigatório)", "produto"),
    ("modo_calculo", "quantidade ou medidor (obrigatório)", "quantidade"),
    ("descricao", "Descrição detalhada (opcional)", "Cartão colorido frente e verso"),
)
PRODUCT_SAMPLES = (
    ("", "Cartão de Visita 4x4", "Impressos", "Cartões", 89.90, 100, "produto", "quantidade",
     "Cartão de visita colorido frente e verso"),
    ("", "Banner Lona 440g", "Comunicação Visual", "Banners", 45.00, 50, "produto", "medidor",
     "Banner em lona 440g por m²"),
    ("", "Adesivo Vinil", "Comunicação Visual", "Adesivos", 35.00, 200, "produto", "medidor",
     "Adesivo vinil por m²"),
    ("", "Design de Logo", "Serviços", "Design", 250.00, 0, "servico", "quantidade",
     "Criação de logotipo profissional"),
)

SERVICE_ALIASES = {"servico", "serviço"}

# faixa da coluna Integer de products.stock
MIN_STOCK = -(2**31)
MAX_STOCK = 2**31 - 1


class SpreadsheetError(ValueError):
    pass


class SpreadsheetReadError(SpreadsheetError):
    def __init__(self) -> None:
        super().__init__("Erro ao ler o arquivo")


class SpreadsheetValidationError(SpreadsheetError):
    def __init__(self, row_number: int, message: str):
        super().__init__(f"Linha {row_number}: {message}")
        self.row_number = row_number


@dataclass
class CustomerImportRow:
    nome: str
    telefone: str
    cpf_cnpj: str | None = None
    email: str | None = None
    observacoes: str | None = None


@dataclass
class ProductImportRow:
    nome: str
    categoria: str
    preco: Decimal
    estoque: int
    tipo: str  # produto | servico
    modo_calculo: str  # quantidade | medidor
    id: str | None = None
    subcategoria: str | None = None
    descricao: str | None = None


# =========================
# LEITURA
# =========================
def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def _optional_text(value: Any) -> str | None:
    return _text(value) or None


def _iter_records(content: bytes) -> Iterator[tuple[int, dict[str, Any]]]:
    try:
        workbook = load_workbook(io.BytesIO(content), read_only=True, data_only=True)
    except (InvalidFileException, BadZipFile, KeyError, OSError, ValueError) as exc:
        raise SpreadsheetReadError() from exc

    try:
        if not workbook.worksheets:
            return
        rows = workbook.worksheets[0].iter_rows(values_only=True)
        header_row = next(rows, None)
        if header_row is None:
            return
        header = [_text(cell).lower() for cell in header_row]

        for row_number, values in enumerate(rows, start=2):
            if all(_text(value) == "" for value in values):
                continue
            record = {name: value for name, value in zip(header, values) if name}
            yield row_number, record
    finally:
        workbook.close()


def _parse_price(value: Any) -> Decimal | None:
    if value is None or _text(value) == "":
        return Decimal("0")
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float, Decimal)):
        raw = str(value)
    else:
        raw = _text(value).replace(",", ".")
    try:
        price = Decimal(raw)
    except InvalidOperation:
        return None
    if not price.is_finite() or price < 0:
        return None
    return price


def _parse_stock(value: Any) -> int:
    """Estoque ilegível, infinito ou fora da faixa da coluna vira 0."""
    try:
        stock = Decimal(_text(value).replace(",", ".") or "0")
    except (InvalidOperation, ValueError):
        return 0
    if not stock.is_finite() or not MIN_STOCK <= stock <= MAX_STOCK:
        return 0
    return int(stock)


def parse_customers(content: bytes) -> list[CustomerImportRow]:
    customers = []
    for row_number, record in _iter_records(content):
        nome = _text(record.get("nome"))
        telefone = _text(record.get("telefone"))
        if not nome:
            raise SpreadsheetValidationError(row_number, "Nome é obrigatório")
        if not telefone:
            raise SpreadsheetValidationError(row_number, "Telefone é obrigatório")
        customers.append(
            CustomerImportRow(
                nome=nome,
                telefone=telefone,
                cpf_cnpj=_optional_text(record.get("cpf_cnpj")),
                email=_optional_text(record.get("email")),
                observacoes=_optional_text(record.get("observacoes")),
            )
        )
    return customers


def parse_products(content: bytes) -> list[ProductImportRow]:
    products = []
    for row_number, record in _iter_records(content):
        nome = _text(record.get("nome"))
        categoria = _text(record.get("categoria"))
        if not nome:
            raise SpreadsheetValidationError(row_number, "Nome é obrigatório")
        if not categoria:
            raise SpreadsheetValidationError(row_number, "Categoria é obrigatória")
        preco = _parse_price(record.get("preco"))
        if preco is None:
            raise SpreadsheetValidationError(row_number, "Preço inválido")

        tipo_raw = (_text(record.get("tipo")) or "produto").lower()
        modo_raw = (_text(record.get("modo_calculo")) or "quantidade").lower()
        products.append(
            ProductImportRow(
                id=_optional_text(record.get("id")),
                nome=nome,
                categoria=categoria,
                subcategoria=_optional_text(record.get("subcategoria")),
                preco=preco,
                estoque=_parse_stock(record.get("estoque")),
                tipo="servico" if tipo_raw in SERVICE_ALIASES else "produto",
                modo_calculo="medidor" if modo_raw == "medidor" else "quantidade",
                descricao=_optional_text(record.get("descricao")),
            )
        )
    return products


# =========================
# ESCRITA
# =========================
def _write_sheet(sheet, columns: Sequence[str], rows: Iterable[Sequence[Any]], widths: Sequence[int]) -> None:
    sheet.append(list(columns))
    for row in rows:
        sheet.append(list(row))
    for index, width in enumerate(widths, start=1):
        sheet.column_dimensions[get_column_letter(index)].width = width


def _build_workbook(
    title: str,
    columns: Sequence[str],
    rows: Iterable[Sequence[Any]],
    widths: Sequence[int],
    instructions: Sequence[Sequence[str]] | None = None,
    instruction_widths: Sequence[int] = (15, 40, 45),
) -> bytes:
    workbook = Workbook()
    data_sheet = workbook.active
    data_sheet.title = title
    _write_sheet(data_sheet, columns, rows, widths)

    if instructions:
        _write_sheet(workbook.create_sheet(INSTRUCTIONS_SHEET), INSTRUCTIONS_HEADER, instructions, instruction_widths)

    output = io.BytesIO()
    workbook.save(output)
    return output.getvalue()


def dated_filename(prefix: str, today: date | None = None) -> str:
    today = today or datetime.now(timezone.utc).date()
    return f"{prefix}_{today.isoformat()}.xlsx"


def export_customers(customers: Iterable[Any]) -> bytes:
    rows = (
        (customer.name, customer.doc or "", customer.phone or "", customer.email or "", customer.notes or "")
        for customer in customers
    )
    return _build_workbook("Clientes", CUSTOMER_COLUMNS, rows, CUSTOMER_WIDTHS, instructions=CUSTOMER_INSTRUCTIONS)


def export_products(products: Iterable[Any]) -> bytes:
    rows = (
        (
            product.id,
            product.name,
            product.category,
            product.subcategory or "",
            float(product.price or 0),
            int(product.stock or 0),
            "servico" if product.type == "service" else "produto",
            "medidor" if product.pricing_mode == "medidor" else "quantidade",
            product.description or "",
        )
        for product in products
    )
    return _build_workbook(
        "Produtos",
        PRODUCT_COLUMNS,
        rows,
        PRODUCT_WIDTHS,
        instructions=PRODUCT_INSTRUCTIONS,
        instruction_widths=(15, 55, 40),
    )


def customer_template() -> bytes:
    return _build_workbook(
        "Clientes",
        CUSTOMER_COLUMNS,
        CUSTOMER_SAMPLES,
        CUSTOMER_WIDTHS,
        instructions=CUSTOMER_INSTRUCTIONS,
        instruction_widths=(15, 40, 45),
    )


def product_template() -> bytes:
    return _build_workbook(
        "Produtos",
        PRODUCT_COLUMNS,
        PRODUCT_SAMPLES,
        PRODUCT_WIDTHS,
        instructions=PRODUCT_INSTRUCTIONS,
        instruction_widths=(15, 55, 40),
    )
