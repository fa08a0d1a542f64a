from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date, datetime, time
from decimal import Decimal
from typing import Iterable, Protocol
from zoneinfo import ZoneInfo

from pdv_api.core.config import APP_TIMEZONE
from pdv_api.models.user_role import Role
from pdv_api.schemas.company_settings import EffectiveCompanySettings

MONTH_PATTERN = re.compile(r"^(\d{4})-(\d{2})$")
HUNDRED = Decimal("100")
ZERO = Decimal("0")


class OrderLike(Protocol):
    id: str
    seller_id: str | None
    seller_name: str | None
    customer_name: str
    created_at: datetime
    amount_paid: Decimal | float | int | None


@dataclass(frozen=True)
class Viewer:
    user_id: str
    role: Role


@dataclass(frozen=True)
class CommissionScope:
    """Visibilidade do usuário sobre as vendas, decidida uma vez por requisição."""

    seller_id: str | None
    include_seller_summary: bool

    @classmethod
    def for_viewer(cls, viewer: Viewer, seller_filter: str | None = None) -> "CommissionScope":
        if viewer.role.is_privileged:
            return cls(seller_id=seller_filter or None, include_seller_summary=True)
        # Vendedor só enxerga as próprias vendas; o filtro recebido é ignorado.
        return cls(seller_id=viewer.user_id, include_seller_summary=False)

    def admits(self, order: OrderLike) -> bool:
        return self.seller_id is None or order.seller_id == self.seller_id


@dataclass
class CommissionLine:
    order_id: str
    created_at: datetime
    customer_name: str
    seller_id: str | None
    seller_name: str | None
    amount_paid: Decimal
    commission: Decimal


@dataclass
class CommissionStats:
    total_sales: Decimal = ZERO
    total_commission: Decimal = ZERO
    orders_count: int = 0
    commission_rate: Decimal = ZERO


@dataclass
class SellerCommissionSummary:
    seller_id: str | None
    seller_name: str | None
    orders_count: int = 0
    total_sales: Decimal = ZERO
    total_commission: Decimal = ZERO


@dataclass
class CommissionReport:
    enabled: bool
    month: str
    stats: CommissionStats = field(default_factory=CommissionStats)
    orders: list[CommissionLine] = field(default_factory=list)
    sellers: list[SellerCommissionSummary] | None = None


def _to_decimal(value: Decimal | float | int | None) -> Decimal:
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def month_bounds(month: str) -> tuple[datetime, datetime]:
    """Primeiro e último instante do mês "YYYY-MM" (ambos inclusivos), sem fuso."""
    match = MONTH_PATTERN.match((month or "").strip())
    if not match:
        raise ValueError("Mês inválido")
    year, month_number = int(match.group(1)), int(match.group(2))
    if not 1 <= month_number <= 12:
        raise ValueError("Mês inválido")

    first_day = date(year, month_number, 1)
    if month_number == 12:
        next_month = date(year + 1, 1, 1)
    else:
        next_month = date(year, month_number + 1, 1)
    last_day = date.fromordinal(next_month.toordinal() - 1)
    return datetime.combine(first_day, time.min), datetime.combine(last_day, time.max)


def current_month(timezone_name: str = APP_TIMEZONE) -> str:
    return datetime.now(ZoneInfo(timezone_name)).strftime("%Y-%m")


def _local_naive(value: datetime, timezone_name: str) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(ZoneInfo(timezone_name)).replace(tzinfo=None)


def calculate_commission(amount_paid: Decimal | float | int | None, percentage: Decimal | float | int) -> Decimal:
    return _to_decimal(amount_paid) * (_to_decimal(percentage) / HUNDRED)


def filter_commission_orders(
    orders: Iterable[OrderLike],
    scope: CommissionScope,
    month: str,
    timezone_name: str = APP_TIMEZONE,
) -> list[OrderLike]:
    start, end = month_bounds(month)
    selected = []
    for order in orders:
        if not scope.admits(order):
            continue
        created_at = _local_naive(order.created_at, timezone_name)
        if not start <= created_at <= end:
            continue
        if _to_decimal(order.amount_paid) <= ZERO:
            continue
        selected.append(order)
    return selected


def summarize_by_seller(lines: Iterable[CommissionLine]) -> list[SellerCommissionSummary]:
    summaries: dict[str | None, SellerCommissionSummary] = {}
    for line in lines:
        summary = summaries.get(line.seller_id)
        if summary is None:
            summary = SellerCommissionSummary(seller_id=line.seller_id, seller_name=line.seller_name)
            summaries[line.seller_id] = summary
        summary.orders_count += 1
        summary.total_sales += line.amount_paid
        summary.total_commission += line.commission
    return sorted(summaries.values(), key=lambda item: item.total_commission, reverse=True)


def build_commission_report(
    orders: Iterable[OrderLike],
    viewer: Viewer,
    month: str,
    settings: EffectiveCompanySettings,
    seller_id: str | None = None,
    timezone_name: str = APP_TIMEZONE,
) -> CommissionReport:
    if not settings.uses_commission:
        return CommissionReport(enabled=False, month=month)

    scope = CommissionScope.for_viewer(viewer, seller_id)
    rate = _to_decimal(settings.commission_percentage)

    lines = [
        CommissionLine(
            order_id=order.id,
            created_at=order.created_at,
            customer_name=order.customer_name,
            seller_id=order.seller_id,
            seller_name=order.seller_name,
            amount_paid=_to_decimal(order.amount_paid),
            commission=calculate_commission(order.amount_paid, rate),
        )
        for order in filter_commission_orders(orders, scope, month, timezone_name)
    ]
    lines.sort(key=lambda line: _local_naive(line.created_at, timezone_name), reverse=True)

    stats = CommissionStats(
        total_sales=sum((line.amount_paid for line in lines), ZERO),
        total_commission=sum((line.commission for line in lines), ZERO),
        orders_count=len(lines),
        commission_rate=rate,
    )
    return CommissionReport(
        enabled=True,
        month=month,
        stats=stats,
        orders=lines,
        sellers=summarize_by_seller(lines) if scope.include_seller_summary else None,
    )
