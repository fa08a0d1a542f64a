from __future__ import annotations

from datetime import datetime, timedelta
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel
from sqlalchemy.orm import Session

from pdv_api.core.database import get_db
from pdv_api.deps import Member, get_current_member
from pdv_api.models.company_settings import CompanySettings
from pdv_api.models.order import Order
from pdv_api.schemas.company_settings import CompanySettingsPartial
from pdv_api.services.commissions import (
    CommissionReport,
    Viewer,
    build_commission_report,
    current_month,
    month_bounds,
)
from pdv_api.services.settings_merge import merge_company_settings

router = APIRouter(prefix="/api/commissions", tags=["commissions"])

# Folga para pedidos gravados com fuso: o recorte exato do mês é feito no serviço.
QUERY_MARGIN = timedelta(days=1)


class CommissionStatsRead(BaseModel):
    total_sales: float
    total_commission: float
    orders_count: int
    commission_rate: float


class CommissionOrderRead(BaseModel):
    order_id: str
    created_at: datetime
    customer_name: str
    seller_id: Optional[str]
    seller_name: Optional[str]
    amount_paid: float
    commission: float


class SellerCommissionRead(BaseModel):
    seller_id: Optional[str]
    seller_name: Optional[str]
    orders_count: int
    total_sales: float
    total_commission: float


class CommissionReportRead(BaseModel):
    enabled: bool
    month: str
    stats: CommissionStatsRead
    orders: List[CommissionOrderRead]
    sellers: Optional[List[SellerCommissionRead]] = None


def _report_to_dict(report: CommissionReport) -> dict:
    return {
        "enabled": report.enabled,
        "month": report.month,
        "stats": {
            "total_sales": float(report.stats.total_sales),
            "total_commission": float(report.stats.total_commission),
            "orders_count": report.stats.orders_count,
            "commission_rate": float(report.stats.commission_rate),
        },
        "orders": [
            {
                "order_id": line.order_id,
                "created_at": line.created_at,
                "customer_name": line.customer_name,
                "seller_id": line.seller_id,
                "seller_name": line.seller_name,
                "amount_paid": float(line.amount_paid),
                "commission": float(line.commission),
            }
            for line in report.orders
        ],
        "sellers": (
            [
                {
                    "seller_id": summary.seller_id,
                    "seller_name": summary.seller_name,
                    "orders_count": summary.orders_count,
                    "total_sales": float(summary.total_sales),
                    "total_commission": float(summary.total_commission),
                }
                for summary in report.sellers
            ]
            if report.sellers is not None
            else None
        ),
    }


@router.get("", response_model=CommissionReportRead)
def get_commissions(
    month: Optional[str] = Query(default=None, description="YYYY-MM"),
    seller_id: Optional[str] = Query(default=None),
    member: Member = Depends(get_current_member),
    db: Session = Depends(get_db),
):
    month = (month or "").strip() or current_month()
    try:
        start, end = month_bounds(month)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    cloud_row = db.query(CompanySettings).filter(CompanySettings.tenant_id == member.tenant_id).first()
    cloud = CompanySettingsPartial.model_validate(cloud_row) if cloud_row else None
    settings = merge_company_settings(cloud)

    orders = []
    if settings.uses_commission:
        orders = (
            db.query(Order)
            .filter(
                Order.tenant_id == member.tenant_id,
                Order.created_at >= start - QUERY_MARGIN,
                Order.created_at <= end + QUERY_MARGIN,
            )
            .all()
        )

    report = build_commission_report(
        orders,
        Viewer(user_id=member.id, role=member.role),
        month,
        settings,
        seller_id=seller_id,
    )
    return _report_to_dict(report)
