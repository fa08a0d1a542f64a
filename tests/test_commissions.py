from datetime import datetime, timezone
from decimal import Decimal
from types import SimpleNamespace

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from pdv_api.core.database import get_db
from pdv_api.models.company_settings import CompanySettings
from pdv_api.models.order import Order
from pdv_api.models.user_role import Role
from pdv_api.routers.commissions import router
from pdv_api.schemas.company_settings import EffectiveCompanySettings
from pdv_api.services.commissions import (
    CommissionScope,
    Viewer,
    build_commission_report,
    calculate_commission,
    month_bounds,
)
from tests.fixtures_data import OTHER_SELLER_USER, OWNER_USER, SELLER_USER
from tests.sqlite_helpers import auth_headers, build_session_factory, override_get_db, seed_member

ENABLED = EffectiveCompanySettings(uses_commission=True, commission_percentage=Decimal("10"))
ADMIN = Viewer(user_id="admin-1", role=Role.ADMIN)
SELLER = Viewer(user_id="seller-1", role=Role.SELLER)


def _order(order_id, seller_id, amount, created_at, seller_name=None):
    return SimpleNamespace(
        id=order_id,
        seller_id=seller_id,
        seller_name=seller_name or seller_id,
        customer_name="Cliente",
        amount_paid=amount,
        created_at=created_at,
    )


ORDERS = [
    _order("o1", "seller-1", Decimal("200"), datetime(2024, 3, 10, 12, 0)),
    _order("o2", "seller-2", Decimal("500"), datetime(2024, 3, 15, 9, 30)),
    _order("o3", "seller-1", Decimal("0"), datetime(2024, 3, 20, 10, 0)),
    _order("o4", "seller-1", Decimal("100"), datetime(2024, 3, 31, 23, 59, 59)),
    _order("o5", "seller-1", Decimal("300"), datetime(2024, 4, 1, 0, 0, 0)),
]


def test_calculate_commission_uses_percentage():
    assert calculate_commission(Decimal("200"), Decimal("10")) == Decimal("20")


def test_month_bounds_rejects_invalid_month():
    with pytest.raises(ValueError, match="Mês inválido"):
        month_bounds("2024-13")
    with pytest.raises(ValueError, match="Mês inválido"):
        month_bounds("março")


def test_month_window_is_inclusive_at_both_ends():
    report = build_commission_report(ORDERS, ADMIN, "2024-03", ENABLED)

    order_ids = [line.order_id for line in report.orders]
    assert "o4" in order_ids
    assert "o5" not in order_ids


def test_orders_without_payment_are_excluded():
    report = build_commission_report(ORDERS, ADMIN, "2024-03", ENABLED)

    assert "o3" not in [line.order_id for line in report.orders]


def test_admin_report_totals_and_seller_summary():
    report = build_commission_report(ORDERS, ADMIN, "2024-03", ENABLED)

    assert report.enabled is True
    assert report.stats.orders_count == 3
    assert report.stats.total_sales == Decimal("800")
    assert report.stats.total_commission == Decimal("80")
    assert report.stats.commission_rate == Decimal("10")
    assert [line.order_id for line in report.orders] == ["o4", "o2", "o1"]
    assert [summary.seller_id for summary in report.sellers] == ["seller-2", "seller-1"]
    assert report.sellers[0].total_commission == Decimal("50")
    assert report.sellers[1].orders_count == 2


def test_seller_sees_only_own_orders_and_no_summary():
    report = build_commission_report(ORDERS, SELLER, "2024-03", ENABLED, seller_id="seller-2")

    assert {line.seller_id for line in report.orders} == {"seller-1"}
    assert report.stats.total_commission == Decimal("30")
    assert report.sellers is None


def test_admin_seller_filter_narrows_orders():
    report = build_commission_report(ORDERS, ADMIN, "2024-03", ENABLED, seller_id="seller-2")

    assert [line.order_id for line in report.orders] == ["o2"]
    assert len(report.sellers) == 1


def test_manager_scope_is_privileged():
    scope = CommissionScope.for_viewer(Viewer(user_id="m", role=Role.MANAGER))

    assert scope.seller_id is None
    assert scope.include_seller_summary is True


def test_disabled_commissions_return_no_figures():
    disabled = EffectiveCompanySettings(uses_commission=False, commission_percentage=Decimal("10"))

    report = build_commission_report(ORDERS, ADMIN, "2024-03", disabled)

    assert report.enabled is False
    assert report.orders == []
    assert report.stats.orders_count == 0
    assert report.sellers is None


def test_zero_percentage_lists_orders_with_zero_commission():
    zero = EffectiveCompanySettings(uses_commission=True, commission_percentage=Decimal("0"))

    report = build_commission_report(ORDERS, ADMIN, "2024-03", zero)

    assert report.stats.orders_count == 3
    assert report.stats.total_commission == Decimal("0")


def test_aware_timestamps_are_converted_to_business_timezone():
    # 2024-04-01 02:00 UTC ainda é 31/03 em São Paulo
    late_order = _order("late", "seller-1", Decimal("50"), datetime(2024, 4, 1, 2, 0, tzinfo=timezone.utc))

    march = build_commission_report([late_order], ADMIN, "2024-03", ENABLED, timezone_name="America/Sao_Paulo")
    april = build_commission_report([late_order], ADMIN, "2024-04", ENABLED, timezone_name="America/Sao_Paulo")

    assert [line.order_id for line in march.orders] == ["late"]
    assert april.orders == []


def _build_client():
    testing_session = build_session_factory()
    app = FastAPI()
    app.include_router(router)
    app.dependency_overrides[get_db] = override_get_db(testing_session)
    return TestClient(app), testing_session


def _seed_tenant(testing_session, uses_commission=True):
    db = testing_session()
    tenant_id = seed_member(db, user_id=OWNER_USER["id"], role="admin", name="Ana Souza")
    seed_member(db, user_id=SELLER_USER["id"], role="seller", tenant_id=tenant_id, name="Bruno Lima")
    seed_member(db, user_id=OTHER_SELLER_USER["id"], role="seller", tenant_id=tenant_id, name="Carla Dias")
    db.add(CompanySettings(tenant_id=tenant_id, uses_commission=uses_commission, commission_percentage=Decimal("10")))
    db.add_all(
        [
            Order(
                tenant_id=tenant_id,
                seller_id=SELLER_USER["id"],
                seller_name="Bruno Lima",
                customer_name="Maria",
                amount_paid=Decimal("200.00"),
                created_at=datetime(2024, 3, 10, 12, 0),
            ),
            Order(
                tenant_id=tenant_id,
                seller_id=OTHER_SELLER_USER["id"],
                seller_name="Carla Dias",
                customer_name="João",
                amount_paid=Decimal("100.00"),
                created_at=datetime(2024, 3, 11, 12, 0),
            ),
        ]
    )
    db.commit()
    db.close()


def test_commissions_endpoint_for_admin():
    client, testing_session = _build_client()
    _seed_tenant(testing_session)

    response = client.get("/api/commissions?month=2024-03", headers=auth_headers(OWNER_USER))

    assert response.status_code == 200
    body = response.json()
    assert body["enabled"] is True
    assert body["stats"]["total_sales"] == 300.0
    assert body["stats"]["total_commission"] == 30.0
    assert len(body["sellers"]) == 2


def test_commissions_endpoint_for_seller():
    client, testing_session = _build_client()
    _seed_tenant(testing_session)

    response = client.get(
        f"/api/commissions?month=2024-03&seller_id={OTHER_SELLER_USER['id']}",
        headers=auth_headers(SELLER_USER),
    )

    body = response.json()
    assert response.status_code == 200
    assert [order["seller_id"] for order in body["orders"]] == [SELLER_USER["id"]]
    assert body["stats"]["total_commission"] == 20.0
    assert body["sellers"] is None


def test_commissions_endpoint_disabled_and_invalid_month():
    client, testing_session = _build_client()
    _seed_tenant(testing_session, uses_commission=False)
    headers = auth_headers(OWNER_USER)

    disabled = client.get("/api/commissions?month=2024-03", headers=headers)
    invalid = client.get("/api/commissions?month=2024-3", headers=headers)

    assert disabled.status_code == 200
    assert disabled.json()["enabled"] is False
    assert disabled.json()["orders"] == []
    assert invalid.status_code == 400
    assert invalid.json() == {"detail": "Mês inválido"}


def test_commissions_endpoint_requires_tenant():
    client, _ = _build_client()

    response = client.get("/api/commissions", headers=auth_headers(OWNER_USER))

    assert response.status_code == 403
    assert response.json() == {"detail": "Tenant não encontrado"}
