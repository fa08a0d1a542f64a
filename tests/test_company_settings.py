from decimal import Decimal

from fastapi import FastAPI
from fastapi.testclient import TestClient

from pdv_api.core.database import get_db
from pdv_api.models.company_settings import CompanySettings
from pdv_api.routers.company_settings import router
from pdv_api.schemas.company_settings import CompanySettingsPartial, LocalCompanySettings
from pdv_api.services.settings_merge import merge_company_settings
from tests.fixtures_data import CLOUD_SETTINGS_ROW, LOCAL_SETTINGS_COPY, OWNER_USER, SELLER_USER
from tests.sqlite_helpers import auth_headers, build_session_factory, override_get_db, seed_member


def test_cloud_values_win_but_empty_text_falls_back():
    merged = merge_company_settings(
        CompanySettingsPartial(**CLOUD_SETTINGS_ROW),
        LocalCompanySettings(**LOCAL_SETTINGS_COPY),
    )

    assert merged.name == "Gráfica São João"
    assert merged.cnpj == "12.345.678/0001-99"


def test_explicit_false_and_zero_in_cloud_are_kept():
    merged = merge_company_settings(
        CompanySettingsPartial(**CLOUD_SETTINGS_ROW),
        LocalCompanySettings(**LOCAL_SETTINGS_COPY),
    )

    assert merged.uses_stock is False
    assert merged.low_stock_threshold == 0


def test_theme_comes_from_local_copy_only():
    with_local = merge_company_settings(CompanySettingsPartial(), LocalCompanySettings(theme="dark"))
    without_local = merge_company_settings(CompanySettingsPartial())

    assert with_local.theme == "dark"
    assert without_local.theme == "light"


def test_missing_values_use_defaults():
    merged = merge_company_settings(None)

    assert merged.name == "Minha Empresa"
    assert merged.login_header_color == "#ffffff"
    assert merged.low_stock_threshold == 10
    assert merged.auto_print_on_sale is False
    assert merged.uses_commission is False
    assert merged.commission_percentage == Decimal("0")


def test_without_cloud_local_copy_is_used():
    merged = merge_company_settings(None, LocalCompanySettings(**LOCAL_SETTINGS_COPY))

    assert merged.name == "Gráfica Local"
    assert merged.low_stock_threshold == 5
    assert merged.notify_new_sales is True


def _build_client():
    testing_session = build_session_factory()
    app = FastAPI()
    app.include_router(router)
    app.dependency_overrides[get_db] = override_get_db(testing_session)
    db = testing_session()
    tenant_id = seed_member(db, user_id=OWNER_USER["id"], role="admin", name="Ana Souza")
    seed_member(db, user_id=SELLER_USER["id"], role="seller", tenant_id=tenant_id, name="Bruno Lima")
    db.close()
    return TestClient(app), testing_session, tenant_id


def test_get_returns_null_without_cloud_row():
    client, _, _ = _build_client()

    response = client.get("/api/company-settings", headers=auth_headers(OWNER_USER))

    assert response.status_code == 200
    assert response.json() is None


def test_put_upserts_only_sent_fields():
    client, testing_session, tenant_id = _build_client()
    headers = auth_headers(OWNER_USER)

    first = client.put("/api/company-settings", json={"name": "Gráfica Nova", "uses_stock": False}, headers=headers)
    second = client.put("/api/company-settings", json={"phone": "(11) 3333-4444"}, headers=headers)

    assert first.status_code == 200
    assert second.status_code == 200
    assert second.json()["name"] == "Gráfica Nova"
    assert second.json()["uses_stock"] is False
    assert second.json()["phone"] == "(11) 3333-4444"
    db = testing_session()
    assert db.query(CompanySettings).filter(CompanySettings.tenant_id == tenant_id).count() == 1
    db.close()


def test_put_is_forbidden_for_seller():
    client, _, _ = _build_client()

    response = client.put("/api/company-settings", json={"name": "X"}, headers=auth_headers(SELLER_USER))

    assert response.status_code == 403
    assert response.json() == {"detail": "Permissão insuficiente"}


def test_effective_merges_cloud_with_local_copy():
    client, testing_session, tenant_id = _build_client()
    db = testing_session()
    db.add(CompanySettings(tenant_id=tenant_id, **CLOUD_SETTINGS_ROW))
    db.commit()
    db.close()

    response = client.post(
        "/api/company-settings/effective",
        json=LOCAL_SETTINGS_COPY,
        headers=auth_headers(SELLER_USER),
    )

    assert response.status_code == 200
    body = response.json()
    assert body["is_cloud_connected"] is True
    assert body["settings"]["name"] == "Gráfica São João"
    assert body["settings"]["cnpj"] == "12.345.678/0001-99"
    assert body["settings"]["uses_stock"] is False
    assert body["settings"]["theme"] == "dark"


def test_effective_without_cloud_row():
    client, _, _ = _build_client()

    response = client.post("/api/company-settings/effective", json={}, headers=auth_headers(OWNER_USER))

    assert response.status_code == 200
    assert response.json()["is_cloud_connected"] is False
    assert response.json()["settings"]["name"] == "Minha Empresa"
