from fastapi import FastAPI
from fastapi.testclient import TestClient

from pdv_api.core.database import get_db
from pdv_api.models.receivable import Receivable
from pdv_api.routers.receivables import router
from tests.fixtures_data import OTHER_SELLER_USER, OWNER_USER, RECEIVABLE_PAYLOAD, SELLER_USER
from tests.sqlite_helpers import auth_headers, build_session_factory, override_get_db, seed_member


def _build_client():
    testing_session = build_session_factory()
    app = FastAPI()
    app.include_router(router)
    app.dependency_overrides[get_db] = override_get_db(testing_session)
    db = testing_session()
    tenant_id = seed_member(db, user_id=OWNER_USER["id"], role="admin", name="Ana Souza")
    seed_member(db, user_id=SELLER_USER["id"], role="seller", tenant_id=tenant_id, name="Bruno Lima")
    seed_member(db, user_id=OTHER_SELLER_USER["id"], role="admin", name="Carla Dias")
    db.close()
    return TestClient(app), testing_session, tenant_id


def _installments():
    return [
        {**RECEIVABLE_PAYLOAD, "installment_number": number, "due_date": due_date}
        for number, due_date in ((3, "2024-07-10"), (1, "2024-05-10"), (2, "2024-06-10"))
    ]


def test_create_and_list_receivables_ordered_by_due_date():
    client, _, tenant_id = _build_client()
    headers = auth_headers(OWNER_USER)

    batch = client.post("/api/receivables/batch", json=_installments(), headers=headers)
    listing = client.get("/api/receivables", headers=headers)

    assert batch.status_code == 201
    assert len(batch.json()) == 3
    assert listing.status_code == 200
    assert [item["due_date"] for item in listing.json()] == ["2024-05-10", "2024-06-10", "2024-07-10"]
    assert {item["tenant_id"] for item in listing.json()} == {tenant_id}


def test_create_single_receivable_defaults_installments():
    client, _, _ = _build_client()
    payload = {**RECEIVABLE_PAYLOAD, "installment_number": None, "total_installments": None}

    response = client.post("/api/receivables", json=payload, headers=auth_headers(SELLER_USER))

    assert response.status_code == 201
    body = response.json()
    assert body["installment_number"] == 1
    assert body["total_installments"] == 1
    assert body["paid"] is False
    assert body["amount"] == 100.0


def test_empty_batch_returns_empty_list():
    client, testing_session, _ = _build_client()

    response = client.post("/api/receivables/batch", json=[], headers=auth_headers(OWNER_USER))

    assert response.status_code == 201
    assert response.json() == []
    db = testing_session()
    assert db.query(Receivable).count() == 0
    db.close()


def test_pay_receivable_sets_paid_fields():
    client, _, _ = _build_client()
    headers = auth_headers(OWNER_USER)
    created = client.post("/api/receivables", json=RECEIVABLE_PAYLOAD, headers=headers).json()

    response = client.post(f"/api/receivables/{created['id']}/pay", json={"payment_method": "pix"}, headers=headers)

    assert response.status_code == 200
    body = response.json()
    assert body["paid"] is True
    assert body["paid_at"] is not None
    assert body["payment_method"] == "pix"


def test_delete_receivable():
    client, testing_session, _ = _build_client()
    headers = auth_headers(OWNER_USER)
    created = client.post("/api/receivables", json=RECEIVABLE_PAYLOAD, headers=headers).json()

    response = client.delete(f"/api/receivables/{created['id']}", headers=headers)

    assert response.status_code == 204
    db = testing_session()
    assert db.query(Receivable).count() == 0
    db.close()


def test_receivable_of_other_tenant_is_not_found():
    client, _, _ = _build_client()
    created = client.post("/api/receivables", json=RECEIVABLE_PAYLOAD, headers=auth_headers(OWNER_USER)).json()
    other_headers = auth_headers(OTHER_SELLER_USER)

    pay = client.post(f"/api/receivables/{created['id']}/pay", json={}, headers=other_headers)
    delete = client.delete(f"/api/receivables/{created['id']}", headers=other_headers)
    listing = client.get("/api/receivables", headers=other_headers)

    assert pay.status_code == 404
    assert pay.json() == {"detail": "Recebível não encontrado"}
    assert delete.status_code == 404
    assert listing.json() == []


def test_receivables_require_tenant_and_token():
    client, _, _ = _build_client()

    no_token = client.get("/api/receivables")
    no_tenant = client.get("/api/receivables", headers=auth_headers({"id": "ffffffff-0000-4000-8000-00000000ffff"}))

    assert no_token.status_code == 401
    assert no_tenant.status_code == 403
    assert no_tenant.json() == {"detail": "Tenant não encontrado"}
