from fastapi import FastAPI
from fastapi.testclient import TestClient

from pdv_api.core.database import get_db
from pdv_api.models.profile import Profile
from pdv_api.models.tenant import Tenant
from pdv_api.models.user_role import UserRole
from pdv_api.routers.functions import router
from pdv_api.services.tenant_bootstrap import build_tenant_slug, normalize_slug
from tests.fixtures_data import OTHER_SELLER_USER, OWNER_USER, SELLER_USER
from tests.sqlite_helpers import auth_headers, build_session_factory, override_get_db


def _build_client():
    testing_session = build_session_factory()
    app = FastAPI()
    app.include_router(router)
    app.dependency_overrides[get_db] = override_get_db(testing_session)
    return TestClient(app), testing_session


def test_normalize_slug_folds_accents_and_spaces():
    assert normalize_slug("Gráfica  São João!") == "grafica-sao-joao"


def test_build_tenant_slug_appends_user_fragment():
    assert build_tenant_slug("Minha Empresa", "abcdef12-3456") == "minha-empresa-abcdef12"


def test_ensure_user_creates_tenant_profile_and_admin_role():
    client, testing_session = _build_client()

    response = client.post("/functions/v1/ensure-user", headers=auth_headers(OWNER_USER))

    assert response.status_code == 200
    body = response.json()
    assert body["ok"] is True

    db = testing_session()
    tenant = db.query(Tenant).one()
    profile = db.query(Profile).filter(Profile.id == OWNER_USER["id"]).one()
    role = db.query(UserRole).filter(UserRole.user_id == OWNER_USER["id"]).one()
    assert body["tenant_id"] == tenant.id
    assert tenant.owner_id == OWNER_USER["id"]
    assert tenant.name == "Gráfica São João"
    assert tenant.slug == "grafica-sao-joao-0a1b2c3d"
    assert profile.tenant_id == tenant.id
    assert profile.name == "Ana Souza"
    assert role.role == "admin"
    assert role.tenant_id == tenant.id
    db.close()


def test_ensure_user_is_idempotent():
    client, testing_session = _build_client()
    headers = auth_headers(OWNER_USER)

    first = client.post("/functions/v1/ensure-user", headers=headers)
    second = client.post("/functions/v1/ensure-user", headers=headers)

    assert first.json()["tenant_id"] == second.json()["tenant_id"]
    db = testing_session()
    assert db.query(Tenant).count() == 1
    assert db.query(Profile).count() == 1
    assert db.query(UserRole).count() == 1
    db.close()


def test_invited_user_keeps_existing_tenant_and_becomes_seller():
    client, testing_session = _build_client()
    owner_tenant_id = client.post("/functions/v1/ensure-user", headers=auth_headers(OWNER_USER)).json()["tenant_id"]

    db = testing_session()
    db.add(Profile(id=SELLER_USER["id"], name="Bruno Lima", email=SELLER_USER["email"], tenant_id=owner_tenant_id))
    db.commit()
    db.close()

    response = client.post("/functions/v1/ensure-user", headers=auth_headers(SELLER_USER))

    assert response.status_code == 200
    assert response.json()["tenant_id"] == owner_tenant_id
    db = testing_session()
    role = db.query(UserRole).filter(UserRole.user_id == SELLER_USER["id"]).one()
    assert role.role == "seller"
    assert db.query(Tenant).count() == 1
    db.close()


def test_role_without_tenant_is_backfilled():
    client, testing_session = _build_client()
    db = testing_session()
    db.add(UserRole(user_id=OWNER_USER["id"], role="admin", tenant_id=None))
    db.commit()
    db.close()

    tenant_id = client.post("/functions/v1/ensure-user", headers=auth_headers(OWNER_USER)).json()["tenant_id"]

    db = testing_session()
    role = db.query(UserRole).filter(UserRole.user_id == OWNER_USER["id"]).one()
    assert role.tenant_id == tenant_id
    assert role.role == "admin"
    db.close()


def test_profile_without_tenant_adopts_owned_tenant():
    client, testing_session = _build_client()
    db = testing_session()
    owned = Tenant(name="Gráfica São João", slug="grafica-sao-joao-antiga", owner_id=OWNER_USER["id"])
    db.add(owned)
    db.add(Profile(id=OWNER_USER["id"], name="Ana Souza", email=OWNER_USER["email"], tenant_id=None))
    db.commit()
    owned_id = owned.id
    db.close()

    response = client.post("/functions/v1/ensure-user", headers=auth_headers(OWNER_USER))

    assert response.status_code == 200
    assert response.json()["tenant_id"] == owned_id
    db = testing_session()
    assert db.query(Tenant).count() == 1
    profile = db.query(Profile).filter(Profile.id == OWNER_USER["id"]).one()
    role = db.query(UserRole).filter(UserRole.user_id == OWNER_USER["id"]).one()
    assert profile.tenant_id == owned_id
    assert role.role == "admin"
    assert role.tenant_id == owned_id
    db.close()


def test_slug_collision_on_user_fragment_falls_back_to_full_id():
    client, testing_session = _build_client()

    first = client.post("/functions/v1/ensure-user", headers=auth_headers(SELLER_USER))
    second = client.post("/functions/v1/ensure-user", headers=auth_headers(OTHER_SELLER_USER))

    assert first.status_code == 200
    assert second.status_code == 200
    db = testing_session()
    slugs = {tenant.owner_id: tenant.slug for tenant in db.query(Tenant).all()}
    assert slugs[SELLER_USER["id"]] == "minha-empresa-0a1b2c3d"
    assert slugs[OTHER_SELLER_USER["id"]] == f"minha-empresa-{OTHER_SELLER_USER['id']}"
    db.close()


def test_ensure_user_without_token_is_rejected_before_any_write():
    client, testing_session = _build_client()

    response = client.post("/functions/v1/ensure-user")
    invalid = client.post("/functions/v1/ensure-user", headers={"Authorization": "Bearer not-a-jwt"})

    assert response.status_code == 401
    assert response.json() == {"error": "Não autorizado"}
    assert response.headers["access-control-allow-origin"] == "*"
    assert invalid.status_code == 401
    db = testing_session()
    assert db.query(Tenant).count() == 0
    db.close()


def test_ensure_user_preflight_returns_cors_headers():
    client, _ = _build_client()

    response = client.options("/functions/v1/ensure-user")

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"
    assert "authorization" in response.headers["access-control-allow-headers"]


def test_ensure_user_datastore_failure_returns_generic_error(monkeypatch):
    from pdv_api.routers import functions

    def _boom(_db, _identity):
        raise RuntimeError("db down")

    monkeypatch.setattr(functions, "ensure_user", _boom)
    client, _ = _build_client()

    response = client.post("/functions/v1/ensure-user", headers=auth_headers(OWNER_USER))

    assert response.status_code == 500
    assert response.json() == {"error": "Erro interno"}
