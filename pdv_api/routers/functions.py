from __future__ import annotations

import json
import logging

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from pdv_api.core.config import FUNCTION_CORS_HEADERS
from pdv_api.core.database import get_db
from pdv_api.deps import identity_from_request
from pdv_api.services.password_reset import PasswordResetError, request_password_reset
from pdv_api.services.tenant_bootstrap import ensure_user

router = APIRouter(prefix="/functions/v1", tags=["functions"])

logger = logging.getLogger(__name__)


def _json(payload: dict, status_code: int = 200) -> JSONResponse:
    return JSONResponse(payload, status_code=status_code, headers=FUNCTION_CORS_HEADERS)


def _preflight() -> Response:
    return Response(status_code=200, headers=FUNCTION_CORS_HEADERS)


@router.options("/ensure-user")
def ensure_user_preflight():
    return _preflight()


@router.post("/ensure-user")
def ensure_user_function(request: Request, db: Session = Depends(get_db)):
    identity = identity_from_request(request)
    if identity is None:
        return _json({"error": "Não autorizado"}, status_code=401)

    request.state.user = identity
    try:
        tenant_id = ensure_user(db, identity)
    except Exception:
        db.rollback()
        logger.exception("[ENSURE_USER] ERROR user_id=%s", identity.id)
        return _json({"error": "Erro interno"}, status_code=500)

    request.state.tenant_id = tenant_id
    return _json({"ok": True, "tenant_id": tenant_id})


@router.options("/request-password-reset")
def request_password_reset_preflight():
    return _preflight()


@router.post("/request-password-reset")
async def request_password_reset_function(request: Request, db: Session = Depends(get_db)):
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        body = None
    if not isinstance(body, dict):
        body = {}

    redirect_url = body.get("redirectUrl")
    if not isinstance(redirect_url, str) or not redirect_url.strip():
        redirect_url = None

    try:
        result = request_password_reset(db, body.get("name"), redirect_url)
    except PasswordResetError as exc:
        return _json({"error": exc.detail}, status_code=exc.status_code)
    except Exception:
        db.rollback()
        logger.exception("[PASSWORD_RESET] unexpected error")
        return _json({"error": "Erro interno do servidor"}, status_code=500)

    return _json(result.to_payload())
