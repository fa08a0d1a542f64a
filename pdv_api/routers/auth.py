# pdv_api/routers/auth.py
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from pdv_api.core.database import get_db
from pdv_api.services.recovery_links import RecoveryTokenError, consume_recovery_token

router = APIRouter(prefix="/api/auth", tags=["auth"])

logger = logging.getLogger(__name__)


@router.get("/recovery/verify")
def verify_recovery_link(
    token: str = Query(..., min_length=1),
    db: Session = Depends(get_db),
):
    """Consome o link de recuperação e redireciona para a tela de nova senha com a sessão no fragmento."""
    try:
        redirect_url = consume_recovery_token(db, token)
    except RecoveryTokenError as exc:
        logger.warning("[RECOVERY] link rejected status=%s detail=%s", exc.status_code, exc.detail)
        raise HTTPException(status_code=exc.status_code, detail=exc.detail)

    return RedirectResponse(url=redirect_url, status_code=status.HTTP_303_SEE_OTHER)
