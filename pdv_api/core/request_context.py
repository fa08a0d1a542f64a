from __future__ import annotations

from contextvars import ContextVar
from dataclasses import dataclass, replace


@dataclass(frozen=True)
class RequestContext:
    request_id: str | None = None
    tenant_id: str | None = None
    user_id: str | None = None


_EMPTY = RequestContext()
_CONTEXT: ContextVar[RequestContext] = ContextVar("pdv_request_context", default=_EMPTY)


def set_request_context(
    *, request_id: str | None = None, tenant_id: str | None = None, user_id: str | None = None
) -> None:
    """Atualiza só os campos informados, mantendo os demais."""
    changes = {}
    if request_id is not None:
        changes["request_id"] = request_id
    if tenant_id is not None:
        changes["tenant_id"] = str(tenant_id)
    if user_id is not None:
        changes["user_id"] = str(user_id)
    if changes:
        _CONTEXT.set(replace(_CONTEXT.get(), **changes))


def get_request_id() -> str | None:
    return _CONTEXT.get().request_id


def get_tenant_id() -> str | None:
    return _CONTEXT.get().tenant_id


def get_user_id() -> str | None:
    return _CONTEXT.get().user_id


def clear_request_context() -> None:
    _CONTEXT.set(_EMPTY)
