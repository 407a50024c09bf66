"""
FastAPI dependencies — the app-owned SnapshotStore, role parsing, error mapping.
"""
from __future__ import annotations

from fastapi import HTTPException, Query, Request
from fastapi.responses import JSONResponse

from captacion.data.schemas import Role
from captacion.data.store import SnapshotStore
from captacion.errors import CaptacionError, ConfigurationError, FormatError, NetworkFailure

_STATUS = {
    FormatError: 400,
    ConfigurationError: 503,
    NetworkFailure: 502,
}


def get_store(request: Request) -> SnapshotStore:
    """The store created by ``create_app`` (one per app instance, no module global)."""
    store = getattr(request.app.state, "store", None)
    if store is None:
        raise HTTPException(503, "Server not initialized yet")
    return store


def parse_role(role: str = Query("agent", description="admin|agent")) -> Role:
    try:
        return Role(role.strip().lower())
    except ValueError:
        raise HTTPException(400, f"Invalid role: {role}. Valid: {[r.value for r in Role]}")


def http_error(exc: CaptacionError) -> HTTPException:
    """HTTPException for a domain error; a NetworkFailure keeps the remote detail verbatim."""
    status = next((code for cls, code in _STATUS.items() if isinstance(exc, cls)), 500)
    if isinstance(exc, NetworkFailure) and exc.detail:
        return HTTPException(status, {"message": str(exc), "detail": exc.detail})
    return HTTPException(status, str(exc))


async def domain_error_handler(request: Request, exc: CaptacionError) -> JSONResponse:
    """Domain errors escaping a route (e.g. a corrupt store on read) get the mapped status."""
    http = http_error(exc)
    return JSONResponse(status_code=http.status_code, content={"detail": http.detail})
