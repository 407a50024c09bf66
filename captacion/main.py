"""
CLC Captación — FastAPI app factory. The SnapshotStore lives on ``app.state``.
"""
from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from captacion.api.dependencies import domain_error_handler
from captacion.api.router_meta import router as meta_router
from captacion.api.router_push import router as push_router
from captacion.api.router_records import router as records_router
from captacion.api.router_snapshot import router as snapshot_router
from captacion.api.router_upload import router as upload_router
from captacion.config import BASE_FOLDER, EXPORTS_FOLDER, REPORTS_FOLDER
from captacion.data.store import SnapshotStore
from captacion.errors import CaptacionError
from captacion.logging_setup import configure_logging, get_logger

logger = get_logger(__name__)


def create_app(store: SnapshotStore | None = None) -> FastAPI:
    """Build the app. Without ``store``, a file-backed store is created at startup."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging()
        if getattr(app.state, "store", None) is None:
            for d in [BASE_FOLDER, EXPORTS_FOLDER, REPORTS_FOLDER]:
                d.mkdir(parents=True, exist_ok=True)
            app.state.store = SnapshotStore()
        try:
            logger.info("CLC Captación ready — %d records (%r)",
                        app.state.store.count(), app.state.store.backend)
        except CaptacionError as exc:
            logger.warning("CLC Captación started with an unreadable store: %s", exc)
        yield

    app = FastAPI(
        title="CLC Captación API",
        description="Client capture — spreadsheet ingestion, snapshot sync, remote push",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.store = store

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(CaptacionError, domain_error_handler)

    app.include_router(meta_router)
    app.include_router(records_router)
    app.include_router(upload_router)
    app.include_router(snapshot_router)
    app.include_router(push_router)
    return app


app = create_app()
