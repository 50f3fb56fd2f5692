from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.responses import JSONResponse

from sqlalchemy.exc import OperationalError as SAOperationalError

from api.router import api_router
from core.bootstrap import ensure_schema
from core.config import settings
from core.database import ENGINE, DatabaseUnavailableError, SessionLocal, is_transient_db_connectivity_error, ping_database
from core.logging import setup_logging
from services.preferences import PreferenceStore
from services.timetable_store import StorageError


logger = logging.getLogger(__name__)


_DB_UNAVAILABLE = {
    "code": "DATABASE_UNAVAILABLE",
    "message": "Database temporarily unavailable. Please retry.",
}


@asynccontextmanager
async def _lifespan(app: FastAPI):
    if settings.auto_create_schema:
        ensure_schema(ENGINE)
    db = SessionLocal()
    try:
        app.state.preferences.load(db)
    except StorageError as exc:
        # The store loads lazily on first read; boot anyway so /health can report the outage.
        logger.warning("Could not load preferences at startup: %s", exc)
    finally:
        db.close()
    yield


def create_app() -> FastAPI:
    setup_logging(environment=settings.environment)
    is_production = settings.environment.lower() == "production"
    app = FastAPI(
        title="School Timetable API",
        version="0.1.0",
        docs_url=None if is_production else "/docs",
        redoc_url=None if is_production else "/redoc",
        openapi_url=None if is_production else "/openapi.json",
        lifespan=_lifespan,
    )
    app.state.preferences = PreferenceStore(defaults={"theme": settings.default_theme})

    @app.exception_handler(DatabaseUnavailableError)
    def _db_unavailable(_request, exc: DatabaseUnavailableError):
        logger.warning("Database unavailable (503)", exc_info=exc)
        return JSONResponse(status_code=503, content=_DB_UNAVAILABLE)

    @app.exception_handler(SAOperationalError)
    def _sqlalchemy_operational_error(_request, exc: SAOperationalError):
        if is_transient_db_connectivity_error(exc):
            logger.warning("Database transient connectivity error (503)", exc_info=exc)
            return JSONResponse(status_code=503, content=_DB_UNAVAILABLE)
        logger.error("Database operation failed", exc_info=exc)
        return JSONResponse(
            status_code=500,
            content={"code": "DATABASE_ERROR", "message": "Database operation failed."},
        )

    @app.exception_handler(StorageError)
    def _storage_error(_request, exc: StorageError):
        return JSONResponse(status_code=500, content={"code": "STORAGE_ERROR", "message": str(exc)})

    allow_origins = [settings.frontend_origin]
    allow_origin_regex = None
    if not is_production:
        allow_origins.extend(["http://localhost:5173", "http://127.0.0.1:5173"])
        allow_origin_regex = r"^https?://(localhost|127\.0\.0\.1)(:\d+)?$"

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allow_origins,
        allow_origin_regex=allow_origin_regex,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    def health() -> dict:
        # Always respond; reflect DB availability without crashing.
        return {"app": "ok", "database": "ok" if ping_database() else "down"}

    app.include_router(api_router, prefix="/api")
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="127.0.0.1", port=8000, reload=not (settings.environment.lower() == "production"))
