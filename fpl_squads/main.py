# fpl_squads/main.py
import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError

from fpl_squads.api import routes_fpl, routes_scoring, routes_setup, routes_squads, routes_transfers
from fpl_squads.core.config import Settings, settings as default_settings
from fpl_squads.core.errors import SquadServiceError, StorageUnavailableError
from fpl_squads.core.logging import configure_logging
from fpl_squads.db.engine import Database
from fpl_squads.middleware.cache_log import CacheHeaderLogMiddleware
from fpl_squads.services.fpl import FPLClient

logger = logging.getLogger(__name__)

LOCAL_ORIGIN_RE = r"^https?://(localhost|127\.0\.0\.1)(:\d+)?$"


def create_app(
    settings: Optional[Settings] = None,
    *,
    database: Optional[Database] = None,
    fpl_client: Optional[FPLClient] = None,
) -> FastAPI:
    """
    Build the API. The storage handle and FPL client are created here unless
    injected, opened for the app's lifetime and closed on shutdown.
    """
    settings = settings or default_settings
    configure_logging(settings.LOG_LEVEL)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        settings.validate_at_startup()
        db = database or Database(settings.database_url)
        client = fpl_client or FPLClient.from_settings(settings)
        if settings.AUTO_CREATE_TABLES:
            db.create_tables()
        app.state.database = db
        app.state.fpl_client = client
        logger.info("%s started (env=%s, db=%s)", settings.APP_NAME, settings.APP_ENV, db.engine.url.render_as_string())
        try:
            yield
        finally:
            client.close()
            db.close()
            logger.info("%s stopped", settings.APP_NAME)

    app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)
    app.state.settings = settings
    app.add_middleware(CacheHeaderLogMiddleware)

    # Explicit whitelist plus any localhost port for dev frontends
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_origin_regex=LOCAL_ORIGIN_RE if settings.IS_LOCAL else None,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        max_age=600,
    )

    @app.exception_handler(SquadServiceError)
    async def _service_error(request: Request, exc: SquadServiceError):
        if exc.status_code >= 500:
            logger.error("%s %s -> %s: %s", request.method, request.url.path, exc.status_code, exc.detail)
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})

    @app.exception_handler(OperationalError)
    async def _db_unreachable(request: Request, exc: OperationalError):
        logger.error("Database error on %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(
            status_code=StorageUnavailableError.status_code,
            content={"detail": StorageUnavailableError.default_detail},
        )

    # Routers
    app.include_router(routes_setup.router)
    app.include_router(routes_squads.router)
    app.include_router(routes_transfers.router)
    app.include_router(routes_scoring.router)
    app.include_router(routes_fpl.router)

    @app.get("/health")
    def health(request: Request):
        try:
            request.app.state.database.ping()
            database_state = "connected"
        except StorageUnavailableError:
            database_state = "unavailable"
        return {"ok": database_state == "connected", "env": settings.APP_ENV, "database": database_state}

    return app


app = create_app()


def run() -> None:
    """Console entry point: serve the module-level app with uvicorn."""
    uvicorn.run(
        "fpl_squads.main:app",
        host=default_settings.HOST,
        port=default_settings.PORT,
        log_level=default_settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    run()
