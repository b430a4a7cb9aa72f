# storefront/main.py
from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from . import __version__
from .config import Settings, configure_logging
from .database import Database
from .errors import install_error_handlers
from .routers import admin, catalog, dashboard, orders

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the API.  ``uvicorn storefront.main:create_app --factory``"""
    settings = settings or Settings.from_env()
    configure_logging(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        database = Database(settings)
        database.create_all()
        app.state.database = database
        logger.info("Storefront API started (%s)", settings.environment)
        try:
            yield
        finally:
            database.dispose()

    app = FastAPI(title="King Ice Gold API", version=__version__, lifespan=lifespan)
    app.state.settings = settings

    # -------------------------------------------------------------------------
    # CORS + request log
    # -------------------------------------------------------------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
        allow_headers=["Content-Type", "Authorization"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        ms = (time.perf_counter() - start) * 1000
        logger.info("%s %s -> %s (%.1fms)", request.method, request.url.path, response.status_code, ms)
        return response

    install_error_handlers(app, settings)

    # -------------------------------------------------------------------------
    # API
    # -------------------------------------------------------------------------
    app.include_router(orders.router)
    app.include_router(admin.router)
    app.include_router(dashboard.router)
    app.include_router(catalog.router)

    @app.get("/api/health")
    def health():
        return {"status": "ok", "service": "King Ice Gold API", "version": __version__}

    # -------------------------------------------------------------------------
    # Frontend (estáticos)
    # -------------------------------------------------------------------------
    if settings.frontend_dir and settings.frontend_dir.exists():
        app.mount("/", StaticFiles(directory=str(settings.frontend_dir), html=True), name="frontend")

    return app
