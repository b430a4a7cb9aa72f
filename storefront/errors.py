# storefront/errors.py
from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import Settings

logger = logging.getLogger(__name__)

GENERIC_MESSAGE = "Error interno del servidor"


class StoreError(Exception):
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(StoreError):
    status_code = 400


class AuthError(StoreError):
    status_code = 401


class ForbiddenError(StoreError):
    status_code = 403


class NotFoundError(StoreError):
    status_code = 404


class TransitionError(StoreError):
    status_code = 400


class ConflictError(StoreError):
    status_code = 409


class PersistenceError(StoreError):
    status_code = 500


def _field_name(loc) -> str:
    # drop the "body"/"query" prefix
    parts = [str(p) for p in loc[1:]] if len(loc) > 1 else [str(p) for p in loc]
    return ".".join(parts)


def install_error_handlers(app: FastAPI, settings: Settings) -> None:
    @app.exception_handler(StoreError)
    async def store_error_handler(request: Request, exc: StoreError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def validation_handler(request: Request, exc: RequestValidationError):
        details = [{"field": _field_name(e.get("loc", ())), "message": e.get("msg", "")} for e in exc.errors()]
        return JSONResponse(
            status_code=400,
            content={"error": "Datos de la solicitud inválidos", "details": details},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        message = exc.detail if isinstance(exc.detail, str) else "Error en la solicitud"
        if exc.status_code == 404 and message == "Not Found":
            message = "Ruta no encontrada"
        return JSONResponse(status_code=exc.status_code, content={"error": message}, headers=exc.headers)

    @app.exception_handler(SQLAlchemyError)
    async def database_error_handler(request: Request, exc: SQLAlchemyError):
        logger.exception("Database error on %s %s", request.method, request.url.path, exc_info=exc)
        message = GENERIC_MESSAGE if settings.is_production else f"Error de base de datos: {exc}"
        err = PersistenceError(message)
        return JSONResponse(status_code=err.status_code, content={"error": err.message})

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
        message = GENERIC_MESSAGE if settings.is_production else f"Error inesperado: {exc}"
        return JSONResponse(status_code=500, content={"error": message})
