from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from inventory_service.core.errors import (
    DuplicateId,
    NotFoundError,
    StorageIOError,
    ValidationError,
)


def _detail(exc: Exception, status_code: int) -> JSONResponse:
    return JSONResponse({"detail": str(exc)}, status_code=status_code)


def install_exception_handlers(app: FastAPI) -> None:
    """Map inventory errors onto HTTP status codes."""

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError):
        return _detail(exc, status.HTTP_400_BAD_REQUEST)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse({"detail": jsonable_encoder(exc.errors())}, status_code=status.HTTP_400_BAD_REQUEST)

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError):
        return _detail(exc, status.HTTP_404_NOT_FOUND)

    @app.exception_handler(DuplicateId)
    async def duplicate_id_handler(request: Request, exc: DuplicateId):
        return _detail(exc, status.HTTP_409_CONFLICT)

    @app.exception_handler(StorageIOError)
    async def storage_error_handler(request: Request, exc: StorageIOError):
        logger = logging.getLogger("inventory_service.errors")
        request_id = request.headers.get("x-request-id") or "-"
        logger.error("storage failure path=%s err=%s", request.url.path, exc, extra={"request_id": request_id})
        return JSONResponse({"detail": "Internal Server Error"}, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)

    # Inventory endpoints never raise HTTPException themselves, so a 404 or
    # 405 here means the router found no route for the path and method.
    @app.exception_handler(StarletteHTTPException)
    async def unmatched_route_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code in (status.HTTP_404_NOT_FOUND, status.HTTP_405_METHOD_NOT_ALLOWED):
            return JSONResponse({"detail": "Method Not Allowed"}, status_code=status.HTTP_405_METHOD_NOT_ALLOWED)
        return JSONResponse({"detail": exc.detail}, status_code=exc.status_code, headers=getattr(exc, "headers", None))

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):  # type: ignore[override]
        logger = logging.getLogger("inventory_service.errors")
        request_id = request.headers.get("x-request-id") or "-"
        logger.error("unhandled exception path=%s err=%s", request.url.path, exc, extra={"request_id": request_id})
        return JSONResponse({"detail": "Internal Server Error"}, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)

