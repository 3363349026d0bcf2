import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from restaurant_pos.exceptions import ServiceError, StorageError

logger = logging.getLogger(__name__)

STORAGE_ERROR_DETAIL = "Storage error, please retry"


def _format_validation_error(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(p) for p in error.get("loc", ()) if p != "body")
        parts.append(f"{location}: {error.get('msg')}" if location else error.get("msg", ""))
    return "; ".join(parts) or "Invalid request"


async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    if isinstance(exc, StorageError):
        # подробности уже в логе, клиенту отдаём общее сообщение
        return JSONResponse(status_code=exc.status_code, content={"detail": STORAGE_ERROR_DETAIL})

    logger.info("%s %s -> %s: %s", request.method, request.url.path, exc.status_code, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


async def storage_failure_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    # ошибка хранилища, не обёрнутая сервисом
    logger.error("%s %s -> 500: unhandled storage failure", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": STORAGE_ERROR_DETAIL})


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    message = _format_validation_error(exc)
    logger.info("%s %s -> 400: %s", request.method, request.url.path, message)
    return JSONResponse(status_code=400, content={"detail": message})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ServiceError, service_error_handler)
    app.add_exception_handler(SQLAlchemyError, storage_failure_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
