"""Route error taxonomy and JSON error responses"""
import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

log = structlog.get_logger(__name__)

NO_STORE = {"Cache-Control": "no-store"}


class RouteError(Exception):
    """Base for errors reported to the caller as {"error": message}"""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(RouteError):
    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(RouteError):
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(RouteError):
    """Duplicate driver numbering. Reported as 400 like the other input errors."""

    status_code = status.HTTP_400_BAD_REQUEST


class StoreError(RouteError):
    """A store call failed. The message names the operation, never the SQL."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, operation: str):
        super().__init__(f"Store operation failed: {operation}")
        self.operation = operation


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message}, headers=NO_STORE)


def _validation_message(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = [str(p) for p in err.get("loc", ()) if p != "body"]
        field = ".".join(loc)
        parts.append(f"{field}: {err.get('msg')}" if field else str(err.get("msg")))
    return "; ".join(parts) or "Invalid request"


async def route_error_handler(request: Request, exc: RouteError) -> JSONResponse:
    if isinstance(exc, StoreError):
        log.error("store_error", path=request.url.path, operation=exc.operation)
    else:
        log.info("request_rejected", path=request.url.path, status=exc.status_code, error=exc.message)
    return _error(exc.status_code, exc.message)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    message = _validation_message(exc)
    log.info("request_invalid", path=request.url.path, error=message)
    return _error(status.HTTP_400_BAD_REQUEST, message)


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return _error(exc.status_code, str(exc.detail))


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    log.exception("unhandled_error", path=request.url.path)
    return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Server error")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RouteError, route_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
