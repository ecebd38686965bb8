import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from stockwhisperer.exceptions import (
    AppError,
    ConflictError,
    NotFoundError,
    UpstreamError,
    ValidationError,
)

logger = structlog.get_logger()

# Most specific first; AppError catches the rest.
_STATUS_BY_ERROR: tuple[tuple[type[AppError], int], ...] = (
    (NotFoundError, 404),
    (ValidationError, 422),
    (ConflictError, 409),
    (UpstreamError, 502),
    (AppError, 500),
)


def status_for(exc: AppError) -> int:
    for error_type, status in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status
    return 500


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    status = status_for(exc)
    message = exc.message
    if isinstance(exc, UpstreamError):
        # provider details stay in the logs
        logger.warning("upstream_error", path=request.url.path, error=exc.message)
        message = "Market data provider is unavailable"
    elif status >= 500:
        logger.error("app_error", path=request.url.path, code=exc.code, error=exc.message)
    return JSONResponse(status_code=status, content={"error": exc.code, "message": message})


def register_exception_handlers(app: FastAPI) -> None:
    for error_type, _ in _STATUS_BY_ERROR:
        app.add_exception_handler(error_type, app_error_handler)
