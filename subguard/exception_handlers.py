import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from subguard.exceptions import AppError, ConflictError, NotFoundError, ValidationError

logger = structlog.get_logger()

# First match wins; anything else is a 500.
_STATUS_CODES: list[tuple[type[AppError], int]] = [
    (NotFoundError, 404),
    (ValidationError, 422),
    (ConflictError, 409),
]


def status_code_for(exc: AppError) -> int:
    return next((code for kind, code in _STATUS_CODES if isinstance(exc, kind)), 500)


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    status_code = status_code_for(exc)
    if status_code >= 500:
        logger.error("request_failed", path=request.url.path, code=exc.code, error=exc.message)
    else:
        logger.info(
            "request_rejected",
            path=request.url.path,
            status_code=status_code,
            code=exc.code,
        )
    return JSONResponse(
        status_code=status_code,
        content={"error": exc.code, "message": exc.message},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
