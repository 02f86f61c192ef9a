"""
Error mapping for the HTTP surface.

Every failure is rendered as ``{"error": {"code", "kind", "message"}}``.
The HTTP status follows the error kind; request validation failures are
BAD_REQUEST with code ``VALIDATION_ERROR``.
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from workshop_kernel.exceptions import ErrorKind, WorkshopError
from workshop_kernel.logging_config import get_logger

logger = get_logger("api.errors")

STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.BAD_REQUEST: 400,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.INTERNAL: 500,
}


def error_body(code: str, kind: ErrorKind, message: str) -> dict:
    return {"error": {"code": code, "kind": kind.value, "message": message}}


async def workshop_error_handler(request: Request, exc: WorkshopError) -> JSONResponse:
    status = STATUS_BY_KIND.get(exc.kind, 500)
    log = logger.error if status >= 500 else logger.info
    log(
        "api_request_failed",
        extra={
            "path": request.url.path,
            "method": request.method,
            "status": status,
            "error_code": exc.code,
        },
    )
    return JSONResponse(status_code=status, content=error_body(exc.code, exc.kind, exc.message))


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid request")
    if location:
        message = f"{location}: {message}"
    logger.info(
        "api_request_invalid",
        extra={"path": request.url.path, "method": request.method, "error_count": len(errors)},
    )
    return JSONResponse(
        status_code=400,
        content=error_body("VALIDATION_ERROR", ErrorKind.BAD_REQUEST, message),
    )


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(WorkshopError, workshop_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
