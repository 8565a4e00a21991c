"""Error Handlers — map every failure to the ledger's JSON error envelope.

Invariants:
    - CrowdLedgerError → its own code and HTTP status (400, 401, 403, 404, 409, 503, 504)
    - RequestValidationError → 400 VALIDATION_ERROR with one detail per offending field
    - Anything else → 500 INTERNAL_ERROR, message fixed, traceback only in the log
    - 401 responses carry WWW-Authenticate; retryable errors carry Retry-After

Design Decisions:
    - Three layers registered in order: ledger errors, request validation, catch-all
    - Rejections (4xx) log at warning, store and timeout failures at error: a rejected
      contribution is normal traffic
"""

import logging
import math

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from crowdledger.core.errors import CrowdLedgerError, ErrorCategory, ErrorSeverity

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(CrowdLedgerError, ledger_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)


async def ledger_error_handler(request: Request, exc: CrowdLedgerError) -> JSONResponse:
    logger.log(
        logging.ERROR if exc.http_status >= 500 else logging.WARNING,
        f"{exc.code}: {exc.message}",
        extra={
            "error_code": exc.code,
            "path": request.url.path,
            **exc.context.log_extra(),
        },
    )
    return JSONResponse(
        status_code=exc.http_status,
        content=exc.to_response(),
        headers=_response_headers(exc) or None,
    )


async def validation_error_handler(
    request: Request, exc: RequestValidationError,
) -> JSONResponse:
    details = [
        {
            "field": ".".join(str(part) for part in err["loc"]),
            "message": err["msg"],
            "type": err["type"],
        }
        for err in exc.errors()
    ]
    logger.warning(
        f"Validation error on {request.url.path}: {len(details)} field(s)",
        extra={"error_code": "VALIDATION_ERROR", "path": request.url.path},
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=_envelope(
            "VALIDATION_ERROR", "Invalid request data",
            ErrorCategory.VALIDATION, ErrorSeverity.ERROR, details=details,
        ),
    )


async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        f"Unhandled exception on {request.url.path}: {exc}",
        exc_info=True,
        extra={"error_code": "INTERNAL_ERROR", "path": request.url.path},
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_envelope(
            "INTERNAL_ERROR", "An unexpected error occurred",
            ErrorCategory.INTERNAL, ErrorSeverity.CRITICAL,
        ),
    )


def _response_headers(exc: CrowdLedgerError) -> dict[str, str]:
    headers = {}
    if exc.http_status == status.HTTP_401_UNAUTHORIZED:
        headers["WWW-Authenticate"] = "Bearer"
    if exc.context.retry_after_ms is not None:
        # Retry-After is whole seconds
        headers["Retry-After"] = str(max(1, math.ceil(exc.context.retry_after_ms / 1000)))
    return headers


def _envelope(
    code: str,
    message: str,
    category: ErrorCategory,
    severity: ErrorSeverity,
    **extra,
) -> dict:
    return {
        "error": {
            "code": code,
            "message": message,
            "category": category.value,
            "severity": severity.value,
            **extra,
        },
    }
