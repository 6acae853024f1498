"""API perimeter — maps domain errors to HTTP responses.

Learn: Services raise eventkeeper.errors exceptions and know nothing
about HTTP. This module is the one place that decides status codes:

    Unauthenticated / InvalidCredentials → 401 (+ WWW-Authenticate: Bearer)
    Forbidden                            → 403
    ResourceNotFound                     → 404
    DuplicateIdentity                    → 409

Body shape: {"detail": <message>, "code": <machine-readable tag>}.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from eventkeeper.errors import (
    DuplicateIdentity,
    EventKeeperError,
    Forbidden,
    InvalidCredentials,
    ResourceNotFound,
    Unauthenticated,
)

logger = structlog.get_logger()

STATUS_BY_ERROR: dict[type[EventKeeperError], int] = {
    Unauthenticated: 401,
    InvalidCredentials: 401,
    Forbidden: 403,
    ResourceNotFound: 404,
    DuplicateIdentity: 409,
}

_BEARER_CHALLENGE = {"WWW-Authenticate": "Bearer"}


def status_for(exc: EventKeeperError) -> int:
    for cls in type(exc).__mro__:
        if cls in STATUS_BY_ERROR:
            return STATUS_BY_ERROR[cls]
    return 400


def error_response(exc: EventKeeperError) -> JSONResponse:
    status_code = status_for(exc)
    return JSONResponse(
        {"detail": exc.message, "code": exc.code},
        status_code=status_code,
        headers=_BEARER_CHALLENGE if status_code == 401 else None,
    )


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(EventKeeperError)
    async def domain_error_handler(request: Request, exc: EventKeeperError) -> JSONResponse:
        response = error_response(exc)
        logger.warning(
            "http.domain_error",
            code=exc.code,
            status=response.status_code,
            method=request.method,
            path=request.url.path,
        )
        return response
