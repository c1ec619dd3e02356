"""FastAPI application factory."""

from __future__ import annotations

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse

from staydesk.infra.db import DataAccessError
from staydesk.observability.correlation import (
    CORRELATION_ID_HEADER,
    reset_correlation_id,
    resolve_correlation_id,
    set_correlation_id,
)
from staydesk.observability.logging import get_logger

from .routers import public

logger = get_logger(__name__)


def create_app() -> FastAPI:
    """Create the FastAPI app with correlation middleware and error mapping."""
    app = FastAPI(
        title="Staydesk",
        docs_url=None,
        redoc_url=None,
    )

    @app.middleware("http")
    async def correlation_id_middleware(request: Request, call_next) -> Response:
        cid = resolve_correlation_id(request.headers.get(CORRELATION_ID_HEADER))
        token = set_correlation_id(cid)
        try:
            response = await call_next(request)
            response.headers[CORRELATION_ID_HEADER] = cid
            return response
        finally:
            reset_correlation_id(token)

    @app.exception_handler(DataAccessError)
    async def data_access_error_handler(request: Request, exc: DataAccessError) -> JSONResponse:
        logger.error(
            "data access failed",
            exc_info=exc,
            extra={
                "extra_fields": {
                    "method": request.method,
                    "path": request.url.path,
                }
            },
        )
        return JSONResponse(status_code=503, content={"detail": "Database unavailable"})

    app.include_router(public.router)

    return app
