from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from carbon_api.core.errors import DataTransformError, ServiceError, UnauthenticatedError

logger = logging.getLogger(__name__)


async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    else:
        logger.info("%s %s -> %s: %s", request.method, request.url.path, exc.status_code, exc)

    body = {"detail": exc.detail}
    if isinstance(exc, DataTransformError):
        body = {
            "detail": {
                "error": "DATA_TRANSFORM_ERROR",
                "schema": exc.schema_name,
                "validation_errors": exc.validation_errors,
            }
        }

    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, UnauthenticatedError) else None
    return JSONResponse(status_code=exc.status_code, content=body, headers=headers)


def install_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ServiceError, service_error_handler)
