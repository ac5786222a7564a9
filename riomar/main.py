# Copyright 2025 John Brosnihan
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""
Riomar Trophy Service - Main Application

Wires the routers and request middleware into the FastAPI app and renders
every error as the same JSON envelope:

    {"error": <kind>, "message": <text>, "request_id": <id>, ...}
"""

from typing import Any, Optional

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from riomar.config import get_settings
from riomar.logging import configure_logging, get_logger
from riomar.middleware import RequestIDMiddleware
from riomar.routers import leaderboard, pois, service, trophies

configure_logging()
logger = get_logger(__name__)

settings = get_settings()

app = FastAPI(
    title="Riomar Trophy API",
    description="Trophy counters, points of interest and leaderboard for the Riomar app",
    version=settings.build_version,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(RequestIDMiddleware)

app.include_router(service.router)
app.include_router(trophies.router)
app.include_router(pois.router)
app.include_router(leaderboard.router)


def _error_response(
    request: Request,
    http_status: int,
    error: str,
    message: Any,
    headers: Optional[dict[str, str]] = None,
    **extra: Any,
) -> JSONResponse:
    request_id = request.headers.get(settings.request_id_header.lower(), "unknown")
    body = {"error": error, "message": message, "request_id": request_id, **extra}
    return JSONResponse(status_code=http_status, content=body, headers=headers)


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    logger.warning("http_exception", status_code=exc.status_code, detail=exc.detail)
    return _error_response(
        request,
        exc.status_code,
        "http_error",
        exc.detail,
        headers=exc.headers,
        status_code=exc.status_code,
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """422 with the pydantic error list; 'ctx' may hold non-JSON values and is dropped."""
    errors = [
        {key: value for key, value in error.items() if key != "ctx"}
        for error in exc.errors()
    ]
    logger.warning("validation_error", errors=errors)
    return _error_response(
        request,
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "validation_error",
        "Request validation failed",
        errors=errors,
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Uncaught exceptions become a 500; the exception type and text are shown in dev only."""
    logger.error(
        "unhandled_exception",
        error_type=type(exc).__name__,
        error_message=str(exc),
        path=request.url.path,
        exc_info=True,
    )

    if settings.service_environment == "dev":
        return _error_response(
            request,
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "internal_error",
            f"{type(exc).__name__}: {exc}",
            type=type(exc).__name__,
        )
    return _error_response(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "internal_error",
        "An internal error occurred. Please contact support with the request ID.",
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "riomar.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.service_environment == "dev",
        log_level=settings.log_level.lower(),
    )
