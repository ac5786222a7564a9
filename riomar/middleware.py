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
Request ID middleware.

Reuses the request id set by the load balancer, or mints a UUID, and keeps it
in the logging context for the whole request. Trophy writes are logged by
the ledger with the same id, so one id ties an HTTP call to its store calls.
"""

import time
import uuid
from typing import Awaitable, Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from riomar.config import get_settings
from riomar.logging import get_logger, set_request_context, clear_request_context

logger = get_logger(__name__)

CallNext = Callable[[Request], Awaitable[Response]]


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)


class RequestIDMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: ASGIApp):
        super().__init__(app)
        self.header_name = get_settings().request_id_header

    def _resolve_request_id(self, request: Request) -> str:
        incoming = request.headers.get(self.header_name, "").strip()
        return incoming or str(uuid.uuid4())

    async def dispatch(self, request: Request, call_next: CallNext) -> Response:
        request_id = self._resolve_request_id(request)
        set_request_context(
            request_id=request_id, path=request.url.path, method=request.method
        )
        started = time.perf_counter()
        logger.info("request_started")

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                "request_failed",
                error_type=type(e).__name__,
                duration_ms=_elapsed_ms(started),
                exc_info=True,
            )
            raise
        else:
            response.headers[self.header_name] = request_id
            log = logger.warning if response.status_code >= 500 else logger.info
            log(
                "request_completed",
                status_code=response.status_code,
                duration_ms=_elapsed_ms(started),
            )
            return response
        finally:
            clear_request_context()
