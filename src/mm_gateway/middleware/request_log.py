"""Access log for the ledger API.

Each request gets an id: the caller's ``X-Request-ID`` when it sends one,
otherwise a fresh ``req_<12 hex>``. The id lands on ``request.state`` for the
ApiResponse envelope and is echoed back in the response header.

    INFO [PUT] /api/v1/admin/transactions/9f1c… → 200 (18ms) req_a1b2c3d4e5f6
"""

import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("mm.request")

REQUEST_ID_HEADER = "X-Request-ID"
_MAX_INBOUND_ID = 64


def request_id_for(request: Request) -> str:
    inbound = request.headers.get(REQUEST_ID_HEADER, "").strip()
    if inbound and len(inbound) <= _MAX_INBOUND_ID:
        return inbound
    return f"req_{uuid.uuid4().hex[:12]}"


class RequestLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request_id_for(request)
        request.state.request_id = request_id

        started = time.perf_counter()
        response: Response = await call_next(request)
        took_ms = (time.perf_counter() - started) * 1000

        level = logging.WARNING if response.status_code >= 500 else logging.INFO
        logger.log(
            level,
            "[%s] %s → %d (%.0fms) %s",
            request.method,
            request.url.path,
            response.status_code,
            took_ms,
            request_id,
        )
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
