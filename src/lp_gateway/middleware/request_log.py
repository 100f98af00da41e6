"""Request correlation and access logging.

Every request gets a request_id (the caller's X-Request-ID when present)
stored on request.state for the ApiResponse envelope and echoed back in
the response header. Deploy and trade requests block on chain confirmation,
so latency is logged in seconds.

    INFO  [POST] /api/v1/deployments → 200 (41.3s) req_a1b2c3d4e5f6
    WARN  [POST] /api/v1/markets/ST1.mat/buy → 502 (12.0s) req_...
"""

import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("lp.request")

REQUEST_ID_HEADER = "X-Request-ID"
_MAX_REQUEST_ID_LEN = 64


def _request_id(request: Request) -> str:
    incoming = request.headers.get(REQUEST_ID_HEADER, "").strip()
    if incoming and len(incoming) <= _MAX_REQUEST_ID_LEN:
        return incoming
    return f"req_{uuid.uuid4().hex[:12]}"


class RequestLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = _request_id(request)
        request.state.request_id = request_id

        start = time.perf_counter()
        response = await call_next(request)
        elapsed_s = time.perf_counter() - start

        response.headers[REQUEST_ID_HEADER] = request_id
        level = logging.WARNING if response.status_code >= 500 else logging.INFO
        logger.log(
            level,
            "[%s] %s → %d (%.1fs) %s",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_s,
            request_id,
        )
        return response
