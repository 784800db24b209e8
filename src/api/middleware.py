"""
Trace id middleware.

Every request carries a trace id (honoured from X-Trace-Id or generated)
that flows into invite rows and audit events and is echoed back.
"""

import logging
import re
import time

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from src.domain.base import generate_trace_id

logger = logging.getLogger(__name__)

TRACE_HEADER = "X-Trace-Id"
TRACE_ID_PATTERN = re.compile(r"^[A-Za-z0-9_.-]{1,64}$")


class TraceIdMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, log_requests: bool = True):
        super().__init__(app)
        self.log_requests = log_requests

    async def dispatch(self, request: Request, call_next):
        incoming = request.headers.get(TRACE_HEADER, "")
        trace_id = incoming if TRACE_ID_PATTERN.match(incoming) else generate_trace_id()
        request.state.trace_id = trace_id

        start_time = time.time()
        response = await call_next(request)
        response.headers[TRACE_HEADER] = trace_id

        if self.log_requests:
            logger.info(
                "%s %s %d %.1fms trace=%s",
                request.method,
                request.url.path,
                response.status_code,
                (time.time() - start_time) * 1000,
                trace_id,
            )
        return response
