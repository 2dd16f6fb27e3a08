# src/inventory/core/logging/middleware.py
"""
Request id middleware.

Takes `X-Request-ID` from the client when it looks sane, otherwise generates a
UUID4; stores it in the request-id contextvar for the duration of the request
and echoes it back on the response.
"""

import re
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from .filters import set_request_id, reset_request_id

REQUEST_ID_HEADER = "X-Request-ID"

# Printable token, no whitespace/newlines (log injection), bounded length
_VALID_REQUEST_ID = re.compile(r"[A-Za-z0-9._:-]{1,128}")


def choose_request_id(incoming: str | None) -> str:
    if incoming and _VALID_REQUEST_ID.fullmatch(incoming):
        return incoming
    return str(uuid.uuid4())


class RequestIDMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        rid = choose_request_id(request.headers.get(REQUEST_ID_HEADER))
        # read by the 500 handler, which runs after the reset below
        request.state.request_id = rid
        token = set_request_id(rid)
        try:
            response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = rid
            return response
        finally:
            reset_request_id(token)
