"""Request ID middleware.

Generates or forwards X-Request-ID, sets it on the response and binds it to
the logging context for the duration of the request. Client-provided values
are sanitized (length + character set) to prevent log injection.
"""

import re
import uuid
from typing import Callable

from app.middleware._asgi import get_header
from app.shared.telemetry.logging import request_id_var

REQUEST_ID_MAX_LENGTH = 64
REQUEST_ID_ALLOWED_PATTERN = re.compile(
    r"^[a-zA-Z0-9_-]{1," + str(REQUEST_ID_MAX_LENGTH) + r"}$"
)


def _sanitize_request_id(raw: str | None) -> str:
    """Return raw if valid and safe; otherwise return a new UUID."""
    candidate = (raw or "").strip()
    if not REQUEST_ID_ALLOWED_PATTERN.match(candidate):
        return str(uuid.uuid4())
    return candidate


def RequestIDMiddleware(app: Callable, header_name: str = "X-Request-ID") -> Callable:
    """Add or forward the request id header on each request and response. Raw ASGI."""
    header_bytes = header_name.lower().encode()

    async def asgi_app(scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await app(scope, receive, send)
            return
        request_id = _sanitize_request_id(get_header(scope, header_name))
        scope.setdefault("state", {})["request_id"] = request_id

        async def send_wrapper(message: dict) -> None:
            if message["type"] == "http.response.start":
                headers = [
                    h for h in message.get("headers", []) if h[0].lower() != header_bytes
                ]
                headers.append((header_bytes, request_id.encode()))
                message["headers"] = headers
            await send(message)

        token = request_id_var.set(request_id)
        try:
            await app(scope, receive, send_wrapper)
        finally:
            request_id_var.reset(token)

    return asgi_app
