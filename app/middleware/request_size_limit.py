"""Request body size limit middleware.

Rejects requests whose body exceeds the configured maximum with 413. A
declared Content-Length is checked up front; otherwise (chunked transfer)
the body is counted as the application reads it, without buffering. Once
the limit is crossed the 413 is sent immediately and anything the
application sends afterwards is dropped.
"""

from typing import Callable

from app.middleware._asgi import get_header, send_json_error
from app.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


class BodyTooLarge(Exception):
    """Raised from receive() once the streamed body crosses the limit."""

    def __init__(self, received: int) -> None:
        super().__init__(f"request body exceeded limit after {received} bytes")
        self.received = received


async def _send_413(send: Callable, max_bytes: int, actual: int) -> None:
    await send_json_error(
        send,
        413,
        "PAYLOAD_TOO_LARGE",
        f"Request body must be at most {max_bytes} bytes",
        {"max_bytes": max_bytes, "received_bytes": actual},
    )


def RequestSizeLimitMiddleware(app: Callable, max_bytes: int) -> Callable:
    """Reject requests whose body exceeds max_bytes (Content-Length or chunked). Raw ASGI."""

    async def asgi_app(scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await app(scope, receive, send)
            return

        content_length = get_header(scope, "content-length")
        if content_length is not None and content_length.strip().isdigit():
            length = int(content_length)
            if length > max_bytes:
                await _send_413(send, max_bytes, length)
                return
            await app(scope, receive, send)
            return

        received = 0
        response_started = False
        rejected = False

        async def counting_receive() -> dict:
            nonlocal received, rejected
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > max_bytes and not response_started:
                    rejected = True
                    await _send_413(send, max_bytes, received)
                    raise BodyTooLarge(received)
            return message

        async def tracking_send(message: dict) -> None:
            nonlocal response_started
            if rejected:
                return
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await app(scope, counting_receive, tracking_send)
        except Exception:
            if not rejected:
                raise
            logger.info(
                "Rejected chunked request body over %d bytes: %s %s",
                max_bytes,
                scope.get("method", ""),
                scope.get("path", ""),
            )

    return asgi_app
