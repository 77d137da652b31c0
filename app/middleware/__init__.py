"""HTTP middleware: timeout, request size limit, request ID, security headers.

Applied in main app; order matters (last added with add_middleware = outermost).
Import and use from app.main.
"""

from app.middleware.request_id import RequestIDMiddleware
from app.middleware.request_size_limit import RequestSizeLimitMiddleware
from app.middleware.security_headers import SecurityHeadersMiddleware
from app.middleware.timeout import TimeoutMiddleware

__all__ = [
    "RequestIDMiddleware",
    "RequestSizeLimitMiddleware",
    "SecurityHeadersMiddleware",
    "TimeoutMiddleware",
]
