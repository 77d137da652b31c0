"""Shared utilities: telemetry (logging) and cross-cutting helpers.

Used by domain, application, and infrastructure. No business logic.
"""

from app.shared.utils import (
    ensure_utc,
    generate_cuid,
    sanitize_filename,
    utc_now,
    validate_identifier,
)

__all__ = [
    "generate_cuid",
    "utc_now",
    "ensure_utc",
    "sanitize_filename",
    "validate_identifier",
]
