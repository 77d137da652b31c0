"""Application layer: document use cases, DTOs, and ports.

Depends on domain only; infrastructure is injected through the
protocols in app.application.interfaces.
"""
