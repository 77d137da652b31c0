"""Application interfaces (ports): repository and blob store protocols.

Define contracts for infrastructure implementations (DIP).
No runtime imports from app.infrastructure or app.api.
"""

from app.application.interfaces.repositories import IDocumentRepository
from app.application.interfaces.storage import IBlobStore

__all__ = [
    "IBlobStore",
    "IDocumentRepository",
]
