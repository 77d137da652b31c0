"""Domain layer: enums and exceptions.

No dependencies on infrastructure or presentation. Used by application
and infrastructure layers.
"""

from app.domain.enums import DeleteStage, UploadStage
from app.domain.exceptions import (
    DmsException,
    PersistenceException,
    ResourceNotFoundException,
    SqlNotConfiguredException,
    StorageException,
    StorageKeyConflictException,
    ValidationException,
)

__all__ = [
    # Enums
    "DeleteStage",
    "UploadStage",
    # Exceptions
    "DmsException",
    "PersistenceException",
    "ResourceNotFoundException",
    "SqlNotConfiguredException",
    "StorageException",
    "StorageKeyConflictException",
    "ValidationException",
]
