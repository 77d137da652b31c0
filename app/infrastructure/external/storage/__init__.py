"""Blob storage: local filesystem and S3-compatible backends.

Factory creates the backend from app.core.config. Implementations are loaded
lazily inside StorageFactory.create_blob_store() so the local backend never
imports boto3.

Implementations satisfy IBlobStore (bucket, put, delete, presign_download).
"""

from app.infrastructure.external.storage.factory import StorageFactory

__all__ = [
    "StorageFactory",
]
