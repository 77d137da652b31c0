"""Blob store factory: creates local or S3 backend from settings."""

from __future__ import annotations

from typing import TYPE_CHECKING

from app.application.interfaces.storage import IBlobStore

if TYPE_CHECKING:
    from app.core.config import Settings


class StorageFactory:
    """Factory for blob store instances based on configuration."""

    @staticmethod
    def create_blob_store(settings: "Settings | None" = None) -> IBlobStore:
        """Create blob store from settings.

        Args:
            settings: Application settings; if None, uses get_settings().

        Returns:
            LocalBlobStore or S3BlobStore.

        Raises:
            ValueError: Unknown backend or missing required config.
        """
        from app.core.config import get_settings

        s = settings or get_settings()
        backend = s.storage_backend

        if backend == "local":
            from app.infrastructure.external.storage.local_storage import (
                LocalBlobStore,
            )

            if not s.storage_root:
                raise ValueError("STORAGE_ROOT required for local backend")
            if s.storage_signing_secret is None:
                raise ValueError("STORAGE_SIGNING_SECRET required for local backend")
            return LocalBlobStore(
                storage_root=s.storage_root,
                signing_secret=s.storage_signing_secret.get_secret_value(),
                base_url=s.storage_base_url,
            )
        if backend == "s3":
            if not s.s3_bucket:
                raise ValueError("S3_BUCKET required for s3 backend")
            from app.infrastructure.external.storage.s3_storage import S3BlobStore

            return S3BlobStore(
                bucket=s.s3_bucket,
                region=s.s3_region,
                endpoint_url=s.s3_endpoint_url,
                access_key=s.s3_access_key,
                secret_key=(
                    s.s3_secret_key.get_secret_value() if s.s3_secret_key else None
                ),
                max_attempts=s.s3_max_attempts,
                retry_mode=s.s3_retry_mode,
            )
        raise ValueError(
            f"Unknown storage backend: {backend}. Supported: 'local', 's3'"
        )
