"""Blob store interface (port). Implementations: S3BlobStore, LocalBlobStore."""

from datetime import timedelta
from typing import BinaryIO, Protocol


class IBlobStore(Protocol):
    """Protocol for object storage backends used by the document services.

    Every method raises a StorageException subclass on backend failure.
    """

    @property
    def bucket(self) -> str:
        """Bucket (or container) name recorded on document records."""
        ...

    async def put(
        self,
        key: str,
        size_bytes: int,
        content_stream: BinaryIO,
        content_type: str,
    ) -> None:
        """Stream content to key. Overwrites silently; callers own key uniqueness."""
        ...

    async def delete(self, key: str) -> None:
        """Delete key. Idempotent: a missing key is not an error."""
        ...

    async def presign_download(self, key: str, ttl: timedelta) -> str:
        """Return a credential-free read URL valid for ttl. Does not check existence."""
        ...
