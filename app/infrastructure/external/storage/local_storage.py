"""Local filesystem blob store with path validation, atomic writes and signed URLs."""

from __future__ import annotations

import hashlib
import hmac
import os
import tempfile
from collections.abc import AsyncIterator
from datetime import datetime, timedelta
from pathlib import Path
from typing import BinaryIO
from urllib.parse import urlencode

import aiofiles
import aiofiles.os

from app.infrastructure.exceptions import (
    StorageDeleteError,
    StorageNotFoundError,
    StoragePermissionError,
    StoragePresignError,
    StorageUploadError,
)
from app.shared.utils.datetime import utc_now

DOWNLOAD_PATH = "/api/v1/storage/download"


class LocalBlobStore:
    """Local filesystem blob store with atomic writes and path traversal protection.

    Paths are validated against storage_root. Writes stream to a temp file in
    the target directory, then rename. Download URLs carry an HMAC-SHA256
    signature over key and expiry, so any process sharing the secret can
    verify them without shared state.
    """

    CHUNK_SIZE = 64 * 1024  # 64KB

    def __init__(
        self,
        storage_root: str,
        signing_secret: str,
        base_url: str | None = None,
        bucket_name: str = "local",
    ) -> None:
        """Initialize local storage.

        Args:
            storage_root: Base directory for all files.
            signing_secret: Key for download URL signatures.
            base_url: Public base URL (e.g. https://api.example.com); relative URLs if None.
            bucket_name: Label recorded as the bucket of stored documents.
        """
        if not signing_secret:
            raise ValueError("signing_secret is required for local storage")
        self.storage_root = Path(storage_root).resolve()
        self.base_url = base_url.rstrip("/") if base_url else None
        self._secret = signing_secret.encode()
        self._bucket = bucket_name
        self.storage_root.mkdir(parents=True, exist_ok=True, mode=0o750)

    @property
    def bucket(self) -> str:
        return self._bucket

    def _get_full_path(self, key: str, operation: str = "path_validation") -> Path:
        """Resolve and validate path under storage_root. Raises StoragePermissionError if traversal."""
        full_path = (self.storage_root / key).resolve()
        try:
            full_path.relative_to(self.storage_root)
        except ValueError as e:
            raise StoragePermissionError(key, operation) from e
        if full_path == self.storage_root:
            raise StoragePermissionError(key, operation)
        return full_path

    async def put(
        self,
        key: str,
        size_bytes: int,
        content_stream: BinaryIO,
        content_type: str,
    ) -> None:
        """Stream content to key, replacing any existing file atomically."""
        target_path = self._get_full_path(key, "put")
        temp_path: str | None = None
        try:
            target_path.parent.mkdir(parents=True, exist_ok=True, mode=0o750)
            temp_fd, temp_path = tempfile.mkstemp(
                dir=target_path.parent,
                prefix=".tmp_",
                suffix=target_path.suffix,
            )
            os.close(temp_fd)
            written = 0
            async with aiofiles.open(temp_path, "wb") as f:
                while True:
                    chunk = content_stream.read(self.CHUNK_SIZE)
                    if not chunk:
                        break
                    await f.write(chunk)
                    written += len(chunk)
            if written != size_bytes:
                raise ValueError(
                    f"stream ended after {written} bytes, expected {size_bytes}"
                )
            os.chmod(temp_path, 0o640)
            os.replace(temp_path, target_path)
            temp_path = None
        except Exception as e:
            raise StorageUploadError(key, str(e), backend_code=type(e).__name__) from e
        finally:
            if temp_path is not None and os.path.exists(temp_path):
                os.unlink(temp_path)

    async def delete(self, key: str) -> None:
        """Delete file and prune empty parent directories. Missing file is success."""
        file_path = self._get_full_path(key, "delete")
        try:
            if not file_path.exists():
                return
            await aiofiles.os.remove(file_path)
            parent = file_path.parent
            while parent != self.storage_root:
                try:
                    if not any(parent.iterdir()):
                        parent.rmdir()
                        parent = parent.parent
                    else:
                        break
                except OSError:
                    break
        except Exception as e:
            raise StorageDeleteError(key, str(e), backend_code=type(e).__name__) from e

    async def exists(self, key: str) -> bool:
        """Return True if file exists."""
        try:
            return self._get_full_path(key).is_file()
        except StoragePermissionError:
            return False

    def _sign(self, key: str, expires: int) -> str:
        message = f"{key}\n{expires}".encode()
        return hmac.new(self._secret, message, hashlib.sha256).hexdigest()

    async def presign_download(self, key: str, ttl: timedelta) -> str:
        """Return signed download URL valid for ttl from now. The file is not checked."""
        try:
            self._get_full_path(key, "presign")
        except StoragePermissionError as e:
            raise StoragePresignError(key, e.message, backend_code=e.error_code) from e
        expires = int((utc_now() + ttl).timestamp())
        query = urlencode(
            {"key": key, "expires": expires, "signature": self._sign(key, expires)}
        )
        path = f"{DOWNLOAD_PATH}?{query}"
        return f"{self.base_url}{path}" if self.base_url else path

    def verify_download_signature(
        self,
        key: str,
        expires: int,
        signature: str,
        now: datetime | None = None,
    ) -> bool:
        """Return True if signature matches key and expiry and the URL has not expired."""
        current = (now or utc_now()).timestamp()
        if current > expires:
            return False
        return hmac.compare_digest(self._sign(key, expires), signature)

    async def open_stream(self, key: str) -> AsyncIterator[bytes]:
        """Stream file content in chunks."""
        file_path = self._get_full_path(key, "download")
        if not file_path.is_file():
            raise StorageNotFoundError(key)
        async with aiofiles.open(file_path, "rb") as f:
            while True:
                chunk = await f.read(self.CHUNK_SIZE)
                if not chunk:
                    break
                yield chunk
