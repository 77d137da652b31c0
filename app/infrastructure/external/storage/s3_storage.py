"""S3-compatible object storage (AWS S3, MinIO, etc.) with presigned URLs."""

from __future__ import annotations

import asyncio
from datetime import timedelta
from typing import Any, BinaryIO

import boto3
from boto3.s3.transfer import TransferConfig
from botocore.config import Config
from botocore.exceptions import ClientError

from app.infrastructure.exceptions import (
    StorageDeleteError,
    StoragePresignError,
    StorageReadError,
    StorageUploadError,
)
from app.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

# Error codes S3-compatible backends return for a missing key on delete.
_MISSING_KEY_CODES = frozenset({"NoSuchKey", "404", "NotFound"})


def _client_error_codes(e: ClientError) -> dict[str, Any]:
    """Extract backend error code and HTTP status from a botocore ClientError."""
    return {
        "backend_code": e.response.get("Error", {}).get("Code"),
        "status_code": e.response.get("ResponseMetadata", {}).get("HTTPStatusCode"),
    }


class S3BlobStore:
    """S3-compatible blob store with server-side encryption and presigned URLs.

    Uses boto3 (sync) via asyncio.to_thread for async API. Transient failures
    (throttling, 5xx, connection errors) are retried by botocore according to
    max_attempts and retry_mode. Compatible with AWS S3, MinIO, DigitalOcean Spaces.
    """

    # Payloads above this go through the managed multipart transfer.
    MULTIPART_THRESHOLD = 8 * 1024 * 1024
    CHUNK_SIZE = 8 * 1024 * 1024

    def __init__(
        self,
        bucket: str,
        region: str = "us-east-1",
        endpoint_url: str | None = None,
        access_key: str | None = None,
        secret_key: str | None = None,
        max_attempts: int = 3,
        retry_mode: str = "standard",
    ) -> None:
        """Initialize S3 client.

        Args:
            bucket: Bucket name.
            region: AWS region.
            endpoint_url: Custom endpoint (MinIO/Spaces).
            access_key: Optional; uses env/IAM if not set.
            secret_key: Optional.
            max_attempts: Total attempts per request, including the first.
            retry_mode: botocore retry mode ('standard', 'adaptive', 'legacy').
        """
        self._bucket = bucket
        self.region = region
        self.endpoint_url = endpoint_url
        extra = {} if endpoint_url is None else {"endpoint_url": endpoint_url}
        self._client = boto3.client(
            "s3",
            region_name=region,
            aws_access_key_id=access_key,
            aws_secret_access_key=secret_key,
            config=Config(
                signature_version="s3v4",
                retries={"max_attempts": max_attempts, "mode": retry_mode},
            ),
            **extra,
        )
        self._transfer_config = TransferConfig(
            multipart_threshold=self.MULTIPART_THRESHOLD,
            multipart_chunksize=self.CHUNK_SIZE,
        )

    @property
    def bucket(self) -> str:
        return self._bucket

    async def put(
        self,
        key: str,
        size_bytes: int,
        content_stream: BinaryIO,
        content_type: str,
    ) -> None:
        """Stream content to key. Small payloads use one PUT; large ones go multipart."""

        def _put() -> None:
            if size_bytes <= self.MULTIPART_THRESHOLD:
                self._client.put_object(
                    Bucket=self._bucket,
                    Key=key,
                    Body=content_stream,
                    ContentLength=size_bytes,
                    ContentType=content_type,
                    ServerSideEncryption="AES256",
                )
            else:
                self._client.upload_fileobj(
                    content_stream,
                    self._bucket,
                    key,
                    ExtraArgs={
                        "ContentType": content_type,
                        "ServerSideEncryption": "AES256",
                    },
                    Config=self._transfer_config,
                )

        try:
            await asyncio.to_thread(_put)
        except ClientError as e:
            raise StorageUploadError(key, str(e), **_client_error_codes(e)) from e
        except Exception as e:
            raise StorageUploadError(key, str(e), backend_code=type(e).__name__) from e
        logger.info("Uploaded blob to s3://%s/%s (%d bytes)", self._bucket, key, size_bytes)

    async def delete(self, key: str) -> None:
        """Delete object. S3 reports success for missing keys; other backends may not."""

        def _delete() -> None:
            try:
                self._client.delete_object(Bucket=self._bucket, Key=key)
            except ClientError as e:
                if e.response.get("Error", {}).get("Code") in _MISSING_KEY_CODES:
                    return
                raise

        try:
            await asyncio.to_thread(_delete)
        except ClientError as e:
            raise StorageDeleteError(key, str(e), **_client_error_codes(e)) from e
        except Exception as e:
            raise StorageDeleteError(key, str(e), backend_code=type(e).__name__) from e
        logger.info("Deleted blob s3://%s/%s", self._bucket, key)

    async def exists(self, key: str) -> bool:
        """Return True if object exists, False if the backend reports it missing.

        Any other failure (access denied, throttling, connection errors) raises
        StorageReadError rather than being mistaken for a missing key.
        """

        def _exists() -> bool:
            try:
                self._client.head_object(Bucket=self._bucket, Key=key)
                return True
            except ClientError as e:
                if e.response.get("Error", {}).get("Code") in _MISSING_KEY_CODES:
                    return False
                raise

        try:
            return await asyncio.to_thread(_exists)
        except ClientError as e:
            raise StorageReadError(key, str(e), **_client_error_codes(e)) from e
        except Exception as e:
            raise StorageReadError(key, str(e), backend_code=type(e).__name__) from e

    async def presign_download(self, key: str, ttl: timedelta) -> str:
        """Return presigned GET URL valid for ttl. Signing only; no request is made."""

        def _presign() -> str:
            return self._client.generate_presigned_url(
                "get_object",
                Params={"Bucket": self._bucket, "Key": key},
                ExpiresIn=int(ttl.total_seconds()),
            )

        try:
            return await asyncio.to_thread(_presign)
        except ClientError as e:
            raise StoragePresignError(key, str(e), **_client_error_codes(e)) from e
        except Exception as e:
            raise StoragePresignError(key, str(e), backend_code=type(e).__name__) from e
