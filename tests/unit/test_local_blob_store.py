"""Tests for LocalBlobStore (filesystem backend with signed download URLs)."""

import io
from datetime import timedelta
from pathlib import Path
from urllib.parse import parse_qs, urlsplit

import pytest

from app.infrastructure.exceptions import (
    StorageNotFoundError,
    StoragePermissionError,
    StoragePresignError,
    StorageUploadError,
)
from app.infrastructure.external.storage.local_storage import LocalBlobStore
from app.shared.utils.datetime import utc_now

KEY = "applications/A1/D1.pdf"


@pytest.fixture
def root(tmp_path: Path) -> Path:
    return tmp_path / "blobs"


@pytest.fixture
def store(root: Path) -> LocalBlobStore:
    return LocalBlobStore(storage_root=str(root), signing_secret="s3cret")


async def _put(store: LocalBlobStore, key: str, content: bytes) -> None:
    await store.put(key, len(content), io.BytesIO(content), "application/pdf")


def _query(url: str) -> dict[str, str]:
    return {k: v[0] for k, v in parse_qs(urlsplit(url).query).items()}


def test_signing_secret_required(root: Path) -> None:
    with pytest.raises(ValueError, match="signing_secret"):
        LocalBlobStore(storage_root=str(root), signing_secret="")


async def test_put_writes_content(store: LocalBlobStore, root: Path) -> None:
    await _put(store, KEY, b"%PDF-1.7 content")

    assert (root / KEY).read_bytes() == b"%PDF-1.7 content"
    assert not list((root / "applications" / "A1").glob(".tmp_*"))
    assert store.bucket == "local"


async def test_put_streams_in_chunks(store: LocalBlobStore, root: Path) -> None:
    content = b"x" * (LocalBlobStore.CHUNK_SIZE * 3 + 17)
    await _put(store, KEY, content)
    assert (root / KEY).stat().st_size == len(content)


async def test_put_overwrites_silently(store: LocalBlobStore, root: Path) -> None:
    await _put(store, KEY, b"first")
    await _put(store, KEY, b"second")
    assert (root / KEY).read_bytes() == b"second"


async def test_put_short_stream_leaves_nothing(store: LocalBlobStore, root: Path) -> None:
    with pytest.raises(StorageUploadError) as exc_info:
        await store.put(KEY, 100, io.BytesIO(b"too short"), "application/pdf")

    assert exc_info.value.details["storage_key"] == KEY
    assert not (root / KEY).exists()
    assert not list((root / "applications" / "A1").glob(".tmp_*"))


@pytest.mark.parametrize("key", ["../escape.pdf", "applications/../../escape.pdf", ""])
async def test_put_rejects_keys_outside_root(store: LocalBlobStore, key: str) -> None:
    with pytest.raises(StoragePermissionError):
        await _put(store, key, b"data")


async def test_delete_is_idempotent(store: LocalBlobStore, root: Path) -> None:
    await _put(store, KEY, b"data")

    await store.delete(KEY)
    await store.delete(KEY)
    await store.delete("applications/never/existed.pdf")

    assert not (root / KEY).exists()
    assert not await store.exists(KEY)


async def test_delete_prunes_empty_directories(store: LocalBlobStore, root: Path) -> None:
    await _put(store, KEY, b"one")
    await _put(store, "applications/A1/D2.pdf", b"two")

    await store.delete(KEY)
    assert (root / "applications" / "A1").is_dir()

    await store.delete("applications/A1/D2.pdf")
    assert not (root / "applications").exists()
    assert root.is_dir()


async def test_presign_url_verifies(store: LocalBlobStore) -> None:
    url = await store.presign_download(KEY, timedelta(minutes=10))

    assert url.startswith("/api/v1/storage/download?")
    params = _query(url)
    assert params["key"] == KEY
    assert store.verify_download_signature(KEY, int(params["expires"]), params["signature"])


async def test_presign_expires_after_ttl(store: LocalBlobStore) -> None:
    issued = utc_now()
    url = await store.presign_download(KEY, timedelta(minutes=10))
    expires = int(_query(url)["expires"])

    assert abs(expires - (issued + timedelta(minutes=10)).timestamp()) < 2
    signature = _query(url)["signature"]
    later = issued + timedelta(minutes=11)
    assert not store.verify_download_signature(KEY, expires, signature, now=later)


async def test_signature_bound_to_key_and_expiry(store: LocalBlobStore) -> None:
    params = _query(await store.presign_download(KEY, timedelta(minutes=10)))
    expires, signature = int(params["expires"]), params["signature"]

    assert not store.verify_download_signature("applications/A1/other.pdf", expires, signature)
    assert not store.verify_download_signature(KEY, expires + 3600, signature)
    assert not store.verify_download_signature(KEY, expires, "0" * 64)


async def test_signature_depends_on_secret(root: Path) -> None:
    first = LocalBlobStore(storage_root=str(root), signing_secret="one")
    second = LocalBlobStore(storage_root=str(root), signing_secret="two")
    params = _query(await first.presign_download(KEY, timedelta(minutes=1)))
    assert not second.verify_download_signature(
        KEY, int(params["expires"]), params["signature"]
    )


async def test_presign_does_not_check_existence(store: LocalBlobStore) -> None:
    url = await store.presign_download("applications/A1/missing.pdf", timedelta(minutes=1))
    assert "missing.pdf" in url


async def test_presign_rejects_traversal(store: LocalBlobStore) -> None:
    with pytest.raises(StoragePresignError):
        await store.presign_download("../outside.pdf", timedelta(minutes=1))


async def test_presign_uses_base_url(root: Path) -> None:
    store = LocalBlobStore(
        storage_root=str(root), signing_secret="s", base_url="https://dms.example/"
    )
    url = await store.presign_download(KEY, timedelta(minutes=1))
    assert url.startswith("https://dms.example/api/v1/storage/download?")


async def test_open_stream_yields_content(store: LocalBlobStore) -> None:
    content = b"y" * (LocalBlobStore.CHUNK_SIZE + 5)
    await _put(store, KEY, content)

    chunks = [chunk async for chunk in store.open_stream(KEY)]

    assert b"".join(chunks) == content
    assert len(chunks) == 2


async def test_open_stream_missing_blob(store: LocalBlobStore) -> None:
    with pytest.raises(StorageNotFoundError):
        async for _ in store.open_stream("applications/A1/missing.pdf"):
            pass
