"""Unit tests for DocumentQueryService (metadata, download URLs, listing)."""

from datetime import timedelta
from unittest.mock import AsyncMock

import pytest

from app.application.dtos.document import DocumentResult, DocumentView, UploadPolicy
from app.application.use_cases.documents import DocumentQueryService
from app.domain.exceptions import ResourceNotFoundException
from app.infrastructure.exceptions import StoragePresignError
from app.shared.utils.datetime import utc_now


def _doc(doc_id: str, application_id: str | None = "A1") -> DocumentResult:
    now = utc_now()
    return DocumentResult(
        id=doc_id,
        application_id=application_id,
        storage_bucket="docs-bucket",
        storage_key=f"applications/{application_id}/{doc_id}.pdf",
        original_filename=f"{doc_id}.pdf",
        content_type="application/pdf",
        size_bytes=2048,
        created_at=now,
        updated_at=now,
    )


@pytest.fixture
def blob_store() -> AsyncMock:
    store = AsyncMock()
    store.presign_download.side_effect = lambda key, ttl: f"https://signed.example/{key}"
    return store


@pytest.fixture
def repo() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def query_svc(blob_store: AsyncMock, repo: AsyncMock) -> DocumentQueryService:
    policy = UploadPolicy(
        max_size_bytes=1024,
        allowed_content_types=frozenset({"application/pdf"}),
        download_url_ttl=timedelta(minutes=5),
    )
    return DocumentQueryService(blob_store=blob_store, document_repo=repo, policy=policy)


async def test_get_download_url_signs_stored_key(query_svc, blob_store, repo) -> None:
    repo.get_by_id.return_value = _doc("D1")

    link = await query_svc.get_download_url("D1")

    assert link.url == "https://signed.example/applications/A1/D1.pdf"
    assert link.expires_in_seconds == 300
    blob_store.presign_download.assert_awaited_once_with(
        "applications/A1/D1.pdf", timedelta(minutes=5)
    )


async def test_get_download_url_unknown_document(query_svc, blob_store, repo) -> None:
    repo.get_by_id.return_value = None

    with pytest.raises(ResourceNotFoundException):
        await query_svc.get_download_url("missing")

    blob_store.presign_download.assert_not_awaited()


async def test_get_download_url_propagates_presign_failure(
    query_svc, blob_store, repo
) -> None:
    repo.get_by_id.return_value = _doc("D1")
    blob_store.presign_download.side_effect = StoragePresignError("k", "no credentials")

    with pytest.raises(StoragePresignError):
        await query_svc.get_download_url("D1")


async def test_download_url_for_application_uses_first_document(
    query_svc, repo
) -> None:
    repo.get_by_application_id.return_value = [_doc("D1"), _doc("D2")]

    link = await query_svc.get_download_url_for_application("A1")

    assert link.url.endswith("/D1.pdf")
    repo.get_by_application_id.assert_awaited_once_with("A1")


async def test_download_url_for_application_without_documents(query_svc, repo) -> None:
    repo.get_by_application_id.return_value = []

    with pytest.raises(ResourceNotFoundException) as exc_info:
        await query_svc.get_download_url_for_application("A9")

    assert exc_info.value.details["resource_id"] == "A9"


async def test_get_document_metadata_hides_storage_location(query_svc, repo) -> None:
    repo.get_by_id.return_value = _doc("D1")

    view = await query_svc.get_document_metadata("D1")

    assert isinstance(view, DocumentView)
    assert view.id == "D1"
    assert view.size_bytes == 2048
    assert not hasattr(view, "storage_key")
    assert not hasattr(view, "storage_bucket")


async def test_get_document_metadata_unknown(query_svc, repo) -> None:
    repo.get_by_id.return_value = None
    with pytest.raises(ResourceNotFoundException):
        await query_svc.get_document_metadata("missing")


async def test_list_documents(query_svc, repo) -> None:
    repo.get_by_application_id.return_value = [_doc("D1"), _doc("D2")]

    views = await query_svc.list_documents("A1")

    assert [v.id for v in views] == ["D1", "D2"]


async def test_list_documents_empty(query_svc, repo) -> None:
    repo.get_by_application_id.return_value = []
    assert await query_svc.list_documents("A1") == []
