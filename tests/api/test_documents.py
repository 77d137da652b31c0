"""HTTP tests for the document API and the local signed download route."""

from httpx import AsyncClient

PDF = b"%PDF-1.7\n" + b"r" * (2048 - 9)


async def _upload(
    client: AsyncClient,
    application_id: str = "A1",
    content: bytes = PDF,
    filename: str = "resume.pdf",
    content_type: str = "application/pdf",
):
    return await client.post(
        f"/api/v1/applications/{application_id}/documents",
        files={"file": (filename, content, content_type)},
    )


async def test_document_lifecycle(client: AsyncClient) -> None:
    """Upload, read, download, re-associate and delete a document."""
    created = await _upload(client)
    assert created.status_code == 201
    body = created.json()
    assert body["message"] == "File uploaded successfully"
    assert body["expires_in_seconds"] == 600
    document_id = body["document_id"]

    download = await client.get(body["download_url"])
    assert download.status_code == 200
    assert download.content == PDF
    assert download.headers["content-type"] == "application/pdf"

    listed = await client.get("/api/v1/applications/A1/documents")
    assert listed.status_code == 200
    assert [d["id"] for d in listed.json()] == [document_id]

    meta = await client.get(f"/api/v1/documents/{document_id}")
    assert meta.status_code == 200
    data = meta.json()
    assert data["application_id"] == "A1"
    assert data["original_filename"] == "resume.pdf"
    assert data["content_type"] == "application/pdf"
    assert data["size_bytes"] == 2048
    assert "storage_key" not in data
    assert "storage_bucket" not in data

    moved = await client.put(
        f"/api/v1/documents/{document_id}", json={"application_id": "A2"}
    )
    assert moved.status_code == 200
    assert moved.json()["application_id"] == "A2"
    assert (await client.get("/api/v1/applications/A1/documents")).json() == []

    app_link = await client.get("/api/v1/applications/A2/download-url")
    assert app_link.status_code == 200
    assert app_link.json()["expires_in_seconds"] == 600

    deleted = await client.delete(f"/api/v1/documents/{document_id}")
    assert deleted.status_code == 204
    assert (await client.get(f"/api/v1/documents/{document_id}")).status_code == 404

    stale = await client.get(body["download_url"])
    assert stale.status_code == 404
    assert stale.json()["error"] == "STORAGE_NOT_FOUND"


async def test_document_download_url(client: AsyncClient) -> None:
    document_id = (await _upload(client)).json()["document_id"]

    response = await client.get(f"/api/v1/documents/{document_id}/download-url")

    assert response.status_code == 200
    url = response.json()["url"]
    assert url.startswith("/api/v1/storage/download?")
    assert (await client.get(url)).content == PDF


async def test_application_download_url_is_first_document(client: AsyncClient) -> None:
    await _upload(client, content=b"first document")
    await _upload(client, content=b"second document")

    link = (await client.get("/api/v1/applications/A1/download-url")).json()

    assert (await client.get(link["url"])).content == b"first document"


async def test_application_without_documents(client: AsyncClient) -> None:
    response = await client.get("/api/v1/applications/empty/download-url")
    assert response.status_code == 404
    assert response.json()["error"] == "RESOURCE_NOT_FOUND"


async def test_unknown_document_is_404(client: AsyncClient) -> None:
    for response in (
        await client.get("/api/v1/documents/missing"),
        await client.get("/api/v1/documents/missing/download-url"),
        await client.put("/api/v1/documents/missing", json={"application_id": "A2"}),
        await client.delete("/api/v1/documents/missing"),
    ):
        assert response.status_code == 404
        assert response.json()["error"] == "RESOURCE_NOT_FOUND"


async def test_upload_rejects_disallowed_type(client: AsyncClient) -> None:
    response = await _upload(client, filename="photo.png", content_type="image/png")
    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "VALIDATION_ERROR"
    assert body["details"]["field"] == "content_type"
    assert (await client.get("/api/v1/applications/A1/documents")).json() == []


async def test_upload_rejects_empty_file(client: AsyncClient) -> None:
    response = await _upload(client, content=b"")
    assert response.status_code == 400
    assert response.json()["details"]["field"] == "file"


async def test_upload_rejects_unsafe_application_id(client: AsyncClient) -> None:
    response = await _upload(client, application_id="bad!id")
    assert response.status_code == 400
    assert response.json()["details"]["field"] == "application_id"


async def test_upload_requires_file_part(client: AsyncClient) -> None:
    response = await client.post(
        "/api/v1/applications/A1/documents", data={"note": "no file"}
    )
    assert response.status_code == 422


async def test_oversized_request_body_is_413(client: AsyncClient) -> None:
    response = await _upload(client, content=b"x" * (12 * 1024 * 1024))
    assert response.status_code == 413


async def test_update_can_clear_association(client: AsyncClient) -> None:
    document_id = (await _upload(client)).json()["document_id"]

    response = await client.put(
        f"/api/v1/documents/{document_id}", json={"application_id": None}
    )

    assert response.status_code == 200
    assert response.json()["application_id"] is None


async def test_update_rejects_unsafe_application_id(client: AsyncClient) -> None:
    document_id = (await _upload(client)).json()["document_id"]

    response = await client.put(
        f"/api/v1/documents/{document_id}", json={"application_id": "../A2"}
    )

    assert response.status_code == 400
    assert response.json()["details"]["field"] == "application_id"


async def test_tampered_download_link_is_forbidden(client: AsyncClient) -> None:
    url = (await _upload(client)).json()["download_url"]

    response = await client.get(url.replace("applications%2FA1", "applications%2FA2"))
    forged = await client.get(url[: -4] + "0000")

    assert response.status_code == 403
    assert forged.status_code == 403
