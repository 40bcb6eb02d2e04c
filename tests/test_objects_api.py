from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError
from httpx import ASGITransport, AsyncClient

from core.objects.service import ObjectService
from core.storage.s3 import S3BlobStore
from services.api.main import create_app
from tests.fakes import BUCKET_URL, InMemoryRecords, RecordingLogger

PAYLOAD = b"0123456789"


def _client(app, **transport_options) -> AsyncClient:
    return AsyncClient(transport=ASGITransport(app=app, **transport_options), base_url="http://test")


@pytest.fixture()
def app(service):
    return create_app(service=service)


@pytest.mark.asyncio()
async def test_create_scenario(app, records):
    async with _client(app) as client:
        response = await client.post(
            "/objects",
            data={"title": "Beautiful Apartment"},
            files={"file": ("a.png", PAYLOAD, "image/png")},
        )

    assert response.status_code == 201, response.text
    body = response.json()
    assert body["title"] == "Beautiful Apartment"
    assert body["imageUrl"].startswith(BUCKET_URL)
    assert body["description"] is None
    assert body["storageKey"]
    assert body["id"] in records.rows


@pytest.mark.asyncio()
async def test_create_rejects_text_plain(app, records, blobs):
    async with _client(app) as client:
        response = await client.post(
            "/objects",
            data={"title": "Notes"},
            files={"file": ("notes.txt", b"hello", "text/plain")},
        )

    assert response.status_code == 400
    assert response.json()["message"] == "invalid content type"
    assert records.rows == {}
    assert blobs.uploads == []


@pytest.mark.asyncio()
async def test_create_without_file_is_bad_request(app, blobs):
    async with _client(app) as client:
        response = await client.post("/objects", data={"title": "No image"})

    assert response.status_code == 400
    assert response.json()["message"] == "image required"
    assert blobs.uploads == []


@pytest.mark.asyncio()
async def test_create_with_empty_file_is_bad_request(app, blobs):
    async with _client(app) as client:
        response = await client.post(
            "/objects",
            data={"title": "Empty"},
            files={"file": ("a.png", b"", "image/png")},
        )

    assert response.status_code == 400
    assert blobs.uploads == []


@pytest.mark.asyncio()
@pytest.mark.parametrize("form", [{}, {"title": "   "}, {"title": "x" * 201}])
async def test_create_validates_title(app, blobs, form):
    async with _client(app) as client:
        response = await client.post("/objects", data=form, files={"file": ("a.png", PAYLOAD, "image/png")})

    assert response.status_code == 400
    assert response.json()["error"] == "ValidationError"
    assert blobs.uploads == []


@pytest.mark.asyncio()
async def test_create_upstream_failure_is_500(app, blobs):
    blobs.fail_upload = True
    async with _client(app) as client:
        response = await client.post(
            "/objects",
            data={"title": "t"},
            files={"file": ("a.png", PAYLOAD, "image/png")},
        )

    assert response.status_code == 500
    body = response.json()
    assert body["error"] == "UpstreamFailure"
    assert "StorageUnavailable" not in body["message"]


@pytest.mark.asyncio()
async def test_list_get_and_delete(app):
    async with _client(app) as client:
        created = []
        for index in range(3):
            response = await client.post(
                "/objects",
                data={"title": f"t{index}", "description": f"d{index}"},
                files={"file": (f"{index}.png", PAYLOAD, "image/png")},
            )
            created.append(response.json())

        listed = await client.get("/objects")
        fetched = await client.get(f"/objects/{created[0]['id']}")
        deleted = await client.delete(f"/objects/{created[0]['id']}")
        deleted_again = await client.delete(f"/objects/{created[0]['id']}")

    assert listed.status_code == 200
    assert [item["title"] for item in listed.json()] == ["t2", "t1", "t0"]
    assert fetched.status_code == 200
    assert fetched.json() == created[0]
    assert deleted.status_code == 200
    assert deleted.json() == {"deleted": True}
    assert deleted_again.status_code == 404


@pytest.mark.asyncio()
async def test_get_unknown_id_is_404(app):
    async with _client(app) as client:
        response = await client.get("/objects/65a1b2c3d4e5f60718293a4b")

    assert response.status_code == 404
    assert "65a1b2c3d4e5f60718293a4b" in response.json()["message"]


@pytest.mark.asyncio()
async def test_delete_succeeds_when_blob_cleanup_fails(app, blobs, records):
    async with _client(app) as client:
        created = (
            await client.post(
                "/objects",
                data={"title": "t"},
                files={"file": ("a.png", PAYLOAD, "image/png")},
            )
        ).json()
        blobs.fail_delete = True
        response = await client.delete(f"/objects/{created['id']}")

    assert response.status_code == 200
    assert response.json() == {"deleted": True}
    assert records.rows == {}


@pytest.mark.asyncio()
async def test_delete_when_blob_already_removed_from_s3(records):
    s3_client = MagicMock()
    s3_client.delete_object.side_effect = ClientError(
        {"Error": {"Code": "NoSuchKey", "Message": "gone"}}, "DeleteObject"
    )
    store = S3BlobStore("test-bucket", region="eu-west-1", client=s3_client)
    log = RecordingLogger()
    app = create_app(service=ObjectService(records, store, log=log))

    async with _client(app) as client:
        created = (
            await client.post(
                "/objects",
                data={"title": "Beautiful Apartment"},
                files={"file": ("a.png", PAYLOAD, "image/png")},
            )
        ).json()
        response = await client.delete(f"/objects/{created['id']}")

    assert created["imageUrl"].startswith("https://test-bucket.s3.eu-west-1.amazonaws.com/")
    assert response.status_code == 200
    assert response.json() == {"deleted": True}
    assert "WARNING" not in log.levels()


@pytest.mark.asyncio()
async def test_unhandled_errors_are_500_without_internals(blobs):
    class BrokenRecords(InMemoryRecords):
        def list_all(self):
            raise RuntimeError("secret connection string")

    app = create_app(service=ObjectService(BrokenRecords(), blobs, log=RecordingLogger()))

    async with _client(app, raise_app_exceptions=False) as client:
        response = await client.get("/objects")

    assert response.status_code == 500
    assert "secret" not in response.text


@pytest.mark.asyncio()
async def test_health_endpoint(app):
    async with _client(app) as client:
        response = await client.get("/healthz")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


@pytest.mark.asyncio()
async def test_round_trip_against_mongo_and_s3_adapters():
    mongomock = pytest.importorskip("mongomock")
    from core.objects.repository import MongoObjectRepository

    repository = MongoObjectRepository(mongomock.MongoClient()["objects"]["objects"])
    s3_client = MagicMock()
    store = S3BlobStore("test-bucket", region="eu-west-1", client=s3_client)
    app = create_app(service=ObjectService(repository, store, log=RecordingLogger()))

    async with _client(app) as client:
        created = await client.post(
            "/objects",
            data={"title": "Beautiful Apartment", "description": ""},
            files={"file": ("a.png", PAYLOAD, "image/png")},
        )
        body = created.json()
        fetched = await client.get(f"/objects/{body['id']}")
        bogus = await client.get("/objects/not-an-object-id")
        deleted = await client.delete(f"/objects/{body['id']}")

    assert created.status_code == 201
    assert body["description"] is None
    assert fetched.json()["id"] == body["id"]
    assert fetched.json()["imageUrl"] == body["imageUrl"]
    assert bogus.status_code == 404
    assert deleted.json() == {"deleted": True}
    s3_client.delete_object.assert_called_once_with(Bucket="test-bucket", Key=body["storageKey"])
