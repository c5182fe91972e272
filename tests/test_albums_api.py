# Copyright (C) 2024 Albumstore Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Album endpoint tests. Runs the app lifespan against the test SQLite database."""

import asyncio
from pathlib import Path
from unittest.mock import AsyncMock

from httpx import AsyncClient
from sqlalchemy.exc import OperationalError

from albumstore_server.main import app
from albumstore_server.models import Album
from albumstore_server.repository import AlbumRepository
from albumstore_server.services.albums import AlbumService
from albumstore_server.services.storage import StorageError, StoredImage


def _cover(name: str = "cover.jpg", data: bytes = b"\xff\xd8\xff\xe0fake-jpeg"):
    return {"image": (name, data, "image/jpeg")}


async def test_health(client: AsyncClient):
    r = await client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


async def test_create_and_get_album(client: AsyncClient):
    """POST /albums then GET /albums/<id> returns the submitted metadata."""
    form = {"artist": "Boards", "title": "Music Has...", "year": "1998"}
    r = await client.post("/albums", files=_cover(), data=form)
    assert r.status_code == 200
    body = r.json()
    assert isinstance(body["albumID"], int)
    assert body["imagePath"].endswith("cover.jpg")
    assert "imageSize" not in body
    assert Path(body["imagePath"]).read_bytes() == b"\xff\xd8\xff\xe0fake-jpeg"

    r = await client.get(f"/albums/{body['albumID']}")
    assert r.status_code == 200
    album = r.json()
    assert album["albumID"] == body["albumID"]
    assert album["image_url"] == body["imagePath"]
    assert album["metadata"] == form


async def test_create_without_fields_stores_empty_strings(client: AsyncClient):
    r = await client.post("/albums", files=_cover("blank.png"))
    assert r.status_code == 200

    r = await client.get(f"/albums/{r.json()['albumID']}")
    assert r.json()["metadata"] == {"artist": "", "title": "", "year": ""}


async def test_create_without_image_is_400_and_stores_nothing(client: AsyncClient):
    repository = app.state.album_service.repository
    before = await repository.count()

    r = await client.post("/albums", data={"artist": "Boards", "title": "x", "year": "1998"})
    assert r.status_code == 400
    assert "detail" in r.json()
    assert await repository.count() == before


async def test_get_album_not_found(client: AsyncClient):
    r = await client.get("/albums/999999")
    assert r.status_code == 404
    assert "detail" in r.json()


async def test_get_album_bad_id(client: AsyncClient):
    for bad in ("abc", "-1", "1.5"):
        r = await client.get(f"/albums/{bad}")
        assert r.status_code == 400, bad


async def test_concurrent_uploads_get_distinct_ids(client: AsyncClient):
    responses = await asyncio.gather(
        client.post("/albums", files=_cover("one.jpg"), data={"artist": "a"}),
        client.post("/albums", files=_cover("two.jpg"), data={"artist": "b"}),
    )
    assert [r.status_code for r in responses] == [200, 200]
    ids = {r.json()["albumID"] for r in responses}
    assert len(ids) == 2


async def test_image_sent_as_text_field_is_400(client: AsyncClient):
    repository = app.state.album_service.repository
    before = await repository.count()

    r = await client.post("/albums", data={"image": "not-a-file", "artist": "Boards"})
    assert r.status_code == 400
    assert await repository.count() == before


async def test_text_field_sent_as_file_reads_as_empty(client: AsyncClient):
    files = {**_cover("fields.jpg"), "artist": ("artist.txt", b"Boards", "text/plain")}
    r = await client.post("/albums", files=files, data={"title": "Geogaddi"})
    assert r.status_code == 200

    r = await client.get(f"/albums/{r.json()['albumID']}")
    assert r.json()["metadata"] == {"artist": "", "title": "Geogaddi", "year": ""}


class SizedStore:
    """In-memory store that reports sizes, as the S3 backend does."""

    def storage_name(self, filename: str) -> str:
        return "k-" + filename

    def store(self, name, content_type, stream) -> StoredImage:
        data = stream.read()
        return StoredImage(reference=f"https://covers.example.com/{name}", size=len(data))


class BrokenStore(SizedStore):
    def store(self, name, content_type, stream) -> StoredImage:
        raise StorageError("failed to upload image to bucket covers: AccessDenied")


async def test_sized_store_reports_image_size(client: AsyncClient, monkeypatch):
    service = AlbumService(SizedStore(), app.state.album_service.repository)
    monkeypatch.setattr(app.state, "album_service", service)

    r = await client.post("/albums", files=_cover(data=b"12345"), data={"artist": "a"})
    assert r.status_code == 200
    body = r.json()
    assert isinstance(body["albumID"], int)
    assert body["imageSize"] == 5
    assert "imagePath" not in body

    r = await client.get(f"/albums/{body['albumID']}")
    assert r.json()["image_url"] == "https://covers.example.com/k-cover.jpg"


async def test_storage_failure_is_500(client: AsyncClient, monkeypatch):
    repository = app.state.album_service.repository
    before = await repository.count()
    monkeypatch.setattr(app.state, "album_service", AlbumService(BrokenStore(), repository))

    r = await client.post("/albums", files=_cover())
    assert r.status_code == 500
    assert "AccessDenied" in r.json()["detail"]
    assert await repository.count() == before


async def test_insert_failure_is_500(client: AsyncClient, monkeypatch):
    repository = AsyncMock(spec=AlbumRepository)
    repository.create.side_effect = OperationalError("INSERT INTO albums", {}, Exception("db down"))
    monkeypatch.setattr(app.state, "album_service", AlbumService(SizedStore(), repository))

    r = await client.post("/albums", files=_cover())
    assert r.status_code == 500
    assert "db down" in r.json()["detail"]


async def test_undecodable_metadata_is_500(client: AsyncClient, monkeypatch):
    repository = AsyncMock(spec=AlbumRepository)
    repository.get_by_id.return_value = Album(id=7, image_url="images/x.jpg", album_metadata="{not json")
    monkeypatch.setattr(app.state, "album_service", AlbumService(SizedStore(), repository))

    r = await client.get("/albums/7")
    assert r.status_code == 500
    assert "decode metadata" in r.json()["detail"]


async def test_id_beyond_int32_is_not_found(client: AsyncClient):
    r = await client.get(f"/albums/{2**31}")
    assert r.status_code == 404
