import pytest

from apps.images import store
from apps.images.models import Image
from apps.shared import auth

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + bytes(range(256)) * 4


def upload(client, data=PNG_BYTES, mime_type="image/png", name="photo.png", **form):
    return client.post("/images", files={"file": (name, data, mime_type)}, data=form)


def test_upload_returns_id_and_url(client):
    resp = upload(client)
    body = resp.json()

    assert resp.status_code == 200
    assert isinstance(body["id"], int)
    assert body["url"] == f"/images/{body['id']}"


def test_uploaded_image_round_trips(client):
    image_id = upload(client).json()["id"]

    resp = client.get(f"/images/{image_id}")

    assert resp.status_code == 200
    assert resp.content == PNG_BYTES
    assert resp.headers["content-type"] == "image/png"
    assert resp.headers["cache-control"] == "public, max-age=31536000, immutable"


def test_mime_type_is_echoed_verbatim(client):
    image_id = upload(client, data=b"<svg/>", mime_type="image/svg+xml", name="logo.svg").json()["id"]
    assert client.get(f"/images/{image_id}").headers["content-type"] == "image/svg+xml"


def test_filename_form_field_overrides_upload_name(client, db):
    image_id = upload(client, filename="renamed.png").json()["id"]
    plain_id = upload(client, name="original.png").json()["id"]

    assert db.get(Image, image_id).filename == "renamed.png"
    assert db.get(Image, plain_id).filename == "original.png"


def test_upload_without_file(client):
    resp = client.post("/images", data={"filename": "nothing.png"})
    assert resp.status_code == 400
    assert resp.json()["error"] == "No file provided"


def test_upload_with_empty_request(client):
    resp = client.post("/images")
    assert resp.status_code == 400
    assert resp.json()["error"] == "No file provided"


def test_upload_with_text_file_field(client):
    resp = client.post("/images", data={"file": "not a file"})
    assert resp.status_code == 400
    assert resp.json()["error"] == "No file provided"


def test_upload_too_large(client, monkeypatch):
    monkeypatch.setattr(store, "MAX_UPLOAD_BYTES", 16)

    resp = upload(client, data=b"x" * 17)
    assert resp.status_code == 413
    assert "too large" in resp.json()["error"]


def test_upload_requires_key_when_configured(client, monkeypatch):
    monkeypatch.setattr(auth, "ADMIN_API_KEY", "s3cret")

    assert upload(client).status_code == 401
    resp = client.post(
        "/images",
        files={"file": ("a.png", PNG_BYTES, "image/png")},
        headers={"X-API-Key": "s3cret"},
    )
    assert resp.status_code == 200


@pytest.mark.parametrize("image_id", ["abc", "-1", "0", "2.5"])
def test_fetch_invalid_id(client, image_id):
    resp = client.get(f"/images/{image_id}")
    assert resp.status_code == 400
    assert resp.content == b""


def test_fetch_missing_image(client):
    resp = client.get("/images/424242")
    assert resp.status_code == 404
    assert resp.content == b""


@pytest.mark.parametrize("image_id", ["99999999999999999999", "2147483648"])
def test_fetch_id_beyond_column_range_is_not_found(client, image_id):
    resp = client.get(f"/images/{image_id}")
    assert resp.status_code == 404
    assert resp.content == b""


def test_fetch_accepts_leading_zeros(client):
    image_id = upload(client).json()["id"]

    resp = client.get(f"/images/00{image_id}")
    assert resp.status_code == 200
    assert resp.content == PNG_BYTES


def test_store_and_fetch_directly(db):
    image = store.store_image(db, b"GIF89a", "image/gif")

    fetched = store.fetch_image(db, image.id)
    assert fetched.data == b"GIF89a"
    assert fetched.mime_type == "image/gif"
    assert fetched.filename == store.DEFAULT_FILENAME


def test_store_defaults_mime_type(db):
    image = store.store_image(db, b"\x00\x01", None)
    assert image.mime_type == "application/octet-stream"


@pytest.mark.parametrize(
    "url, expected",
    [
        ("/images/12", 12),
        ("/api/images/7", 7),
        ("/images/0", None),
        ("/images/99999999999999999999", None),
        ("/images/abc", None),
        ("https://cdn.example.com/images/3", None),
        ("", None),
        (None, None),
    ],
)
def test_parse_image_url(url, expected):
    assert store.parse_image_url(url) == expected


def test_health(client):
    resp = client.get("/images/health")
    assert resp.status_code == 200
    assert resp.json()["service"] == "images"
