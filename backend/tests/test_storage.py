import os

from skoropad.core import config

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


async def test_upload_png(client, make_user, headers):
    seller = await make_user("seller")
    res = await client.post(
        "/v1/advertisements/images",
        files={"file": ("chair.png", PNG_BYTES, "image/png")},
        headers=headers(seller),
    )
    assert res.status_code == 201
    body = res.json()
    assert body["content_type"] == "image/png"
    assert body["size"] == len(PNG_BYTES)
    assert body["url"].startswith("/uploads/advertisements/")
    assert body["url"].endswith(".png")

    stored = os.path.join(config.UPLOAD_DIR, "advertisements", body["url"].rsplit("/", 1)[-1])
    with open(stored, "rb") as f:
        assert f.read() == PNG_BYTES


async def test_upload_rejects_other_types(client, make_user, headers):
    seller = await make_user("seller")
    res = await client.post(
        "/v1/advertisements/images",
        files={"file": ("notes.pdf", b"%PDF-1.4", "application/pdf")},
        headers=headers(seller),
    )
    assert res.status_code == 415


async def test_upload_rejects_oversized_image(client, make_user, headers, monkeypatch):
    monkeypatch.setattr(config, "MAX_IMAGE_BYTES", 32)
    seller = await make_user("seller")
    res = await client.post(
        "/v1/advertisements/images",
        files={"file": ("big.jpg", b"\xff" * 64, "image/jpeg")},
        headers=headers(seller),
    )
    assert res.status_code == 413


async def test_upload_rejects_empty_file(client, make_user, headers):
    seller = await make_user("seller")
    res = await client.post(
        "/v1/advertisements/images",
        files={"file": ("empty.gif", b"", "image/gif")},
        headers=headers(seller),
    )
    assert res.status_code == 400


async def test_upload_requires_auth(client):
    res = await client.post("/v1/advertisements/images", files={"file": ("a.png", PNG_BYTES, "image/png")})
    assert res.status_code == 401
