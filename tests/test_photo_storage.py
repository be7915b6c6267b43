import io
import uuid
from datetime import datetime, timedelta, timezone

import pytest
from PIL import Image

from property_manager.core.config import settings
from property_manager.core.exceptions import InvalidArgumentError, NotFoundError
from property_manager.domain.owner_kind import OwnerKind
from property_manager.domain.storage.factory import StorageFactory
from property_manager.domain.storage.local import LocalStorageService
from property_manager.domain.thumbnail import generate_thumbnail


def test_generate_thumbnail_fits_box():
    buffer = io.BytesIO()
    Image.new("RGBA", (1200, 600), (10, 20, 30, 128)).save(buffer, format="PNG")

    thumbnail = Image.open(io.BytesIO(generate_thumbnail(buffer.getvalue(), 300)))

    assert thumbnail.format == "JPEG"
    assert thumbnail.size == (300, 150)


@pytest.mark.asyncio
async def test_gateway_upload_ticket(gateway):
    account_id = uuid.uuid4()

    ticket = await gateway.generate_upload_url(account_id, OwnerKind.WORK_ORDER, "image/png", 2048, "meter.png")

    assert ticket.storage_key.startswith(f"{account_id}/workorders/")
    assert ticket.storage_key.endswith(".png")
    assert ticket.thumbnail_storage_key == ticket.storage_key[: -len(".png")] + "_thumb.jpg"
    assert ticket.expires_at > datetime.now(timezone.utc)


@pytest.mark.asyncio
async def test_gateway_confirm_builds_thumbnail(gateway, storage, jpeg_bytes):
    key = f"{uuid.uuid4()}/properties/2026/{uuid.uuid4()}.jpg"
    thumb = key.replace(".jpg", "_thumb.jpg")
    await storage.save_bytes(key, jpeg_bytes, "image/jpeg")

    record = await gateway.confirm_upload(key, thumb, "image/png", 1)

    assert record.thumbnail_storage_key == thumb
    assert record.content_type == "image/jpeg"
    assert record.file_size_bytes == len(jpeg_bytes)
    assert storage.objects[thumb][1] == "image/jpeg"


@pytest.mark.asyncio
async def test_gateway_confirm_missing_object(gateway):
    with pytest.raises(NotFoundError):
        await gateway.confirm_upload(f"{uuid.uuid4()}/properties/2026/x.jpg", None, "image/jpeg", 10)


@pytest.mark.asyncio
async def test_gateway_confirm_revalidates_stored_object(gateway, storage):
    key = f"{uuid.uuid4()}/properties/2026/{uuid.uuid4()}.jpg"
    await storage.save_bytes(key, b"%PDF-1.7", "application/pdf")

    with pytest.raises(InvalidArgumentError):
        await gateway.confirm_upload(key, None, "image/jpeg", 8)


@pytest.mark.asyncio
async def test_gateway_delete_removes_both_objects(gateway, storage):
    await storage.save_bytes("a/photo.jpg", b"1")
    await storage.save_bytes("a/photo_thumb.jpg", b"2")

    await gateway.delete_photo("a/photo.jpg", "a/photo_thumb.jpg")

    assert storage.objects == {}


@pytest.mark.asyncio
async def test_local_storage_round_trip(tmp_path):
    local = LocalStorageService(media_root=str(tmp_path), media_url="/media")
    key = f"{uuid.uuid4()}/properties/2026/photo.jpg"

    await local.save_bytes(key, b"jpeg-bytes")
    metadata = await local.get_metadata(key)

    assert metadata.size == len(b"jpeg-bytes")
    assert metadata.content_type == "image/jpeg"
    assert await local.read_file(key) == b"jpeg-bytes"
    download_url = await local.generate_download_url(key, timedelta(minutes=5))
    assert download_url.startswith(f"/media/{key}?exp=")
    assert "&sig=" in download_url
    assert await local.delete_file(key) is True
    assert await local.get_metadata(key) is None
    assert await local.delete_file(key) is False


@pytest.mark.asyncio
async def test_local_storage_rejects_path_escape(tmp_path):
    local = LocalStorageService(media_root=str(tmp_path / "media"))

    with pytest.raises(InvalidArgumentError):
        await local.save_bytes("../outside.jpg", b"x")
    with pytest.raises(InvalidArgumentError):
        await local.save_bytes("tenant/../other/photo.jpg", b"x")


@pytest.mark.asyncio
async def test_gateway_confirm_rejects_foreign_thumbnail_key(gateway, storage, jpeg_bytes):
    key = f"{uuid.uuid4()}/properties/2026/{uuid.uuid4()}.jpg"
    await storage.save_bytes(key, jpeg_bytes, "image/jpeg")

    with pytest.raises(InvalidArgumentError) as exc_info:
        await gateway.confirm_upload(key, key, "image/jpeg", len(jpeg_bytes))

    assert exc_info.value.field == "thumbnail_storage_key"
    assert storage.objects[key] == (jpeg_bytes, "image/jpeg")


def _signed_parts(url):
    query = url.split("?", 1)[1]
    params = dict(part.split("=", 1) for part in query.split("&"))
    return int(params["exp"]), params["sig"]


@pytest.mark.asyncio
async def test_local_signed_urls_are_bound_to_method_path_and_expiry(tmp_path):
    local = LocalStorageService(media_root=str(tmp_path), signing_secret="local-signing-secret")
    key = f"{uuid.uuid4()}/properties/2026/{uuid.uuid4()}.jpg"

    exp, sig = _signed_parts(await local.generate_upload_url(key, "image/jpeg", timedelta(minutes=5)))

    assert local.validate_signature("PUT", key, exp, sig) is True
    assert local.validate_signature("GET", key, exp, sig) is False
    assert local.validate_signature("PUT", key.replace(".jpg", ".png"), exp, sig) is False
    assert local.validate_signature("PUT", key, exp + 60, sig) is False
    assert local.validate_signature("PUT", key, exp, None) is False
    assert local.validate_signature("PUT", key, None, sig) is False

    expired_exp, expired_sig = _signed_parts(await local.generate_download_url(key, timedelta(seconds=-5)))
    assert local.validate_signature("GET", key, expired_exp, expired_sig) is False


def test_local_storage_refused_in_production(monkeypatch):
    monkeypatch.setattr(settings, "ENVIRONMENT", "production")

    with pytest.raises(ValueError):
        StorageFactory.get_storage_service("local")
