import asyncio

import pytest

from media_gateway.services.cleanup import cascade_delete, delete_object
from media_gateway.services.uploads import ingest_local_upload, request_upload
from media_gateway.services.urls import resolve_read_url, resolve_read_urls
from media_gateway.storage.exceptions import (
    ConfigurationError,
    DeleteError,
    InvalidKeyError,
    NegotiationError,
)
from media_gateway.storage.keys import extract_key
from media_gateway.storage.local_storage import LocalStorage
from tests.fakes import FakeStorage


def _url(entity: str, ts: int) -> str:
    return f"https://objects.example.com/bucket/designs/{entity}/white/{ts}.jpg"


# -- upload negotiation --


def test_request_upload_derives_key_and_passes_target_through():
    storage = FakeStorage()
    target = asyncio.run(request_upload(storage, "front.jpg", "image/jpeg", "IND 004", "white", timestamp_ms=123))
    assert target.key == "designs/IND_004/white/123.jpg"
    assert target.upload_url == "https://upload.example.com/designs/IND_004/white/123.jpg?sig=abc"
    assert extract_key(target.public_url) == target.key


def test_request_upload_reads_timestamp_at_call_time():
    storage = FakeStorage()
    first = asyncio.run(request_upload(storage, "a.jpg", "image/jpeg", "d", "c"))
    ts = int(first.key.rsplit("/", 1)[-1].split(".")[0])
    assert ts > 1_600_000_000_000


def test_request_upload_surfaces_negotiation_error():
    storage = FakeStorage()
    storage.fail_negotiate = True
    with pytest.raises(NegotiationError):
        asyncio.run(request_upload(storage, "a.jpg", "image/jpeg", "d", "c"))


def test_ingest_local_upload_requires_local_backend():
    with pytest.raises(ConfigurationError):
        asyncio.run(ingest_local_upload(FakeStorage(), "designs/a/b/1.jpg", b"x"))


def test_ingest_local_upload_validates_key(tmp_path):
    storage = LocalStorage(tmp_path, "http://localhost:8000")
    with pytest.raises(InvalidKeyError):
        asyncio.run(ingest_local_upload(storage, "uploads/a.jpg", b"x"))
    url = asyncio.run(ingest_local_upload(storage, "designs/a/b/1.jpg", b"x"))
    assert url == "http://localhost:8000/uploads/designs/a/b/1.jpg"


# -- read URL resolution --


def test_resolve_read_url_signs_with_default_ttl():
    storage = FakeStorage()
    signed = asyncio.run(resolve_read_url(storage, _url("IND-1", 1)))
    assert signed == "https://signed.example.com/designs/IND-1/white/1.jpg?expires=3600"
    assert storage.signed == [("designs/IND-1/white/1.jpg", 3600)]


def test_resolve_read_url_without_key_is_unchanged():
    storage = FakeStorage()
    url = "https://legacy.example.com/images/old.jpg"
    assert asyncio.run(resolve_read_url(storage, url)) == url
    assert storage.signed == []


def test_resolve_read_url_falls_back_on_signing_error():
    storage = FakeStorage()
    storage.fail_sign.add("designs/IND-1/white/1.jpg")
    assert asyncio.run(resolve_read_url(storage, _url("IND-1", 1))) == _url("IND-1", 1)


def test_batch_resolution_isolates_failures():
    storage = FakeStorage()
    urls = [_url("A", 1), _url("B", 2), _url("C", 3)]
    storage.fail_sign.add("designs/B/white/2.jpg")
    results = asyncio.run(resolve_read_urls(storage, urls))
    assert [r.original_url for r in results] == urls
    assert results[0].signed_url.startswith("https://signed.example.com/designs/A/")
    assert results[0].error is None
    assert results[1].signed_url == urls[1]
    assert "signing key revoked" in results[1].error
    assert results[2].signed_url.startswith("https://signed.example.com/designs/C/")
    assert results[2].error is None


def test_previously_issued_urls_resolve_against_active_backend(tmp_path):
    local = LocalStorage(tmp_path, "http://localhost:8000")
    issued = asyncio.run(local.negotiate_upload("designs/IND-9/red/5.jpg", "image/jpeg")).public_url

    # Operator switches to another backend; the stored URL is not rewritten.
    active = FakeStorage()
    signed = asyncio.run(resolve_read_url(active, issued))
    assert issued == "http://localhost:8000/uploads/designs/IND-9/red/5.jpg"
    assert active.signed == [("designs/IND-9/red/5.jpg", 3600)]
    assert signed.startswith("https://signed.example.com/designs/IND-9/red/5.jpg")


# -- deletion --


def test_cascade_delete_continues_past_failures():
    storage = FakeStorage()
    urls = [_url("A", 1), _url("B", 2), _url("C", 3)]
    storage.fail_delete.add("designs/B/white/2.jpg")
    report = asyncio.run(cascade_delete(storage, urls))
    assert sorted(storage.deleted) == ["designs/A/white/1.jpg", "designs/C/white/3.jpg"]
    assert report.failed == ["designs/B/white/2.jpg"]
    assert report.deleted == ["designs/A/white/1.jpg", "designs/C/white/3.jpg"]


def test_cascade_delete_skips_urls_without_key():
    storage = FakeStorage()
    report = asyncio.run(cascade_delete(storage, ["https://legacy/x.jpg", _url("A", 1)]))
    assert report.skipped == ["https://legacy/x.jpg"]
    assert storage.deleted == ["designs/A/white/1.jpg"]


def test_cascade_delete_bounds_concurrency():
    storage = FakeStorage()
    urls = [_url("E", i) for i in range(10)]
    report = asyncio.run(cascade_delete(storage, urls, concurrency=3))
    assert len(report.deleted) == 10
    assert 1 <= storage.max_in_flight <= 3


def test_cascade_delete_empty_batch():
    report = asyncio.run(cascade_delete(FakeStorage(), []))
    assert report.deleted == [] and report.failed == [] and report.skipped == []


def test_delete_object_propagates_errors():
    storage = FakeStorage()
    with pytest.raises(InvalidKeyError):
        asyncio.run(delete_object(storage, "https://legacy/x.jpg"))
    storage.fail_delete.add("designs/A/white/1.jpg")
    with pytest.raises(DeleteError):
        asyncio.run(delete_object(storage, _url("A", 1)))
    assert asyncio.run(delete_object(storage, _url("B", 2))) == "designs/B/white/2.jpg"
