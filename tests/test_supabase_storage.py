import asyncio

import pytest

from media_gateway.storage.exceptions import (
    ConfigurationError,
    DeleteError,
    NegotiationError,
    SigningError,
)
from media_gateway.storage.keys import extract_key
from media_gateway.storage.supabase_storage import SupabaseStorage
from tests.fakes import FakeSupabaseClient

KEY = "designs/IND-002/Blue/1700000000000.png"


def _storage(client: FakeSupabaseClient, **kwargs) -> SupabaseStorage:
    return SupabaseStorage(url="", service_role_key="", bucket="design-images", client=client, **kwargs)


def test_negotiate_returns_signed_upload_url_and_token():
    client = FakeSupabaseClient()
    target = asyncio.run(_storage(client).negotiate_upload(KEY, "image/png"))
    assert target.token == "tok-1"
    assert "/object/upload/sign/design-images/" in target.upload_url
    assert target.public_url == f"https://proj.supabase.co/storage/v1/object/public/design-images/{KEY}"
    assert extract_key(target.public_url) == KEY


def test_negotiate_failure_is_negotiation_error():
    client = FakeSupabaseClient()
    client.error = RuntimeError("bucket not found")
    with pytest.raises(NegotiationError, match="bucket not found"):
        asyncio.run(_storage(client).negotiate_upload(KEY, "image/png"))


def test_delete_calls_remove():
    client = FakeSupabaseClient()
    asyncio.run(_storage(client).delete(KEY))
    assert client.calls == [("remove", [KEY])]


def test_delete_failure_is_delete_error():
    client = FakeSupabaseClient()
    client.error = ConnectionError("unreachable")
    with pytest.raises(DeleteError):
        asyncio.run(_storage(client).delete(KEY))


def test_sign_get_url_uses_ttl():
    client = FakeSupabaseClient()
    url = asyncio.run(_storage(client).sign_get_url("https://stored", KEY, 3600))
    assert url.endswith("token=read-3600")
    assert client.calls == [("create_signed_url", KEY, 3600)]


def test_sign_get_url_failure_is_signing_error():
    client = FakeSupabaseClient()
    client.error = RuntimeError("jwt expired")
    with pytest.raises(SigningError):
        asyncio.run(_storage(client).sign_get_url("https://stored", KEY, 3600))


def test_public_bucket_returns_input_url():
    client = FakeSupabaseClient()
    storage = _storage(client, public_bucket=True)
    assert asyncio.run(storage.sign_get_url("https://stored", KEY, 3600)) == "https://stored"
    assert client.calls == []


def test_missing_credentials_is_configuration_error():
    with pytest.raises(ConfigurationError):
        SupabaseStorage(url="", service_role_key="", bucket="design-images")


def test_bucket_named_like_key_root_is_rejected():
    with pytest.raises(ConfigurationError):
        SupabaseStorage(url="", service_role_key="", bucket="designs", client=FakeSupabaseClient())


def test_project_url_with_key_root_segment_is_rejected():
    with pytest.raises(ConfigurationError):
        SupabaseStorage(
            url="https://proj.supabase.co/designs",
            service_role_key="k",
            bucket="design-images",
            client=FakeSupabaseClient(),
        )


def test_negotiate_refuses_public_url_that_hides_the_key():
    client = FakeSupabaseClient(url="https://proxy.example.com/designs")
    with pytest.raises(NegotiationError):
        asyncio.run(_storage(client).negotiate_upload(KEY, "image/png"))
    assert client.calls == []
