# tests/infrastructure/test_secret_store_client.py

"""
python -m pytest tests/infrastructure/test_secret_store_client.py -v
"""

import httpx
import pytest

from bootstrap.exceptions import SecretStoreError
from infrastructure.secrets.secret_store_client import SecretStoreClient


def _client(handler) -> SecretStoreClient:
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return SecretStoreClient("http://localhost:3500/", http_client=http_client)


@pytest.mark.asyncio
async def test_bulk_fetch_unwraps_self_keyed_payloads():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["accept"] = request.headers.get("accept")
        return httpx.Response(200, json={"db-pass": {"db-pass": "s3cr3t"}, "api-key": {"api-key": "k"}})

    secrets = await _client(handler).fetch_bulk_secrets("localsecretstore")

    assert secrets == {"db-pass": "s3cr3t", "api-key": "k"}
    assert seen["url"] == "http://localhost:3500/v1.0/secrets/localsecretstore/bulk"
    assert seen["accept"] == "application/json"


@pytest.mark.asyncio
async def test_null_payloads_and_values_are_dropped():
    def handler(request):
        return httpx.Response(200, json={"gone": None, "empty": {"empty": None}, "kept": {"kept": "v"}})

    assert await _client(handler).fetch_bulk_secrets("store") == {"kept": "v"}


@pytest.mark.asyncio
async def test_error_status_is_fatal():
    def handler(request):
        return httpx.Response(500, text="sidecar down")

    with pytest.raises(SecretStoreError) as exc_info:
        await _client(handler).fetch_bulk_secrets("store")

    assert exc_info.value.status_code == 500
    assert exc_info.value.url.endswith("/v1.0/secrets/store/bulk")


@pytest.mark.asyncio
async def test_transport_error_is_fatal():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(SecretStoreError) as exc_info:
        await _client(handler).fetch_bulk_secrets("store")

    assert isinstance(exc_info.value.original_error, httpx.ConnectError)


@pytest.mark.asyncio
async def test_invalid_json_is_fatal():
    def handler(request):
        return httpx.Response(200, text="<html>")

    with pytest.raises(SecretStoreError):
        await _client(handler).fetch_bulk_secrets("store")


@pytest.mark.parametrize(
    "body",
    [
        ["not", "an", "object"],
        {"db-pass": "flat-value"},
        {"db-pass": {"other-name": "v"}},
        {"a": {"a": 5}},
        {"a": {"a": ["x"]}},
        {"a": {"a": {"n": 1}}},
    ],
)
def test_malformed_payloads_fail_the_whole_load(body):
    with pytest.raises(SecretStoreError):
        SecretStoreClient.parse_bulk_payload(body)


def test_null_body_is_empty():
    assert SecretStoreClient.parse_bulk_payload(None) == {}
