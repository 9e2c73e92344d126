"""Catalog client tests against an in-process httpx transport."""

import asyncio
from dataclasses import replace

import httpx
import pytest

from shopping_assistant.catalog_client import CatalogClient


def _run(coro):
    return asyncio.run(coro)


def _client(settings, handler):
    return CatalogClient(settings, transport=httpx.MockTransport(handler))


def test_search_builds_escaped_url_and_limit(settings, raw_record):
    seen = {}

    def handler(request):
        seen["url"] = request.url
        seen["headers"] = request.headers
        return httpx.Response(200, json=[raw_record("1"), raw_record("2")])

    result = _run(_client(settings, handler).search("leche entera/descremada", limit=4))

    assert result.ok
    assert [record.product_id for record in result.records] == ["1", "2"]
    assert seen["url"].host == "acme.vtexcommercestable.com.br"
    assert seen["url"].raw_path.startswith(
        b"/api/catalog_system/pub/products/search/leche%20entera%2Fdescremada"
    )
    assert seen["url"].params["_from"] == "0"
    assert seen["url"].params["_to"] == "3"
    assert seen["headers"]["accept"] == "application/json"
    assert "x-vtex-api-appkey" not in seen["headers"]


def test_default_limit_comes_from_settings(settings):
    seen = {}

    def handler(request):
        seen["to"] = request.url.params["_to"]
        return httpx.Response(200, json=[])

    _run(_client(replace(settings, results_per_term=2), handler).search("pan"))

    assert seen["to"] == "1"


def test_account_override(settings):
    seen = {}

    def handler(request):
        seen["host"] = request.url.host
        return httpx.Response(200, json=[])

    _run(_client(settings, handler).search("pan", account="otra"))

    assert seen["host"] == "otra.vtexcommercestable.com.br"


def test_private_store_credentials_are_sent(settings):
    seen = {}

    def handler(request):
        seen["headers"] = request.headers
        return httpx.Response(200, json=[])

    private = replace(settings, vtex_app_key="key", vtex_app_token="token")
    _run(_client(private, handler).search("pan"))

    assert seen["headers"]["x-vtex-api-appkey"] == "key"
    assert seen["headers"]["x-vtex-api-apptoken"] == "token"


def test_partial_content_status_counts_as_success(settings, raw_record):
    def handler(request):
        return httpx.Response(206, json=[raw_record("9")])

    result = _run(_client(settings, handler).search("pan"))

    assert [record.product_id for record in result.records] == ["9"]


def test_records_beyond_limit_are_trimmed(settings, raw_record):
    def handler(request):
        return httpx.Response(200, json=[raw_record(str(i)) for i in range(5)])

    result = _run(_client(settings, handler).search("pan", limit=2))

    assert len(result.records) == 2


@pytest.mark.parametrize("status", [400, 404, 500, 503])
def test_http_errors_return_empty(settings, status):
    def handler(request):
        return httpx.Response(status, json={"error": "boom"})

    result = _run(_client(settings, handler).search("pan"))

    assert not result.ok
    assert result.records == ()
    assert str(status) in result.error


@pytest.mark.parametrize(
    "exc",
    [
        httpx.ConnectError("connection refused"),
        httpx.ReadTimeout("slow"),
        httpx.RemoteProtocolError("reset"),
    ],
)
def test_transport_errors_return_empty(settings, exc):
    def handler(request):
        raise exc

    result = _run(_client(settings, handler).search("pan"))

    assert not result.ok
    assert result.records == ()


def test_invalid_json_returns_empty(settings):
    def handler(request):
        return httpx.Response(200, content=b"<html>oops</html>")

    result = _run(_client(settings, handler).search("pan"))

    assert not result.ok
    assert result.records == ()


def test_non_array_body_returns_empty(settings):
    def handler(request):
        return httpx.Response(200, json={"products": []})

    assert _run(_client(settings, handler).search("pan")).records == ()


def test_non_object_entries_are_skipped(settings, raw_record):
    def handler(request):
        return httpx.Response(200, json=[None, "x", raw_record("3")])

    result = _run(_client(settings, handler).search("pan"))

    assert [record.product_id for record in result.records] == ["3"]


def test_missing_account_is_rejected(settings):
    with pytest.raises(ValueError):
        CatalogClient(replace(settings, vtex_account=""))


def test_unencodable_term_returns_empty_without_request(settings):
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, json=[])

    result = _run(_client(settings, handler).search("leche\ud800"))

    assert not result.ok
    assert result.records == ()
    assert result.error == "invalid term"
    assert calls == []


def test_default_url_uses_configured_base(settings):
    client = _client(settings, lambda request: httpx.Response(200, json=[]))

    assert client.build_url("pan") == settings.catalog_base_url + "/api/catalog_system/pub/products/search/pan"
