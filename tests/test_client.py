from __future__ import annotations

import json

import httpx
import pytest

from api_manager.client import (
    PROBE_METHODS,
    ApiConnectionClient,
    MethodProbeResult,
    normalize_rows,
    table_columns,
)
from api_manager.connection import ConnectionConfig, PostField
from api_manager.errors import HttpStatusError, NetworkError, NotJsonError, ValidationError

ITEMS_URL = "https://api.example.test/items"


def _client(handler, **config: str) -> ApiConnectionClient:
    return ApiConnectionClient(
        ConnectionConfig(url=ITEMS_URL, **config),
        transport=httpx.MockTransport(handler),
    )


def test_probe_methods_reports_one_result_per_verb_in_fixed_order() -> None:
    statuses = {"GET": 200, "POST": 405, "PUT": 204, "PATCH": 500}
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.method)
        if request.method == "DELETE":
            raise httpx.ConnectError("connection refused", request=request)
        return httpx.Response(statuses[request.method])

    with _client(handler) as client:
        results = client.probe_methods()

    assert seen == list(PROBE_METHODS)
    assert results == [
        MethodProbeResult(method="GET", supported=True),
        MethodProbeResult(method="POST", supported=False),
        MethodProbeResult(method="PUT", supported=True),
        MethodProbeResult(method="DELETE", supported=False),
        MethodProbeResult(method="PATCH", supported=False),
    ]


@pytest.mark.parametrize(("status_code", "supported"), [(199, False), (200, True), (299, True), (300, False), (404, False)])
def test_probe_methods_supported_iff_status_is_2xx(status_code: int, supported: bool) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code)

    with _client(handler) as client:
        results = client.probe_methods()

    assert [result.supported for result in results] == [supported] * len(PROBE_METHODS)


def test_probe_methods_sends_configured_credentials() -> None:
    captured: list[httpx.Headers] = []

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(request.headers)
        return httpx.Response(200)

    with _client(handler, api_key="key-1", token="tok-1") as client:
        client.probe_methods()

    assert len(captured) == 5
    for headers in captured:
        assert headers["X-API-Key"] == "key-1"
        assert headers["Authorization"] == "Bearer tok-1"
        assert headers["Content-Type"] == "application/json"


def test_fetch_and_normalize_array_body() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "GET"
        assert str(request.url) == ITEMS_URL
        return httpx.Response(200, json=[{"id": 1, "name": "a"}])

    with _client(handler) as client:
        result = client.fetch_and_normalize()

    assert result.rows == [{"id": 1, "name": "a"}]
    assert result.columns == ["id", "name"]
    assert result.data == [{"id": 1, "name": "a"}]


def test_fetch_and_normalize_single_object_becomes_one_row() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"id": 9, "status": "ok"})

    with _client(handler) as client:
        result = client.fetch_and_normalize()

    assert result.rows == [{"id": 9, "status": "ok"}]


@pytest.mark.parametrize("body", [42, "hello", True, None])
def test_fetch_and_normalize_wraps_primitives(body: object) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=json.dumps(body).encode(), headers={"Content-Type": "application/json"})

    with _client(handler) as client:
        result = client.fetch_and_normalize()

    assert result.rows == [{"value": body}]
    assert result.columns == ["value"]


def test_fetch_and_normalize_parses_json_with_wrong_content_type() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text='[{"id": 1}, {"id": 2}, {"id": 3}]')

    with _client(handler) as client:
        result = client.fetch_and_normalize()

    assert len(result.rows) == 3


@pytest.mark.parametrize(
    "body",
    [
        "<!DOCTYPE html><html><body>Login</body></html>",
        "<html><head></head></html>",
    ],
)
def test_fetch_and_normalize_rejects_html_pages(body: str) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text=body, headers={"Content-Type": "text/html"})

    with _client(handler) as client:
        with pytest.raises(NotJsonError) as exc_info:
            client.fetch_and_normalize()

    assert exc_info.value.reason == NotJsonError.HTML_PAGE
    assert "HTML instead of JSON" in str(exc_info.value)


def test_fetch_and_normalize_rejects_unparseable_text_with_preview() -> None:
    body = "plain text response " * 20

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text=body)

    with _client(handler) as client:
        with pytest.raises(NotJsonError) as exc_info:
            client.fetch_and_normalize()

    assert exc_info.value.reason == NotJsonError.UNPARSEABLE
    assert exc_info.value.preview == body[:100]


def test_fetch_and_normalize_raises_status_error_regardless_of_body() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json=[{"id": 1}])

    with _client(handler) as client:
        with pytest.raises(HttpStatusError) as exc_info:
            client.fetch_and_normalize()

    assert exc_info.value.status_code == 404
    assert str(exc_info.value) == "HTTP 404: Not Found"


def test_fetch_and_normalize_wraps_transport_errors() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectTimeout("timed out", request=request)

    with _client(handler) as client:
        with pytest.raises(NetworkError):
            client.fetch_and_normalize()


def test_check_connection_detects_json_content_type() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"ok": True})

    with _client(handler) as client:
        check = client.check_connection()

    assert check.status_code == 200
    assert check.is_json is True


def test_check_connection_raises_for_non_success_status() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, json={"error": "unauthorized"})

    with _client(handler) as client:
        with pytest.raises(HttpStatusError) as exc_info:
            client.check_connection()

    assert exc_info.value.status_code == 401


def test_create_record_posts_coerced_payload() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "POST"
        assert str(request.url) == ITEMS_URL
        assert json.loads(request.content.decode("utf-8")) == {"n": 5}
        return httpx.Response(201, json={"id": 10, "n": 5})

    with _client(handler) as client:
        created = client.create_record([PostField(key="n", value="5", type="number")])

    assert created == {"id": 10, "n": 5}


def test_create_record_validation_happens_before_any_request() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    with _client(handler) as client:
        with pytest.raises(ValidationError):
            client.create_record([PostField(key="", value="")])


def test_create_record_failure_carries_json_error_body() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, json={"error": "Semua field harus diisi"})

    with _client(handler) as client:
        with pytest.raises(HttpStatusError) as exc_info:
            client.create_record([PostField(key="unit_name", value="A")])

    assert exc_info.value.status_code == 400
    assert json.loads(exc_info.value.detail) == {"error": "Semua field harus diisi"}


def test_create_record_failure_carries_text_excerpt() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, text="x" * 250)

    with _client(handler) as client:
        with pytest.raises(HttpStatusError) as exc_info:
            client.create_record([PostField(key="a", value="b")])

    assert exc_info.value.detail == "x" * 100


def test_update_record_puts_merged_row_to_id_path() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "PUT"
        assert str(request.url) == f"{ITEMS_URL}/3"
        assert json.loads(request.content.decode("utf-8")) == {"id": 3, "name": "new", "qty": 1}
        return httpx.Response(200, json={"id": 3})

    with _client(handler) as client:
        client.update_record(0, {"id": 3, "name": "old", "qty": 1}, {"name": "new"})


def test_delete_record_uses_index_when_row_has_no_id() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "DELETE"
        assert str(request.url) == f"{ITEMS_URL}/4"
        assert request.content == b""
        return httpx.Response(204)

    with _client(handler) as client:
        assert client.delete_record(4, {"name": "no-id"}) is None


def test_normalize_rows_keeps_heterogeneous_rows_and_first_row_columns() -> None:
    rows = normalize_rows([{"a": 1}, {"b": 2, "c": 3}, 7])
    assert rows == [{"a": 1}, {"b": 2, "c": 3}, {"value": 7}]
    assert table_columns(rows) == ["a"]
    assert table_columns([]) == []


@pytest.mark.parametrize("content_type", ["application/json", "text/plain"])
def test_fetch_and_normalize_rejects_non_standard_constants(content_type: str) -> None:
    body = '[{"id": 1, "v": NaN}, {"id": 2, "v": Infinity}]'

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text=body, headers={"Content-Type": content_type})

    with _client(handler) as client:
        with pytest.raises(NotJsonError) as exc_info:
            client.fetch_and_normalize()

    assert exc_info.value.reason == NotJsonError.UNPARSEABLE
    assert exc_info.value.preview == body[:100]
