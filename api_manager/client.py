from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any

import httpx

from api_manager.connection import (
    ConnectionConfig,
    PostField,
    build_create_payload,
    build_headers,
    resource_url,
)
from api_manager.errors import HttpStatusError, NetworkError, NotJsonError

logger = logging.getLogger("api_manager.client")

PROBE_METHODS: tuple[str, ...] = ("GET", "POST", "PUT", "DELETE", "PATCH")
DEFAULT_TIMEOUT_SEC = 5.0
_HTML_MARKERS = ("<!DOCTYPE", "<html")
_PREVIEW_CHARS = 100
_TRANSPORT_ERRORS = (httpx.HTTPError, httpx.InvalidURL)


@dataclass(frozen=True, slots=True)
class MethodProbeResult:
    method: str
    supported: bool


@dataclass(frozen=True, slots=True)
class ConnectionCheck:
    status_code: int
    is_json: bool


@dataclass(slots=True)
class FetchResult:
    data: Any
    rows: list[dict[str, Any]] = field(default_factory=list)

    @property
    def columns(self) -> list[str]:
        return table_columns(self.rows)


def unprobed_methods() -> list[MethodProbeResult]:
    return [MethodProbeResult(method=method, supported=False) for method in PROBE_METHODS]


def normalize_rows(data: Any) -> list[dict[str, Any]]:
    """
    Turn an arbitrary JSON body into a list of displayable rows.

    - array: one row per element (non-object elements become ``{"value": element}``)
    - object: a single row
    - anything else, including null: ``[{"value": data}]``
    """

    if isinstance(data, list):
        return [item if isinstance(item, dict) else {"value": item} for item in data]
    if isinstance(data, dict):
        return [data]
    return [{"value": data}]


def table_columns(rows: list[dict[str, Any]]) -> list[str]:
    # Only the first row decides the column set.
    if not rows:
        return []
    return list(rows[0].keys())


def is_json_content_type(content_type: str | None) -> bool:
    return bool(content_type) and "application/json" in content_type.lower()


class ApiConnectionClient:
    """httpx-based client for a single user configured REST endpoint."""

    def __init__(
        self,
        config: ConnectionConfig,
        *,
        timeout: float = DEFAULT_TIMEOUT_SEC,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.config = config
        self._client = httpx.Client(
            timeout=timeout,
            transport=transport,
            headers=build_headers(config),
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "ApiConnectionClient":
        return self

    def __exit__(self, exc_type: object, exc: object, tb: object) -> None:
        self.close()

    def probe_methods(self) -> list[MethodProbeResult]:
        """
        Check which verbs the endpoint accepts by issuing each of them once.

        POST, PUT, DELETE and PATCH are sent for real and may change data on the
        target server. Transport failures count as unsupported.
        """

        results: list[MethodProbeResult] = []
        for method in PROBE_METHODS:
            try:
                response = self._client.request(method, self.config.url)
            except _TRANSPORT_ERRORS as exc:
                logger.info("probe_transport_error method=%s url=%s error=%s", method, self.config.url, exc)
                results.append(MethodProbeResult(method=method, supported=False))
                continue

            supported = response.is_success
            logger.info(
                "probe_completed method=%s url=%s status=%s supported=%s",
                method,
                self.config.url,
                response.status_code,
                supported,
            )
            results.append(MethodProbeResult(method=method, supported=supported))
        return results

    def check_connection(self) -> ConnectionCheck:
        response = self._send("GET", self.config.url)
        if not response.is_success:
            raise _status_error(response)
        return ConnectionCheck(
            status_code=response.status_code,
            is_json=is_json_content_type(response.headers.get("content-type")),
        )

    def fetch_and_normalize(self) -> FetchResult:
        response = self._send("GET", self.config.url)
        if not response.is_success:
            raise _status_error(response, include_detail=False)

        data = _parse_json_body(response)
        rows = normalize_rows(data)
        logger.info("fetch_completed url=%s rows=%s", self.config.url, len(rows))
        return FetchResult(data=data, rows=rows)

    def create_record(self, fields: list[PostField]) -> Any:
        payload = build_create_payload(fields)
        return self._request_json("POST", self.config.url, payload)

    def update_record(self, index: int, row: dict[str, Any], edits: dict[str, Any]) -> Any:
        merged = {**row, **edits}
        return self._request_json("PUT", resource_url(self.config.url, row, index), merged)

    def delete_record(self, index: int, row: dict[str, Any]) -> None:
        self._request_json("DELETE", resource_url(self.config.url, row, index), None)

    def _send(self, method: str, url: str, payload: Any = None) -> httpx.Response:
        try:
            return self._client.request(method, url, json=payload)
        except _TRANSPORT_ERRORS as exc:
            logger.warning("request_transport_error method=%s url=%s error=%s", method, url, exc)
            raise NetworkError(method=method, url=url, detail=str(exc)) from exc

    def _request_json(self, method: str, url: str, payload: Any) -> Any:
        response = self._send(method, url, payload)
        if not response.is_success:
            raise _status_error(response)

        logger.info("mutation_completed method=%s url=%s status=%s", method, url, response.status_code)
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return None


def _parse_json_body(response: httpx.Response) -> Any:
    if is_json_content_type(response.headers.get("content-type")):
        try:
            return response.json(parse_constant=_reject_constant)
        except ValueError as exc:
            raise NotJsonError(
                reason=NotJsonError.UNPARSEABLE,
                preview=response.text[:_PREVIEW_CHARS],
            ) from exc

    text = response.text
    if any(marker in text for marker in _HTML_MARKERS):
        raise NotJsonError(reason=NotJsonError.HTML_PAGE)

    # The content type may simply be wrong.
    try:
        return json.loads(text, parse_constant=_reject_constant)
    except ValueError as exc:
        raise NotJsonError(reason=NotJsonError.UNPARSEABLE, preview=text[:_PREVIEW_CHARS]) from exc


def _reject_constant(name: str) -> Any:
    # NaN and Infinity are not valid JSON.
    raise ValueError(f"non-standard JSON constant {name}")


def _status_error(response: httpx.Response, *, include_detail: bool = True) -> HttpStatusError:
    return HttpStatusError(
        method=response.request.method,
        url=str(response.request.url),
        status_code=response.status_code,
        status_text=response.reason_phrase,
        detail=_extract_error_detail(response) if include_detail else "",
    )


def _extract_error_detail(response: httpx.Response) -> str:
    if not response.content:
        return ""

    if is_json_content_type(response.headers.get("content-type")):
        try:
            return json.dumps(response.json())
        except ValueError:
            return ""

    return response.text[:_PREVIEW_CHARS]
