from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Literal
from urllib.parse import quote, urlparse

from api_manager.errors import ValidationError

INVALID_URL_MESSAGE = "Please enter a valid URL (e.g., https://api.example.com/data)"


@dataclass(frozen=True, slots=True)
class ConnectionConfig:
    url: str
    api_key: str = ""
    token: str = ""


@dataclass(frozen=True, slots=True)
class PostField:
    key: str
    value: str
    type: Literal["text", "number"] = "text"


def build_headers(config: ConnectionConfig) -> dict[str, str]:
    headers = {"Content-Type": "application/json"}

    if config.api_key:
        headers["X-API-Key"] = config.api_key

    if config.token:
        headers["Authorization"] = f"Bearer {config.token}"

    return headers


def validate_url(url: str) -> str:
    value = url.strip()
    if not value:
        raise ValidationError("Please enter API URL")

    try:
        parsed = urlparse(value)
    except ValueError as exc:
        raise ValidationError(INVALID_URL_MESSAGE) from exc
    if parsed.scheme not in {"http", "https"} or not parsed.netloc:
        raise ValidationError(INVALID_URL_MESSAGE)
    return value


def resource_url(base_url: str, row: dict[str, Any], index: int) -> str:
    """
    Address a single row of a collection endpoint.

    The row's ``id`` is used when it is truthy; otherwise the row's position in
    the table stands in for it.
    """

    identifier: Any = row.get("id") or index
    if isinstance(identifier, float) and identifier.is_integer():
        identifier = int(identifier)
    return f"{base_url.rstrip('/')}/{quote(str(identifier), safe='')}"


def coerce_number(value: str) -> int | float:
    try:
        number = float(value.strip())
    except ValueError as exc:
        raise ValidationError(f"Value `{value}` is not a valid number") from exc
    if not math.isfinite(number):
        raise ValidationError(f"Value `{value}` is not a valid number")
    if number.is_integer():
        return int(number)
    return number


def build_create_payload(fields: list[PostField]) -> dict[str, Any]:
    payload: dict[str, Any] = {}
    for field in fields:
        if not field.key or not field.value:
            continue
        payload[field.key] = coerce_number(field.value) if field.type == "number" else field.value

    if not payload:
        raise ValidationError("Please add at least one field with data")
    return payload
