from __future__ import annotations

import json
import logging
import math
from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, Response
from sqlalchemy.orm import Session

from api_manager import models, schemas
from api_manager.config import get_settings
from api_manager.db import get_session
from api_manager.dth22_store import MAX_RECORD_ID, Dth22Store, RecordNotFoundError, StorageError

logger = logging.getLogger("api_manager.dth22")

router = APIRouter(prefix="/api/dth22", tags=["dth22"])

MSG_LIST_FAILED = "Gagal mengambil data DTH22"
MSG_CREATE_FAILED = "Gagal menambahkan data DTH22"
MSG_UPDATE_FAILED = "Gagal memperbarui data DTH22"
MSG_DELETE_FAILED = "Gagal menghapus data DTH22"
MSG_FIELDS_REQUIRED = "Semua field harus diisi"
MSG_ID_REQUIRED = "ID harus disertakan"
MSG_ID_INVALID = "ID harus berupa angka"
MSG_NOT_NUMERIC = "Suhu dan kelembapan harus berupa angka"
MSG_INVALID_JSON = "Body harus berupa JSON yang valid"
MSG_NOT_FOUND = "Data DTH22 tidak ditemukan"

CORS_ALLOW_METHODS = "GET, POST, PUT, OPTIONS"
CORS_ALLOW_HEADERS = "Content-Type, Authorization"


class _BadRequest(Exception):
    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


def _with_cors(response: Response) -> Response:
    settings = get_settings()
    if not settings.dth22_cors_enabled:
        return response

    response.headers["Access-Control-Allow-Origin"] = settings.dth22_cors_allow_origin
    response.headers["Access-Control-Allow-Methods"] = CORS_ALLOW_METHODS
    response.headers["Access-Control-Allow-Headers"] = CORS_ALLOW_HEADERS
    return response


def _json(content: Any, *, status_code: int = 200) -> Response:
    return _with_cors(JSONResponse(status_code=status_code, content=content))


def _error(message: str, *, status_code: int) -> Response:
    return _json({"error": message}, status_code=status_code)


def _serialize(record: models.Dth22Reading) -> dict[str, Any]:
    return schemas.Dth22Read.model_validate(record).model_dump(mode="json")


async def _read_body(request: Request) -> dict[str, Any]:
    raw = await request.body()
    if not raw:
        return {}
    try:
        body = json.loads(raw)
    except ValueError as exc:
        raise _BadRequest(MSG_INVALID_JSON) from exc
    return body if isinstance(body, dict) else {}


def _parse_float(value: Any) -> float:
    if isinstance(value, bool):
        raise _BadRequest(MSG_NOT_NUMERIC)
    try:
        number = float(str(value).strip())
    except ValueError as exc:
        raise _BadRequest(MSG_NOT_NUMERIC) from exc
    if not math.isfinite(number):
        raise _BadRequest(MSG_NOT_NUMERIC)
    return number


def _parse_record_id(value: Any) -> int:
    if not value:
        raise _BadRequest(MSG_ID_REQUIRED)
    try:
        record_id = int(str(value).strip())
    except ValueError as exc:
        raise _BadRequest(MSG_ID_INVALID) from exc
    if not 1 <= record_id <= MAX_RECORD_ID:
        raise _BadRequest(MSG_ID_INVALID)
    return record_id


def _update_fields(body: dict[str, Any]) -> dict[str, Any]:
    fields: dict[str, Any] = {}
    if body.get("unit_name") is not None:
        fields["unit_name"] = str(body["unit_name"])
    for name in ("suhu", "kelembapan"):
        if body.get(name) is not None:
            fields[name] = _parse_float(body[name])
    return fields


def _apply_update(db: Session, record_id: int, body: dict[str, Any]) -> Response:
    try:
        record = Dth22Store(db).update(record_id, _update_fields(body))
    except _BadRequest as exc:
        return _error(exc.message, status_code=400)
    except RecordNotFoundError:
        return _error(MSG_NOT_FOUND, status_code=404)
    except StorageError:
        logger.exception("dth22_update_failed id=%s", record_id)
        return _error(MSG_UPDATE_FAILED, status_code=500)
    return _json(_serialize(record))


@router.get("")
def list_readings(db: Session = Depends(get_session)) -> Response:
    try:
        records = Dth22Store(db).list_all()
    except StorageError:
        logger.exception("dth22_list_failed")
        return _error(MSG_LIST_FAILED, status_code=500)
    return _json([_serialize(record) for record in records])


@router.post("")
async def create_reading(request: Request, db: Session = Depends(get_session)) -> Response:
    try:
        body = await _read_body(request)
        unit_name = body.get("unit_name")
        if not unit_name or body.get("suhu") is None or body.get("kelembapan") is None:
            raise _BadRequest(MSG_FIELDS_REQUIRED)
        suhu = _parse_float(body["suhu"])
        kelembapan = _parse_float(body["kelembapan"])
    except _BadRequest as exc:
        return _error(exc.message, status_code=400)

    try:
        record = Dth22Store(db).create(unit_name=str(unit_name), suhu=suhu, kelembapan=kelembapan)
    except StorageError:
        logger.exception("dth22_create_failed unit_name=%s", unit_name)
        return _error(MSG_CREATE_FAILED, status_code=500)
    return _json(_serialize(record), status_code=201)


@router.put("")
async def update_reading(request: Request, db: Session = Depends(get_session)) -> Response:
    try:
        body = await _read_body(request)
        record_id = _parse_record_id(body.get("id"))
    except _BadRequest as exc:
        return _error(exc.message, status_code=400)
    return _apply_update(db, record_id, body)


@router.options("")
def preflight() -> Response:
    return _with_cors(Response(status_code=204))


@router.get("/{record_id}")
def get_reading(record_id: int, db: Session = Depends(get_session)) -> Response:
    try:
        record = Dth22Store(db).get(record_id)
    except RecordNotFoundError:
        return _error(MSG_NOT_FOUND, status_code=404)
    except StorageError:
        logger.exception("dth22_get_failed id=%s", record_id)
        return _error(MSG_LIST_FAILED, status_code=500)
    return _json(_serialize(record))


@router.put("/{record_id}")
async def update_reading_by_path(record_id: int, request: Request, db: Session = Depends(get_session)) -> Response:
    try:
        body = await _read_body(request)
    except _BadRequest as exc:
        return _error(exc.message, status_code=400)
    return _apply_update(db, record_id, body)


@router.delete("/{record_id}")
def delete_reading(record_id: int, db: Session = Depends(get_session)) -> Response:
    store = Dth22Store(db)
    try:
        payload = _serialize(store.get(record_id))
        store.delete(record_id)
    except RecordNotFoundError:
        return _error(MSG_NOT_FOUND, status_code=404)
    except StorageError:
        logger.exception("dth22_delete_failed id=%s", record_id)
        return _error(MSG_DELETE_FAILED, status_code=500)
    return _json(payload)


@router.options("/{record_id}")
def preflight_item(record_id: int) -> Response:
    return _with_cors(Response(status_code=204))
