from __future__ import annotations

import logging
from collections.abc import Callable

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import HTMLResponse

from api_manager import schemas
from api_manager.config import get_settings
from api_manager.connection import PostField
from api_manager.console_ui import CONSOLE_UI_HTML
from api_manager.errors import SessionBusyError
from api_manager.session import ConsoleSession, SessionRegistry

logger = logging.getLogger("api_manager.console")

router = APIRouter(tags=["console"])

_registry: SessionRegistry | None = None


def get_registry() -> SessionRegistry:
    global _registry

    if _registry is None:
        settings = get_settings()
        _registry = SessionRegistry(
            max_sessions=settings.console_max_sessions,
            timeout=settings.client_timeout_sec,
        )
    return _registry


def _get_console_session_or_404(registry: SessionRegistry, session_id: str) -> ConsoleSession:
    session = registry.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Console session not found")
    return session


def _session_read(session: ConsoleSession) -> schemas.ConsoleSessionRead:
    return schemas.ConsoleSessionRead(
        session_id=session.session_id,
        url=session.config.url,
        api_key_set=bool(session.config.api_key),
        token_set=bool(session.config.token),
        connected=session.connected,
        busy=session.busy,
        methods=[schemas.MethodProbeRead.model_validate(result) for result in session.methods],
        data=session.data,
        rows=session.rows,
        columns=session.columns,
    )


def _run_action(session: ConsoleSession, action: Callable[[], None]) -> schemas.ConsoleActionResponse:
    try:
        action()
    except SessionBusyError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc

    return schemas.ConsoleActionResponse(
        session=_session_read(session),
        notifications=[
            schemas.NotificationRead.model_validate(item) for item in session.drain_notifications()
        ],
    )


@router.get("/", response_class=HTMLResponse, include_in_schema=False)
@router.get("/console", response_class=HTMLResponse)
def console_page() -> str:
    return CONSOLE_UI_HTML


@router.post("/console/sessions", response_model=schemas.ConsoleSessionCreated, status_code=201)
def create_console_session(
    registry: SessionRegistry = Depends(get_registry),
) -> schemas.ConsoleSessionCreated:
    session = registry.create()
    logger.info("console_session_created session_id=%s", session.session_id)
    return schemas.ConsoleSessionCreated(session_id=session.session_id)


@router.get("/console/sessions/{session_id}", response_model=schemas.ConsoleSessionRead)
def get_console_session(
    session_id: str,
    registry: SessionRegistry = Depends(get_registry),
) -> schemas.ConsoleSessionRead:
    return _session_read(_get_console_session_or_404(registry, session_id))


@router.delete("/console/sessions/{session_id}", status_code=204)
def delete_console_session(
    session_id: str,
    registry: SessionRegistry = Depends(get_registry),
) -> None:
    if not registry.discard(session_id):
        raise HTTPException(status_code=404, detail="Console session not found")


@router.put("/console/sessions/{session_id}/config", response_model=schemas.ConsoleActionResponse)
def update_console_config(
    session_id: str,
    payload: schemas.ConnectionConfigUpdate,
    registry: SessionRegistry = Depends(get_registry),
) -> schemas.ConsoleActionResponse:
    session = _get_console_session_or_404(registry, session_id)
    return _run_action(
        session,
        lambda: session.update_config(url=payload.url, api_key=payload.api_key, token=payload.token),
    )


@router.post("/console/sessions/{session_id}/test", response_model=schemas.ConsoleActionResponse)
def test_console_connection(
    session_id: str,
    registry: SessionRegistry = Depends(get_registry),
) -> schemas.ConsoleActionResponse:
    session = _get_console_session_or_404(registry, session_id)
    return _run_action(session, session.test_connection)


@router.post("/console/sessions/{session_id}/connect", response_model=schemas.ConsoleActionResponse)
def connect_console_session(
    session_id: str,
    registry: SessionRegistry = Depends(get_registry),
) -> schemas.ConsoleActionResponse:
    session = _get_console_session_or_404(registry, session_id)
    return _run_action(session, session.connect)


@router.post("/console/sessions/{session_id}/refresh", response_model=schemas.ConsoleActionResponse)
def refresh_console_session(
    session_id: str,
    registry: SessionRegistry = Depends(get_registry),
) -> schemas.ConsoleActionResponse:
    session = _get_console_session_or_404(registry, session_id)
    return _run_action(session, session.refresh)


@router.post("/console/sessions/{session_id}/disconnect", response_model=schemas.ConsoleActionResponse)
def disconnect_console_session(
    session_id: str,
    registry: SessionRegistry = Depends(get_registry),
) -> schemas.ConsoleActionResponse:
    session = _get_console_session_or_404(registry, session_id)
    return _run_action(session, session.disconnect)


@router.post("/console/sessions/{session_id}/fetch", response_model=schemas.ConsoleActionResponse)
def fetch_console_data(
    session_id: str,
    registry: SessionRegistry = Depends(get_registry),
) -> schemas.ConsoleActionResponse:
    session = _get_console_session_or_404(registry, session_id)
    return _run_action(session, session.fetch_data)


@router.post("/console/sessions/{session_id}/records", response_model=schemas.ConsoleActionResponse)
def create_console_record(
    session_id: str,
    payload: schemas.CreateRecordRequest,
    registry: SessionRegistry = Depends(get_registry),
) -> schemas.ConsoleActionResponse:
    session = _get_console_session_or_404(registry, session_id)
    fields = [PostField(key=item.key, value=item.value, type=item.type) for item in payload.fields]
    return _run_action(session, lambda: session.submit_post(fields))


@router.put("/console/sessions/{session_id}/records/{index}", response_model=schemas.ConsoleActionResponse)
def update_console_record(
    session_id: str,
    index: int,
    payload: schemas.UpdateRecordRequest,
    registry: SessionRegistry = Depends(get_registry),
) -> schemas.ConsoleActionResponse:
    session = _get_console_session_or_404(registry, session_id)
    return _run_action(session, lambda: session.edit_row(index, payload.edits))


@router.delete("/console/sessions/{session_id}/records/{index}", response_model=schemas.ConsoleActionResponse)
def delete_console_record(
    session_id: str,
    index: int,
    registry: SessionRegistry = Depends(get_registry),
) -> schemas.ConsoleActionResponse:
    session = _get_console_session_or_404(registry, session_id)
    return _run_action(session, lambda: session.delete_row(index))
