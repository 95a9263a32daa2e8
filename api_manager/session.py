from __future__ import annotations

import logging
import threading
import uuid
from collections import OrderedDict
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Any

import httpx

from api_manager.client import (
    DEFAULT_TIMEOUT_SEC,
    ApiConnectionClient,
    MethodProbeResult,
    table_columns,
    unprobed_methods,
)
from api_manager.connection import ConnectionConfig, PostField, validate_url
from api_manager.errors import (
    ApiClientError,
    HttpStatusError,
    NetworkError,
    SessionBusyError,
    ValidationError,
)

logger = logging.getLogger("api_manager.session")


class NotificationLevel(str, Enum):
    success = "success"
    warning = "warning"
    error = "error"
    info = "info"


@dataclass(frozen=True, slots=True)
class Notification:
    level: NotificationLevel
    message: str


def _failure_message(prefix: str, exc: HttpStatusError) -> str:
    message = f"{prefix} failed: {exc.status_code} {exc.status_text}"
    if exc.detail:
        message += f" - {exc.detail}"
    return message


class ConsoleSession:
    """
    State of one API console session.

    Holds the connection config, probe results and the currently displayed
    table. Operations never raise client errors; they record a notification
    and leave the session in a safe state instead. Only one operation may run
    at a time.
    """

    def __init__(
        self,
        *,
        session_id: str,
        timeout: float = DEFAULT_TIMEOUT_SEC,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.session_id = session_id
        self.config = ConnectionConfig(url="")
        self.connected = False
        self.methods: list[MethodProbeResult] = unprobed_methods()
        self.data: Any = None
        self.rows: list[dict[str, Any]] = []
        self.busy = False
        self._timeout = timeout
        self._transport = transport
        self._notifications: list[Notification] = []
        self._lock = threading.Lock()

    @property
    def columns(self) -> list[str]:
        return table_columns(self.rows)

    def supports(self, method: str) -> bool:
        return any(result.method == method.upper() and result.supported for result in self.methods)

    def drain_notifications(self) -> list[Notification]:
        with self._lock:
            pending, self._notifications = self._notifications, []
        return pending

    def update_config(self, *, url: str, api_key: str = "", token: str = "") -> None:
        with self._operation():
            self.config = ConnectionConfig(url=url.strip(), api_key=api_key, token=token)

    def test_connection(self) -> None:
        with self._operation():
            if not self._has_valid_url():
                return

            with self._open_client() as client:
                try:
                    check = client.check_connection()
                except HttpStatusError as exc:
                    self._notify_error(f"Connection failed: {exc.status_code} {exc.status_text}")
                    return
                except NetworkError:
                    self._notify_error("Connection failed: Unable to reach the API")
                    return

                if check.is_json:
                    self._notify(NotificationLevel.success, "Connection test successful! JSON API detected.")
                else:
                    self._notify(
                        NotificationLevel.warning,
                        "Connection successful, but API may not return JSON data.",
                    )
                self.methods = client.probe_methods()

    def connect(self) -> None:
        with self._operation():
            if not self._has_valid_url():
                return

            with self._open_client() as client:
                try:
                    client.check_connection()
                except HttpStatusError as exc:
                    self._notify_error(f"Connection failed: {exc.status_code} {exc.status_text}")
                    return
                except NetworkError:
                    self._notify_error("Connection failed: Unable to connect to API")
                    return

                self.connected = True
                self._notify(NotificationLevel.success, "Successfully connected to API!")
                logger.info("session_connected session_id=%s url=%s", self.session_id, self.config.url)
                self._load_data(client)

    def refresh(self) -> None:
        with self._operation():
            if not self.connected:
                self._notify_error("Not connected to API")
                return

            with self._open_client() as client:
                self._load_data(client)
                self.methods = client.probe_methods()
            self._notify(NotificationLevel.success, "Connection refreshed!")

    def disconnect(self) -> None:
        with self._operation():
            self.connected = False
            self.data = None
            self.rows = []
            self.methods = unprobed_methods()
            self._notify(NotificationLevel.success, "Disconnected from API!")
            logger.info("session_disconnected session_id=%s", self.session_id)

    def fetch_data(self) -> None:
        with self._operation():
            if not self._has_valid_url():
                return
            with self._open_client() as client:
                self._load_data(client)

    def submit_post(self, fields: list[PostField]) -> None:
        with self._operation():
            if not self._has_valid_url():
                return

            with self._open_client() as client:
                try:
                    client.create_record(fields)
                except ValidationError as exc:
                    self._notify_error(str(exc))
                    return
                except HttpStatusError as exc:
                    self._notify_error(_failure_message("POST", exc))
                    return
                except NetworkError:
                    self._notify_error("POST request failed: Network error")
                    return

                self._notify(NotificationLevel.success, "Data posted successfully!")
                self._load_data(client)

    def edit_row(self, index: int, edits: dict[str, Any]) -> None:
        with self._operation():
            row = self._row_or_none(index)
            if row is None or not self._has_valid_url():
                return

            with self._open_client() as client:
                try:
                    client.update_record(index, row, edits)
                except HttpStatusError as exc:
                    self._notify_error(_failure_message("PUT", exc))
                    return
                except NetworkError:
                    self._notify_error("PUT request failed")
                    return

                self._notify(NotificationLevel.success, "Data updated successfully!")
                self._load_data(client)

    def delete_row(self, index: int) -> None:
        with self._operation():
            row = self._row_or_none(index)
            if row is None or not self._has_valid_url():
                return

            with self._open_client() as client:
                try:
                    client.delete_record(index, row)
                except HttpStatusError as exc:
                    self._notify_error(_failure_message("DELETE", exc))
                    return
                except NetworkError:
                    self._notify_error("DELETE request failed")
                    return

                self._notify(NotificationLevel.success, "Data deleted successfully!")
                self._load_data(client)

    def _load_data(self, client: ApiConnectionClient) -> bool:
        try:
            result = client.fetch_and_normalize()
        except ApiClientError as exc:
            logger.warning("session_fetch_failed session_id=%s error=%s", self.session_id, exc)
            self._notify_error(str(exc))
            self.data = None
            self.rows = []
            return False

        self.data = result.data
        self.rows = result.rows
        return True

    def _has_valid_url(self) -> bool:
        try:
            validate_url(self.config.url)
        except ValidationError as exc:
            self._notify_error(str(exc))
            return False
        return True

    def _row_or_none(self, index: int) -> dict[str, Any] | None:
        if 0 <= index < len(self.rows):
            return self.rows[index]
        self._notify_error(f"Row {index} does not exist")
        return None

    def _open_client(self) -> ApiConnectionClient:
        return ApiConnectionClient(self.config, timeout=self._timeout, transport=self._transport)

    @contextmanager
    def _operation(self) -> Iterator[None]:
        with self._lock:
            if self.busy:
                raise SessionBusyError(f"Session {self.session_id} is busy with another request")
            self.busy = True
        try:
            yield
        finally:
            with self._lock:
                self.busy = False

    def _notify(self, level: NotificationLevel, message: str) -> None:
        with self._lock:
            self._notifications.append(Notification(level=level, message=message))

    def _notify_error(self, message: str) -> None:
        self._notify(NotificationLevel.error, message)


class SessionRegistry:
    """In-memory console sessions, oldest evicted first once `max_sessions` is reached."""

    def __init__(
        self,
        *,
        max_sessions: int,
        timeout: float = DEFAULT_TIMEOUT_SEC,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.max_sessions = max_sessions
        self._timeout = timeout
        self._transport = transport
        self._sessions: OrderedDict[str, ConsoleSession] = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def create(self) -> ConsoleSession:
        session = ConsoleSession(
            session_id=uuid.uuid4().hex,
            timeout=self._timeout,
            transport=self._transport,
        )
        with self._lock:
            while len(self._sessions) >= self.max_sessions:
                evicted_id, _ = self._sessions.popitem(last=False)
                logger.info("session_evicted session_id=%s", evicted_id)
            self._sessions[session.session_id] = session
        return session

    def get(self, session_id: str) -> ConsoleSession | None:
        with self._lock:
            return self._sessions.get(session_id)

    def discard(self, session_id: str) -> bool:
        with self._lock:
            return self._sessions.pop(session_id, None) is not None
