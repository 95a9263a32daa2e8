from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

from api_manager.session import NotificationLevel


class Dth22Read(BaseModel):
    id: int
    unit_name: str
    suhu: float
    kelembapan: float
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ConnectionConfigUpdate(BaseModel):
    url: str = Field(default="", max_length=2000)
    api_key: str = Field(default="", max_length=500)
    token: str = Field(default="", max_length=4000)


class PostFieldIn(BaseModel):
    key: str = Field(default="", max_length=200)
    value: str = Field(default="", max_length=10000)
    type: Literal["text", "number"] = "text"


class CreateRecordRequest(BaseModel):
    fields: list[PostFieldIn] = Field(default_factory=list, max_length=200)


class UpdateRecordRequest(BaseModel):
    edits: dict[str, Any] = Field(default_factory=dict)


class MethodProbeRead(BaseModel):
    method: str
    supported: bool

    model_config = {"from_attributes": True}


class NotificationRead(BaseModel):
    level: NotificationLevel
    message: str

    model_config = {"from_attributes": True}


class ConsoleSessionCreated(BaseModel):
    session_id: str


class ConsoleSessionRead(BaseModel):
    session_id: str
    url: str
    api_key_set: bool
    token_set: bool
    connected: bool
    busy: bool
    methods: list[MethodProbeRead]
    data: Any = None
    rows: list[dict[str, Any]]
    columns: list[str]


class ConsoleActionResponse(BaseModel):
    session: ConsoleSessionRead
    notifications: list[NotificationRead]
