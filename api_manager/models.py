from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import DateTime, Float, String
from sqlalchemy.orm import Mapped, mapped_column

from api_manager.db import Base


def utc_now() -> datetime:
    return datetime.now(UTC)


class Dth22Reading(Base):
    __tablename__ = "dth22"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    unit_name: Mapped[str] = mapped_column(String(120), index=True)
    suhu: Mapped[float] = mapped_column(Float)
    kelembapan: Mapped[float] = mapped_column(Float)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utc_now, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utc_now, onupdate=utc_now)
