from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from api_manager import models

logger = logging.getLogger("api_manager.dth22")

UPDATABLE_FIELDS = ("unit_name", "suhu", "kelembapan")
# Largest value a signed 64-bit INTEGER primary key can hold.
MAX_RECORD_ID = 2**63 - 1


class StorageError(RuntimeError):
    """Raised when the DTH22 store cannot complete an operation."""


class RecordNotFoundError(StorageError):
    def __init__(self, record_id: int) -> None:
        self.record_id = record_id
        super().__init__(f"DTH22 record {record_id} not found")


class Dth22Store:
    def __init__(self, db: Session) -> None:
        self.db = db

    def list_all(self) -> list[models.Dth22Reading]:
        stmt = select(models.Dth22Reading).order_by(
            models.Dth22Reading.created_at.desc(),
            models.Dth22Reading.id.desc(),
        )
        try:
            return list(self.db.scalars(stmt).all())
        except SQLAlchemyError as exc:
            raise StorageError("Failed to list DTH22 records") from exc

    def get(self, record_id: int) -> models.Dth22Reading:
        if not 1 <= record_id <= MAX_RECORD_ID:
            raise RecordNotFoundError(record_id)
        try:
            record = self.db.get(models.Dth22Reading, record_id)
        except SQLAlchemyError as exc:
            raise StorageError(f"Failed to load DTH22 record {record_id}") from exc
        if record is None:
            raise RecordNotFoundError(record_id)
        return record

    def create(self, *, unit_name: str, suhu: float, kelembapan: float) -> models.Dth22Reading:
        record = models.Dth22Reading(unit_name=unit_name, suhu=suhu, kelembapan=kelembapan)
        try:
            self.db.add(record)
            self.db.commit()
            self.db.refresh(record)
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise StorageError("Failed to create DTH22 record") from exc

        logger.info("dth22_created id=%s unit_name=%s", record.id, record.unit_name)
        return record

    def update(self, record_id: int, fields: dict[str, Any]) -> models.Dth22Reading:
        record = self.get(record_id)
        for name in UPDATABLE_FIELDS:
            if name in fields:
                setattr(record, name, fields[name])

        try:
            self.db.commit()
            self.db.refresh(record)
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise StorageError(f"Failed to update DTH22 record {record_id}") from exc

        logger.info("dth22_updated id=%s fields=%s", record.id, sorted(set(fields) & set(UPDATABLE_FIELDS)))
        return record

    def delete(self, record_id: int) -> None:
        record = self.get(record_id)
        try:
            self.db.delete(record)
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise StorageError(f"Failed to delete DTH22 record {record_id}") from exc

        logger.info("dth22_deleted id=%s", record_id)
