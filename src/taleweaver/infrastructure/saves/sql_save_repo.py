from __future__ import annotations

import json
import logging

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from taleweaver.application.dtos import SaveSnapshot
from taleweaver.application.mappers.save_mapper import from_save_payload, to_save_payload
from taleweaver.domain.repositories import SaveRepository


_logger = logging.getLogger(__name__)

_CREATE_SAVE_TABLE = """
    CREATE TABLE IF NOT EXISTS save_slot (
        slot_id VARCHAR(64) NOT NULL PRIMARY KEY,
        payload_json TEXT NOT NULL,
        version INTEGER NOT NULL DEFAULT 1
    )
"""


class SqlSaveRepository(SaveRepository):
    """Save slots kept as JSON payloads in a ``save_slot`` table."""

    def __init__(self, engine_or_url: Engine | str, slot: str = "slot1") -> None:
        if isinstance(engine_or_url, str):
            engine_or_url = create_engine(engine_or_url, echo=False, future=True)
        self.engine = engine_or_url
        self.slot = str(slot or "slot1")
        self._session_factory = sessionmaker(bind=self.engine, future=True)
        self.ensure_schema()

    def ensure_schema(self) -> None:
        with self.engine.begin() as conn:
            conn.execute(text(_CREATE_SAVE_TABLE))

    def _upsert_statement(self, dialect: str):
        if dialect == "mysql":
            return text(
                """
                INSERT INTO save_slot (slot_id, payload_json, version)
                VALUES (:slot_id, :payload_json, :version)
                ON DUPLICATE KEY UPDATE
                    payload_json = VALUES(payload_json),
                    version = VALUES(version)
                """
            )
        return text(
            """
            INSERT INTO save_slot (slot_id, payload_json, version)
            VALUES (:slot_id, :payload_json, :version)
            ON CONFLICT(slot_id) DO UPDATE SET
                payload_json = excluded.payload_json,
                version = excluded.version
            """
        )

    def save(self, snapshot: SaveSnapshot | None) -> bool:
        if snapshot is None:
            return False
        payload = to_save_payload(snapshot)
        try:
            with self._session_factory.begin() as session:
                dialect = session.bind.dialect.name if session.bind is not None else "sqlite"
                session.execute(
                    self._upsert_statement(dialect),
                    {
                        "slot_id": self.slot,
                        "payload_json": json.dumps(payload, ensure_ascii=False),
                        "version": int(payload["version"]),
                    },
                )
            return True
        except (SQLAlchemyError, TypeError, ValueError):
            _logger.exception("Save failed", extra={"slot": self.slot})
            return False

    def load(self) -> SaveSnapshot | None:
        try:
            with self._session_factory() as session:
                row = session.execute(
                    text("SELECT payload_json FROM save_slot WHERE slot_id = :slot_id"),
                    {"slot_id": self.slot},
                ).first()
        except SQLAlchemyError:
            _logger.exception("Save slot could not be read", extra={"slot": self.slot})
            return None
        if row is None:
            return None
        try:
            payload = json.loads(row.payload_json)
        except ValueError:
            _logger.warning("Save slot holds invalid JSON", extra={"slot": self.slot})
            return None
        return from_save_payload(payload)

    def delete(self) -> None:
        with self._session_factory.begin() as session:
            session.execute(text("DELETE FROM save_slot WHERE slot_id = :slot_id"), {"slot_id": self.slot})
