import json
import logging
import os
from pathlib import Path

from taleweaver.application.dtos import SaveSnapshot
from taleweaver.application.mappers.save_mapper import from_save_payload, to_save_payload
from taleweaver.domain.repositories import SaveRepository


class JsonSaveRepository(SaveRepository):
    """Single save slot stored as a JSON document, replaced atomically."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._logger = logging.getLogger(__name__)

    def exists(self) -> bool:
        return self.path.exists()

    def save(self, snapshot: SaveSnapshot | None) -> bool:
        if snapshot is None:
            return False
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self.path.with_suffix(".tmp")
            tmp_path.write_text(json.dumps(to_save_payload(snapshot), ensure_ascii=False, indent=2), encoding="utf-8")
            os.replace(tmp_path, self.path)
            return True
        except (OSError, TypeError, ValueError):
            self._logger.exception("Save failed", extra={"path": str(self.path)})
            return False

    def load(self) -> SaveSnapshot | None:
        if not self.path.exists():
            return None
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            self._logger.exception("Save file unreadable", extra={"path": str(self.path)})
            return None
        return from_save_payload(payload)
