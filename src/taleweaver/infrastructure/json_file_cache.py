import json
import logging
from pathlib import Path
from typing import Any, Dict


_logger = logging.getLogger(__name__)


class JsonFileCache:
    """Process-wide pool of parsed JSON files keyed by resolved path.

    A file is read at most once; missing or unreadable files cache the
    supplied default.
    """

    def __init__(self) -> None:
        self._entries: Dict[str, Any] = {}

    def read_json(self, path: str | Path, default: Any = None) -> Any:
        key = str(Path(path).resolve())
        if key in self._entries:
            return self._entries[key]

        data = default
        file_path = Path(key)
        if file_path.exists():
            try:
                data = json.loads(file_path.read_text(encoding="utf-8"))
            except (OSError, ValueError):
                _logger.warning("Unreadable JSON file; using default", extra={"path": key}, exc_info=True)
                data = default
        else:
            _logger.debug("JSON file not found; using default", extra={"path": key})
        self._entries[key] = data
        return data

    def invalidate(self, path: str | Path) -> None:
        self._entries.pop(str(Path(path).resolve()), None)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
