from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional

from taleweaver.domain.models.traits import Trait
from taleweaver.domain.repositories import ItemRepository, LocationRepository, NpcRepository, OptionRepository
from taleweaver.infrastructure.json_file_cache import JsonFileCache


INFO_FILE = "info.json"
OPTIONS_FILE = "options.json"
NPC_FILE = "npc.json"


class _ScenarioFiles:
    def __init__(self, base_dir: str | Path, json_cache: JsonFileCache | None = None) -> None:
        self.base_dir = Path(base_dir)
        self.json_cache = json_cache or JsonFileCache()

    def _location_file(self, location_id: str, filename: str) -> Path | None:
        key = str(location_id or "").strip()
        if not key or "/" in key or "\\" in key or key in (".", ".."):
            return None
        return self.base_dir / key / filename


class JsonLocationRepository(_ScenarioFiles, LocationRepository):
    def get(self, location_id: str) -> Dict[str, Any]:
        path = self._location_file(location_id, INFO_FILE)
        if path is None:
            return {}
        data = self.json_cache.read_json(path, {})
        return dict(data) if isinstance(data, dict) else {}

    def list_ids(self) -> List[str]:
        if not self.base_dir.is_dir():
            return []
        return sorted(entry.name for entry in self.base_dir.iterdir() if (entry / INFO_FILE).is_file())


class JsonOptionRepository(_ScenarioFiles, OptionRepository):
    def _options(self, location_id: str) -> Dict[str, Dict[str, Any]]:
        path = self._location_file(location_id, OPTIONS_FILE)
        data = self.json_cache.read_json(path, {}) if path is not None else {}
        if not isinstance(data, dict):
            return {}
        return {str(option_id): {**row, "id": str(option_id)} for option_id, row in data.items() if isinstance(row, dict)}

    def get(self, location_id: str, option_id: str) -> Optional[Dict[str, Any]]:
        return self._options(location_id).get(str(option_id))

    def list_ids(self, location_id: str) -> List[str]:
        return list(self._options(location_id))


class JsonNpcRepository(_ScenarioFiles, NpcRepository):
    def _npcs(self, location_id: str) -> Dict[str, Dict[str, Any]]:
        path = self._location_file(location_id, NPC_FILE)
        data = self.json_cache.read_json(path, []) if path is not None else []
        npcs: Dict[str, Dict[str, Any]] = {}
        for row in data if isinstance(data, list) else []:
            if not isinstance(row, dict):
                continue
            npc_id = row.get("id") or row.get("name")
            if npc_id:
                npcs[str(npc_id)] = {**row, "id": str(npc_id)}
        return npcs

    def get(self, location_id: str, npc_id: str) -> Optional[Dict[str, Any]]:
        return self._npcs(location_id).get(str(npc_id))

    def list(self, location_id: str) -> List[Dict[str, Any]]:
        return list(self._npcs(location_id).values())


class JsonItemRepository(ItemRepository):
    def __init__(self, items_dir: str | Path, json_cache: JsonFileCache | None = None) -> None:
        self.items_dir = Path(items_dir)
        self.json_cache = json_cache or JsonFileCache()

    def get(self, item_id: str) -> Optional[Dict[str, Any]]:
        key = str(item_id or "").strip()
        if not key or "/" in key or "\\" in key:
            return None
        data = self.json_cache.read_json(self.items_dir / f"{key}.json", None)
        if not isinstance(data, dict):
            return None
        return {**data, "id": key, "name": data.get("name") or data.get("title") or key}

    def list_ids(self) -> List[str]:
        if not self.items_dir.is_dir():
            return []
        return sorted(entry.stem for entry in self.items_dir.glob("*.json"))


def load_traits(path: str | Path, json_cache: JsonFileCache | None = None) -> List[Trait]:
    data = (json_cache or JsonFileCache()).read_json(path, {"traits": []})
    rows = data.get("traits") if isinstance(data, dict) else None
    traits: List[Trait] = []
    for row in rows if isinstance(rows, list) else []:
        if not isinstance(row, dict):
            continue
        name = str(row.get("id") or row.get("name") or "").strip()
        if not name:
            continue
        traits.append(Trait(name, description=str(row.get("description") or row.get("name") or name), side=row.get("side")))
    return traits
