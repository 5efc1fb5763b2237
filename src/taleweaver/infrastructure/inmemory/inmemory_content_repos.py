from typing import Any, Dict, List, Mapping, Optional

from taleweaver.domain.repositories import ItemRepository, LocationRepository, NpcRepository, OptionRepository


class InMemoryLocationRepository(LocationRepository):
    def __init__(self, locations: Optional[Mapping[str, Dict[str, Any]]] = None):
        self._locations = {str(key): dict(value) for key, value in (locations or {}).items()}

    def get(self, location_id: str) -> Dict[str, Any]:
        return dict(self._locations.get(str(location_id), {}))

    def list_ids(self) -> List[str]:
        return list(self._locations)


class InMemoryOptionRepository(OptionRepository):
    def __init__(self, options: Optional[Mapping[str, Mapping[str, Dict[str, Any]]]] = None):
        self._options: Dict[str, Dict[str, Dict[str, Any]]] = {}
        for location_id, rows in (options or {}).items():
            self._options[str(location_id)] = {
                str(option_id): {**row, "id": str(option_id)} for option_id, row in rows.items()
            }

    def get(self, location_id: str, option_id: str) -> Optional[Dict[str, Any]]:
        row = self._options.get(str(location_id), {}).get(str(option_id))
        return dict(row) if row is not None else None

    def list_ids(self, location_id: str) -> List[str]:
        return list(self._options.get(str(location_id), {}))


class InMemoryNpcRepository(NpcRepository):
    def __init__(self, npcs: Optional[Mapping[str, List[Dict[str, Any]]]] = None):
        self._npcs: Dict[str, Dict[str, Dict[str, Any]]] = {}
        for location_id, rows in (npcs or {}).items():
            self._npcs[str(location_id)] = {
                str(row.get("id") or row.get("name")): {**row, "id": str(row.get("id") or row.get("name"))}
                for row in rows
                if row.get("id") or row.get("name")
            }

    def get(self, location_id: str, npc_id: str) -> Optional[Dict[str, Any]]:
        row = self._npcs.get(str(location_id), {}).get(str(npc_id))
        return dict(row) if row is not None else None

    def list(self, location_id: str) -> List[Dict[str, Any]]:
        return [dict(row) for row in self._npcs.get(str(location_id), {}).values()]


class InMemoryItemRepository(ItemRepository):
    def __init__(self, items: Optional[Mapping[str, Dict[str, Any]]] = None):
        self._items = {str(key): dict(value) for key, value in (items or {}).items()}

    def get(self, item_id: str) -> Optional[Dict[str, Any]]:
        row = self._items.get(str(item_id))
        if row is None:
            return None
        return {**row, "id": str(item_id), "name": row.get("name") or str(item_id)}
