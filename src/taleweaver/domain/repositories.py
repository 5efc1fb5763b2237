from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence


class LocationRepository(ABC):
    @abstractmethod
    def get(self, location_id: str) -> Dict[str, Any]:
        """Return the location catalog (``{}`` when the location is unknown)."""
        raise NotImplementedError

    def list_ids(self) -> List[str]:
        return []


class OptionRepository(ABC):
    @abstractmethod
    def get(self, location_id: str, option_id: str) -> Optional[Dict[str, Any]]:
        raise NotImplementedError

    def get_many(self, location_id: str, option_ids: Sequence[str]) -> List[Dict[str, Any]]:
        rows = (self.get(location_id, option_id) for option_id in option_ids or [])
        return [row for row in rows if row is not None]


class NpcRepository(ABC):
    @abstractmethod
    def get(self, location_id: str, npc_id: str) -> Optional[Dict[str, Any]]:
        raise NotImplementedError

    @abstractmethod
    def list(self, location_id: str) -> List[Dict[str, Any]]:
        raise NotImplementedError

    def options_for(self, location_id: str, npc_id: str) -> List[str]:
        npc = self.get(location_id, npc_id)
        if not npc or not isinstance(npc.get("options"), list):
            return []
        return [str(option_id) for option_id in npc["options"]]


class ItemRepository(ABC):
    @abstractmethod
    def get(self, item_id: str) -> Optional[Dict[str, Any]]:
        raise NotImplementedError


class SaveRepository(ABC):
    @abstractmethod
    def save(self, snapshot) -> bool:
        raise NotImplementedError

    @abstractmethod
    def load(self):
        raise NotImplementedError

    def exists(self) -> bool:
        return self.load() is not None
