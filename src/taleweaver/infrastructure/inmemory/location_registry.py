from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict


@dataclass(frozen=True)
class LocationView:
    id: str
    name: str
    background: Any = None


class LocationRegistry:
    """Flyweight store of the locations the player can currently reach."""

    def __init__(self) -> None:
        self._locations: Dict[str, LocationView] = {}

    def ensure(self, location_id: str, *, title: str | None = None, background: Any = None) -> LocationView:
        key = str(location_id or "").strip()
        if not key:
            raise ValueError("location_id is required")
        existing = self._locations.get(key)
        if existing is not None:
            return existing
        view = LocationView(id=key, name=str(title or key), background=background)
        self._locations[key] = view
        return view

    def has(self, location_id: str) -> bool:
        return str(location_id) in self._locations

    def get_dto(self, location_id: str) -> LocationView:
        view = self._locations.get(str(location_id))
        if view is None:
            raise KeyError(f"Location not registered: {location_id}")
        return view
