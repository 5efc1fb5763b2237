from __future__ import annotations

import math
from typing import List

from taleweaver.application.services.scene_cache import SceneCache
from taleweaver.domain.events import InventoryChanged
from taleweaver.domain.models.navigation import NavigationPointer, Scene


class MovementManager:
    """Moves the pointer and scales travel time by the fastest item carried."""

    def __init__(self, cache: SceneCache, inventory=None) -> None:
        if cache is None:
            raise ValueError("MovementManager requires a SceneCache")
        self._cache = cache
        self._inventory = None
        self._speed = 1.0
        self.attach_inventory(inventory)

    def attach_inventory(self, inventory) -> None:
        self._inventory = inventory
        if inventory is not None:
            inventory.subscribe(self._on_inventory_changed)
        self.recompute_speed()

    def _on_inventory_changed(self, _change: InventoryChanged) -> None:
        self.recompute_speed()

    def recompute_speed(self) -> None:
        speed = 1.0
        for entry in self._inventory.items() if self._inventory is not None else []:
            if entry.speed is not None and math.isfinite(entry.speed) and entry.speed > speed:
                speed = entry.speed
        self._speed = speed

    @property
    def speed(self) -> float:
        return self._speed

    def compute_time(self, hours: object, kind: str | None = None) -> float:
        try:
            value = float(hours)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            return 0
        if not math.isfinite(value) or value <= 0:
            return 0
        if kind == "travel":
            return value / (self._speed or 1)
        return value

    @property
    def pointer(self) -> NavigationPointer | None:
        return self._cache.pointer

    @property
    def history(self) -> List[NavigationPointer]:
        return self._cache.history

    @property
    def current_scene(self) -> Scene | None:
        return self._cache.current_scene()

    @property
    def current_location_id(self) -> str | None:
        pointer = self._cache.pointer
        return pointer.location_id if pointer else None

    def go(self, payload: object) -> NavigationPointer | None:
        return self._cache.apply_result(payload)

    def set_current(self, location_id: str, scene_id: str | None = None) -> NavigationPointer | None:
        return self._cache.set_current(location_id, scene_id)
