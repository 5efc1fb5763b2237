from __future__ import annotations

from typing import Any, Dict, Iterable, Mapping


Ledger = Dict[str, Dict[str, float]]


def _coerce_quantity(value: object, default: float = 1) -> float:
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return default
    if number != number or number in (float("inf"), float("-inf")):
        return default
    return int(number) if number.is_integer() else number


class WorldState:
    """Per-location item accounting in three layers.

    ``defaults`` is seeded from scene-declared inventory and only ever raised,
    ``added`` and ``removed`` record explicit changes. Net availability is
    ``max(0, defaults + added - removed)``.
    """

    def __init__(self) -> None:
        self._defaults: Ledger = {}
        self._added: Ledger = {}
        self._removed: Ledger = {}

    def reset(self) -> None:
        self._defaults.clear()
        self._added.clear()
        self._removed.clear()

    @staticmethod
    def _get(ledger: Ledger, location_id: str, item_id: str) -> float:
        return ledger.get(str(location_id), {}).get(str(item_id), 0)

    @staticmethod
    def _set(ledger: Ledger, location_id: str, item_id: str, value: float) -> None:
        ledger.setdefault(str(location_id), {})[str(item_id)] = max(0, value)

    def _net(self, location_id: str, item_id: str) -> float:
        return (
            self._get(self._defaults, location_id, item_id)
            + self._get(self._added, location_id, item_id)
            - self._get(self._removed, location_id, item_id)
        )

    def apply_scene_inventory(self, location_id: str, items: Iterable[Mapping[str, Any]] | None) -> None:
        if not location_id:
            return
        for item in items or ():
            if not isinstance(item, Mapping) or not item.get("id"):
                continue
            raw_qty = item.get("quantity", item.get("qty", item.get("count", 1)))
            qty = max(0, _coerce_quantity(raw_qty))
            if qty > self._get(self._defaults, location_id, item["id"]):
                self._set(self._defaults, location_id, item["id"], qty)

    def add_location_item(self, location_id: str, item_id: str, qty: float = 1) -> None:
        if not location_id or not item_id:
            return
        amount = _coerce_quantity(qty)
        if amount == 0:
            return
        current = self._get(self._added, location_id, item_id)
        self._set(self._added, location_id, item_id, current + amount)

    def remove_location_item(self, location_id: str, item_id: str, qty: float = 1) -> float:
        """Remove up to ``qty`` items; returns how many were actually taken."""
        if not location_id or not item_id:
            return 0
        amount = _coerce_quantity(qty)
        if amount == 0:
            return 0
        take = max(0, min(self._net(location_id, item_id), amount))
        if take > 0:
            current = self._get(self._removed, location_id, item_id)
            self._set(self._removed, location_id, item_id, current + take)
        return take

    def has_location_item(self, location_id: str, item_id: str, qty: float = 1) -> bool:
        if not location_id or not item_id:
            return False
        return self._net(location_id, item_id) >= _coerce_quantity(qty)

    def location_item_count(self, location_id: str, item_id: str) -> float:
        return max(0, self._net(location_id, item_id))

    def location_items_snapshot(self, location_id: str) -> dict[str, dict[str, float]]:
        location_key = str(location_id)
        snapshot: dict[str, dict[str, float]] = {}
        for layer_name, ledger in (("defaults", self._defaults), ("added", self._added), ("removed", self._removed)):
            for item_id, count in ledger.get(location_key, {}).items():
                row = snapshot.setdefault(item_id, {"defaults": 0, "added": 0, "removed": 0, "net": 0})
                row[layer_name] = count
        for row in snapshot.values():
            row["net"] = max(0, row["defaults"] + row["added"] - row["removed"])
        return snapshot

    def to_dict(self) -> dict[str, Ledger]:
        def _copy(ledger: Ledger) -> Ledger:
            return {location: dict(items) for location, items in ledger.items()}

        return {
            "defaults": _copy(self._defaults),
            "added": _copy(self._added),
            "removed": _copy(self._removed),
        }

    def load(self, payload: Mapping[str, Any] | None) -> None:
        self.reset()
        if not isinstance(payload, Mapping):
            return
        for layer_name, ledger in (("defaults", self._defaults), ("added", self._added), ("removed", self._removed)):
            layer = payload.get(layer_name)
            if not isinstance(layer, Mapping):
                continue
            for location_id, items in layer.items():
                if not isinstance(items, Mapping):
                    continue
                for item_id, count in items.items():
                    self._set(ledger, location_id, item_id, _coerce_quantity(count, default=0))
