from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping

from taleweaver.domain.events import InventoryChanged


_logger = logging.getLogger(__name__)

ItemLookup = Callable[[str], Mapping[str, Any] | None]


@dataclass(frozen=True)
class InventoryEntry:
    id: str
    name: str
    quantity: int
    description: str = ""
    speed: float | None = None
    traits: Dict[str, float] = field(default_factory=dict)


def _positive_int(value: object, default: int = 1) -> int:
    try:
        number = int(float(value))  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return default
    return max(0, number)


class PlayerInventory:
    def __init__(self, item_lookup: ItemLookup | None = None) -> None:
        self._item_lookup = item_lookup
        self._counts: Dict[str, int] = {}
        self._listeners: List[Callable[[InventoryChanged], None]] = []

    def record_for(self, item_id: str) -> Dict[str, Any]:
        record: Mapping[str, Any] | None = None
        if self._item_lookup is not None:
            try:
                record = self._item_lookup(item_id)
            except Exception:
                _logger.warning("Item lookup failed", extra={"item_id": item_id}, exc_info=True)
                record = None
        row = dict(record) if isinstance(record, Mapping) else {}
        row["id"] = item_id
        row.setdefault("name", row.get("title") or item_id)
        return row

    def count(self, item_id: str) -> int:
        return self._counts.get(str(item_id), 0)

    def has(self, item_id: str, qty: int = 1) -> bool:
        return self.count(item_id) >= _positive_int(qty)

    def add(self, item_id: str, qty: int = 1) -> int:
        key = str(item_id or "").strip()
        amount = _positive_int(qty)
        if not key or amount == 0:
            return 0
        self._counts[key] = self._counts.get(key, 0) + amount
        self._notify(InventoryChanged(item_id=key, delta=amount, quantity=self._counts[key]))
        return amount

    def remove(self, item_id: str, qty: int = 1) -> int:
        key = str(item_id or "").strip()
        take = min(self.count(key), _positive_int(qty))
        if take <= 0:
            return 0
        remaining = self._counts[key] - take
        if remaining:
            self._counts[key] = remaining
        else:
            del self._counts[key]
        self._notify(InventoryChanged(item_id=key, delta=-take, quantity=remaining))
        return take

    def items(self) -> List[InventoryEntry]:
        entries: List[InventoryEntry] = []
        for item_id, quantity in self._counts.items():
            record = self.record_for(item_id)
            speed = record.get("speed")
            traits = record.get("traits") if isinstance(record.get("traits"), Mapping) else {}
            entries.append(
                InventoryEntry(
                    id=item_id,
                    name=str(record.get("name") or item_id),
                    quantity=quantity,
                    description=str(record.get("description") or ""),
                    speed=float(speed) if isinstance(speed, (int, float)) else None,
                    traits={str(name): float(value) for name, value in traits.items() if isinstance(value, (int, float))},
                )
            )
        return entries

    def to_dict(self) -> Dict[str, int]:
        return dict(self._counts)

    def load(self, counts: Mapping[str, Any] | None) -> None:
        self._counts.clear()
        if not isinstance(counts, Mapping):
            return
        for item_id, quantity in counts.items():
            amount = _positive_int(quantity, default=0)
            if amount:
                self._counts[str(item_id)] = amount

    def subscribe(self, listener: Callable[[InventoryChanged], None]) -> None:
        self._listeners.append(listener)

    def _notify(self, change: InventoryChanged) -> None:
        for listener in list(self._listeners):
            try:
                listener(change)
            except Exception:
                _logger.exception("Inventory listener failed and was isolated", extra={"item_id": change.item_id})
