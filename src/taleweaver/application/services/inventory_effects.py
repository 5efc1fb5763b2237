from __future__ import annotations

import logging
from typing import Callable, Mapping

from taleweaver.application.services.event_bus import EventBus
from taleweaver.domain.events import DomainEventFired, InventoryChanged
from taleweaver.domain.models.inventory import PlayerInventory
from taleweaver.domain.models.navigation import NavigationPointer
from taleweaver.domain.models.traits import TraitBook
from taleweaver.domain.models.world_state import WorldState


_logger = logging.getLogger(__name__)

ITEM_VERBS = ("take", "drop", "gain", "lose")


def _quantity(args) -> int:
    if len(args) < 2:
        return 1
    try:
        return max(0, int(float(args[1])))
    except (TypeError, ValueError):
        return 1


class InventoryEffectsService:
    """Applies item tokens (``<verb>:<itemId>[:qty]``) to the player and the world ledger."""

    def __init__(
        self,
        event_bus: EventBus,
        inventory: PlayerInventory,
        world_state: WorldState,
        traits: TraitBook | None = None,
        pointer_provider: Callable[[], NavigationPointer | None] | None = None,
    ) -> None:
        self.event_bus = event_bus
        self.inventory = inventory
        self.world_state = world_state
        self.traits = traits
        self.pointer_provider = pointer_provider

    def register_handlers(self) -> None:
        self.event_bus.subscribe("take:*", self.on_take, priority=40)
        self.event_bus.subscribe("drop:*", self.on_drop, priority=40)
        self.event_bus.subscribe("gain:*", self.on_gain, priority=40)
        self.event_bus.subscribe("lose:*", self.on_lose, priority=40)
        if self.traits is not None:
            self.inventory.subscribe(self.on_inventory_changed)

    def _location_id(self) -> str | None:
        pointer = self.pointer_provider() if self.pointer_provider else None
        return pointer.location_id if pointer else None

    def on_take(self, event: DomainEventFired) -> None:
        if not event.args or not event.args[0]:
            return
        location_id = self._location_id()
        if not location_id:
            _logger.debug("take ignored without a current location", extra={"token": event.token})
            return
        taken = self.world_state.remove_location_item(location_id, event.args[0], _quantity(event.args))
        if taken > 0:
            self.inventory.add(event.args[0], int(taken))

    def on_drop(self, event: DomainEventFired) -> None:
        if not event.args or not event.args[0]:
            return
        location_id = self._location_id()
        if not location_id:
            return
        dropped = self.inventory.remove(event.args[0], _quantity(event.args))
        if dropped > 0:
            self.world_state.add_location_item(location_id, event.args[0], dropped)

    def on_gain(self, event: DomainEventFired) -> None:
        if event.args and event.args[0]:
            self.inventory.add(event.args[0], _quantity(event.args))

    def on_lose(self, event: DomainEventFired) -> None:
        if event.args and event.args[0]:
            self.inventory.remove(event.args[0], _quantity(event.args))

    def on_inventory_changed(self, change: InventoryChanged) -> None:
        traits = self.inventory.record_for(change.item_id).get("traits")
        if not isinstance(traits, Mapping) or self.traits is None:
            return
        for name, value in traits.items():
            if not isinstance(value, (int, float)):
                continue
            amount = float(value) * abs(change.delta)
            if change.delta > 0:
                self.traits.increment_trait(str(name), amount)
            elif change.delta < 0:
                self.traits.decrement_trait(str(name), amount)


def register_inventory_handlers(
    event_bus: EventBus,
    inventory: PlayerInventory | None,
    world_state: WorldState | None,
    traits: TraitBook | None = None,
    pointer_provider: Callable[[], NavigationPointer | None] | None = None,
) -> InventoryEffectsService | None:
    if inventory is None or world_state is None:
        return None

    service = InventoryEffectsService(
        event_bus=event_bus,
        inventory=inventory,
        world_state=world_state,
        traits=traits,
        pointer_provider=pointer_provider,
    )
    service.register_handlers()
    return service
