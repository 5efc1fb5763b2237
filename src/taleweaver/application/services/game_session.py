from __future__ import annotations

import logging
from typing import Any, List, Mapping

from taleweaver.application.dtos import InventoryItemView, InventoryView, SaveSnapshot, TimeView
from taleweaver.application.services.effect_interpreter import EffectInterpreter
from taleweaver.application.services.event_bus import EventBus
from taleweaver.application.services.inventory_effects import register_inventory_handlers
from taleweaver.application.services.movement import MovementManager
from taleweaver.application.services.requirement_interpreter import RequirementInterpreter
from taleweaver.application.services.scene_assembler import SceneAssembler, SceneContext
from taleweaver.application.services.scene_cache import SceneCache
from taleweaver.application.services.scene_controller import SceneController, SceneViewPort
from taleweaver.domain.events import GO_TOPIC, TIME_TOPIC, ClockChanged, TimeAdvanced
from taleweaver.domain.models.clock import GameClock
from taleweaver.domain.models.event_log import EventLog
from taleweaver.domain.models.inventory import PlayerInventory
from taleweaver.domain.models.navigation import NavigationPointer, Scene
from taleweaver.domain.models.traits import TraitBook
from taleweaver.domain.models.world_state import WorldState
from taleweaver.domain.repositories import ItemRepository, LocationRepository, NpcRepository, OptionRepository
from taleweaver.infrastructure.inmemory.location_registry import LocationRegistry


class GameSession:
    """Wires the narrative collaborators together and drives one turn at a time."""

    def __init__(
        self,
        *,
        view: SceneViewPort,
        locations: LocationRepository,
        options: OptionRepository,
        npcs: NpcRepository,
        items: ItemRepository | None = None,
        traits: TraitBook | None = None,
        clock: GameClock | None = None,
        start: NavigationPointer | Mapping[str, Any] | None = None,
        event_bus: EventBus | None = None,
        registry: LocationRegistry | None = None,
    ) -> None:
        self._logger = logging.getLogger(__name__)
        self.view = view
        self.event_bus = event_bus or EventBus()
        self.clock = clock or GameClock()
        self.traits = traits or TraitBook()
        self.event_log = EventLog()
        self.world_state = WorldState()
        self.inventory = PlayerInventory(item_lookup=items.get if items is not None else None)
        self.registry = registry or LocationRegistry()
        self._day_ended = False

        self.cache = SceneCache(locations, self.registry, clock=self.clock, start=start)
        self.movement = MovementManager(self.cache, self.inventory)
        self.requirements = RequirementInterpreter(
            clock=self.clock,
            traits=self.traits,
            inventory=self.inventory,
            event_log=self.event_log,
            world_state=self.world_state,
        )
        self.effects = EffectInterpreter(events=self.event_bus, traits=self.traits, event_log=self.event_log)
        self.assembler = SceneAssembler(
            options=options,
            npcs=npcs,
            requirements=self.requirements,
            registry=self.registry,
        )
        self.controller = SceneController(
            view=view,
            assembler=self.assembler,
            effects=self.effects,
            time_scaler=self.movement.compute_time,
            inventory_snapshot=self.inventory_view,
        )
        self._register_handlers()

    def _register_handlers(self) -> None:
        self.event_bus.subscribe(GO_TOPIC, self.movement.go, priority=10)
        self.event_bus.subscribe(TIME_TOPIC, self._on_time_advanced, priority=10)
        register_inventory_handlers(
            self.event_bus,
            self.inventory,
            self.world_state,
            self.traits,
            pointer_provider=lambda: self.cache.pointer,
        )
        self.clock.subscribe(self._on_clock_changed)

    def _on_time_advanced(self, payload: TimeAdvanced) -> None:
        hours = getattr(payload, "hours", 0)
        if hours and hours > 0:
            self.clock.tick(hours)

    def _on_clock_changed(self, change: ClockChanged) -> None:
        if change.game_over and not self._day_ended:
            self._day_ended = True
            self._logger.info("Day ended", extra={"clock_time": change.time})

    @property
    def pointer(self) -> NavigationPointer | None:
        return self.cache.pointer

    @property
    def current_scene(self) -> Scene | None:
        return self.cache.current_scene()

    @property
    def current_location_id(self) -> str | None:
        return self.movement.current_location_id

    @property
    def history(self) -> List[NavigationPointer]:
        return self.cache.history

    @property
    def day_ended(self) -> bool:
        return self._day_ended

    def inventory_view(self) -> InventoryView:
        return InventoryView(
            items=[
                InventoryItemView(id=entry.id, name=entry.name, quantity=entry.quantity, description=entry.description)
                for entry in self.inventory.items()
            ],
            speed=self.movement.speed,
        )

    def time_view(self) -> TimeView:
        return TimeView(
            time=self.clock.current_time,
            label=self.clock.format_time(self.clock.current_time),
            window=self.clock.get_time_window(),
            game_over=self.clock.game_over,
        )

    async def run_step(self, ctx: SceneContext | None = None) -> Any:
        scene = self.cache.current_scene()
        if scene is None:
            return None
        self.world_state.apply_scene_inventory(scene.location_id, scene.items)
        await self.view.show_time(self.time_view())

        result = await self.controller.run(scene, ctx if ctx is not None else SceneContext())
        self.cache.apply_result(result)
        return result

    def snapshot(self) -> SaveSnapshot | None:
        pointer = self.cache.pointer
        if pointer is None:
            return None
        return SaveSnapshot(
            location_id=pointer.location_id,
            scene_id=pointer.scene_id,
            history=[(entry.location_id, entry.scene_id) for entry in self.cache.history],
            time=self.clock.current_time,
            traits=self.traits.snapshot(),
            domain_events=self.event_log.to_list(),
            inventory=self.inventory.to_dict(),
            world=self.world_state.to_dict(),
        )

    def restore(self, snapshot: SaveSnapshot) -> None:
        if snapshot.time is not None:
            self.clock.restore(snapshot.time)
        self.traits.load(snapshot.traits)
        self.event_log.load(snapshot.domain_events)
        self.inventory.load(snapshot.inventory)
        self.movement.recompute_speed()
        self.world_state.load(snapshot.world)
        self._day_ended = False
        self.cache.restore(
            NavigationPointer(location_id=snapshot.location_id, scene_id=snapshot.scene_id),
            [NavigationPointer(location_id=location_id, scene_id=scene_id) for location_id, scene_id in snapshot.history],
        )
