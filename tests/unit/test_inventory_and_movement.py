import sys
from pathlib import Path
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from taleweaver.application.services.effect_interpreter import EffectInterpreter
from taleweaver.application.services.event_bus import EventBus
from taleweaver.application.services.inventory_effects import register_inventory_handlers
from taleweaver.application.services.movement import MovementManager
from taleweaver.application.services.scene_cache import SceneCache
from taleweaver.domain.models.inventory import PlayerInventory
from taleweaver.domain.models.navigation import NavigationPointer
from taleweaver.domain.models.traits import Trait, TraitBook
from taleweaver.domain.models.world_state import WorldState
from taleweaver.infrastructure.inmemory.inmemory_content_repos import InMemoryItemRepository, InMemoryLocationRepository
from taleweaver.infrastructure.inmemory.location_registry import LocationRegistry


ITEMS = InMemoryItemRepository(
    {
        "apple": {"name": "Apple"},
        "boots": {"name": "Travel Boots", "speed": 2, "traits": {"wanderlust": 1}},
        "horse": {"name": "Horse", "speed": 4},
    }
)


class InventoryEffectsTests(unittest.TestCase):
    def setUp(self) -> None:
        self.bus = EventBus()
        self.inventory = PlayerInventory(item_lookup=ITEMS.get)
        self.world = WorldState()
        self.world.apply_scene_inventory("market", [{"id": "apple", "qty": 2}])
        self.traits = TraitBook([Trait("wanderlust")])
        self.pointer = NavigationPointer("market", "start")
        register_inventory_handlers(self.bus, self.inventory, self.world, self.traits, lambda: self.pointer)
        self.effects = EffectInterpreter(events=self.bus)

    def test_take_moves_items_from_location_to_player(self) -> None:
        self.effects.interpret("take:apple:5")

        self.assertEqual(2, self.inventory.count("apple"))
        self.assertFalse(self.world.has_location_item("market", "apple"))

    def test_drop_returns_items_to_current_location(self) -> None:
        self.effects.interpret(["take:apple:2", "drop:apple"])

        self.assertEqual(1, self.inventory.count("apple"))
        self.assertEqual(1, self.world.location_item_count("market", "apple"))

    def test_take_without_location_is_ignored(self) -> None:
        self.pointer = None

        self.effects.interpret("take:apple")

        self.assertEqual(0, self.inventory.count("apple"))

    def test_gain_and_lose_apply_item_traits(self) -> None:
        self.effects.interpret("gain:boots:2")
        self.assertEqual(2, self.traits.get_trait_by_name("wanderlust").value)

        self.effects.interpret("lose:boots")
        self.assertEqual(1, self.inventory.count("boots"))
        self.assertEqual(1, self.traits.get_trait_by_name("wanderlust").value)

    def test_missing_inventory_or_world_registers_nothing(self) -> None:
        self.assertIsNone(register_inventory_handlers(EventBus(), None, self.world))
        self.assertIsNone(register_inventory_handlers(EventBus(), self.inventory, None))


class MovementManagerTests(unittest.TestCase):
    def setUp(self) -> None:
        locations = InMemoryLocationRepository(
            {"market": {"scenes": [{"id": "start"}]}, "shop": {"scenes": [{"id": "counter"}]}}
        )
        self.cache = SceneCache(locations, LocationRegistry(), start=NavigationPointer("market", "start"))
        self.inventory = PlayerInventory(item_lookup=ITEMS.get)
        self.movement = MovementManager(self.cache, self.inventory)

    def test_requires_cache(self) -> None:
        with self.assertRaises(ValueError):
            MovementManager(None)

    def test_speed_tracks_fastest_item_carried(self) -> None:
        self.assertEqual(1.0, self.movement.speed)

        self.inventory.add("boots")
        self.assertEqual(2, self.movement.speed)
        self.inventory.add("horse")
        self.assertEqual(4, self.movement.speed)
        self.inventory.remove("horse")
        self.assertEqual(2, self.movement.speed)

    def test_compute_time_scales_travel_only(self) -> None:
        self.inventory.add("boots")

        self.assertEqual(1.5, self.movement.compute_time(3, kind="travel"))
        self.assertEqual(3, self.movement.compute_time(3))
        self.assertEqual(0, self.movement.compute_time(-1, kind="travel"))
        self.assertEqual(0, self.movement.compute_time("soon"))

    def test_go_delegates_to_scene_cache(self) -> None:
        self.movement.go("go:shop")

        self.assertEqual("shop", self.movement.current_location_id)
        self.assertEqual("counter", self.movement.current_scene.id)
        self.assertEqual(2, len(self.movement.history))


if __name__ == "__main__":
    unittest.main()
