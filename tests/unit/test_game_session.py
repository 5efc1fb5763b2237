import sys
from pathlib import Path
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from taleweaver.application.mappers.save_mapper import from_save_payload, to_save_payload
from taleweaver.application.services.game_session import GameSession
from taleweaver.domain.models.clock import GameClock
from taleweaver.domain.models.navigation import NavigationPointer
from taleweaver.domain.models.traits import Trait, TraitBook
from taleweaver.infrastructure.inmemory.inmemory_content_repos import (
    InMemoryItemRepository,
    InMemoryLocationRepository,
    InMemoryNpcRepository,
    InMemoryOptionRepository,
)


class QueueView:
    def __init__(self, scene_picks=(), path_picks=()) -> None:
        self.scene_picks = list(scene_picks)
        self.path_picks = list(path_picks)
        self.times = []
        self.scenes = []

    async def show_scene(self, dto):
        self.scenes.append(dto)
        return self.scene_picks.pop(0) if self.scene_picks else None

    async def show_path(self, choices, title=""):
        return self.path_picks.pop(0) if self.path_picks else None

    async def show_inventory(self, snapshot):
        return None

    async def show_message(self, text):
        return None

    async def show_choice_result(self, option):
        return None

    async def show_time(self, view):
        self.times.append(view)


def _session(view, clock=None) -> GameSession:
    return GameSession(
        view=view,
        locations=InMemoryLocationRepository(
            {
                "market": {
                    "name": "Market Square",
                    "startSceneId": "start",
                    "scenes": [
                        {
                            "id": "start",
                            "optionIds": ["take-apple", "go-buy", "go"],
                            "path": ["shop"],
                            "inventory": [{"id": "apple", "qty": 2}],
                        },
                        {"id": "buy", "optionIds": ["pay"]},
                    ],
                },
                "shop": {"name": "Curio Shop", "scenes": [{"id": "counter", "optionIds": ["buy-boots"]}]},
            }
        ),
        options=InMemoryOptionRepository(
            {
                "market": {
                    "take-apple": {"name": "Take an apple", "effect": "take:apple"},
                    "go-buy": {"name": "Approach the counter", "effect": "go:buy"},
                    "go": {"name": "Travel", "time": 1},
                    "go:shop": {"name": "Walk to the shop", "time": 2},
                    "pay": {"name": "Pay", "effects": ["lose:coin", "trait:greed:-1"]},
                },
                "shop": {"buy-boots": {"name": "Buy boots", "effect": ["gain:boots"]}},
            }
        ),
        npcs=InMemoryNpcRepository({}),
        items=InMemoryItemRepository({"apple": {"name": "Apple"}, "boots": {"name": "Boots", "speed": 2}}),
        traits=TraitBook([Trait("greed", value=2)]),
        clock=clock or GameClock(start_time=9, end_time=5),
        start=NavigationPointer("market", "start"),
    )


class GameSessionTests(unittest.IsolatedAsyncioTestCase):
    async def test_take_moves_scene_inventory_into_the_player_pack(self) -> None:
        view = QueueView(["take-apple"])
        session = _session(view)

        await session.run_step()

        self.assertEqual(1, session.inventory.count("apple"))
        self.assertEqual(1, session.world_state.location_item_count("market", "apple"))
        self.assertEqual("09:00", view.times[0].label)

    async def test_scene_jump_records_one_history_entry(self) -> None:
        session = _session(QueueView(["go-buy"]))

        await session.run_step()

        self.assertEqual(NavigationPointer("market", "buy"), session.pointer)
        self.assertEqual(
            [NavigationPointer("market", "start"), NavigationPointer("market", "buy")],
            session.history,
        )

    async def test_travel_advances_clock_and_moves_pointer(self) -> None:
        session = _session(QueueView(["go"], ["go:shop"]))

        await session.run_step()

        self.assertEqual(NavigationPointer("shop", "counter"), session.pointer)
        self.assertEqual(11, session.clock.current_time)

    async def test_faster_items_shorten_travel(self) -> None:
        session = _session(QueueView(["go"], ["go:shop"]))
        session.inventory.add("boots")

        await session.run_step()

        self.assertEqual(10, session.clock.current_time)
        self.assertEqual(2, session.inventory_view().speed)

    async def test_crossing_day_end_flags_session(self) -> None:
        session = _session(QueueView(["go"], ["go:shop"]), clock=GameClock(start_time=4, end_time=5))

        await session.run_step()

        self.assertTrue(session.day_ended)
        self.assertTrue(session.time_view().game_over)

    async def test_no_pick_keeps_pointer(self) -> None:
        session = _session(QueueView())

        self.assertIsNone(await session.run_step())
        self.assertEqual(NavigationPointer("market", "start"), session.pointer)


class GameSessionSnapshotTests(unittest.IsolatedAsyncioTestCase):
    async def test_snapshot_round_trips_through_a_fresh_session(self) -> None:
        session = _session(QueueView(["take-apple", "go"], ["go:shop"]))
        await session.run_step()
        await session.run_step()

        payload = to_save_payload(session.snapshot())
        restored = _session(QueueView())
        restored.restore(from_save_payload(payload))

        self.assertEqual(NavigationPointer("shop", "counter"), restored.pointer)
        self.assertEqual(session.history, restored.history)
        self.assertEqual(11, restored.clock.current_time)
        self.assertEqual({"apple": 1}, restored.inventory.to_dict())
        self.assertTrue(restored.event_log.has("take:apple"))
        self.assertEqual(1, restored.world_state.location_item_count("market", "apple"))
        self.assertEqual(2, restored.traits.get_trait_by_name("greed").value)

    def test_snapshot_without_pointer_is_none(self) -> None:
        session = GameSession(
            view=QueueView(),
            locations=InMemoryLocationRepository(),
            options=InMemoryOptionRepository(),
            npcs=InMemoryNpcRepository(),
        )

        self.assertIsNone(session.snapshot())


if __name__ == "__main__":
    unittest.main()
