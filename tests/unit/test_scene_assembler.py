import sys
from pathlib import Path
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from taleweaver.application.services.requirement_interpreter import RequirementInterpreter
from taleweaver.application.services.scene_assembler import SceneAssembler, SceneContext
from taleweaver.domain.models.clock import GameClock
from taleweaver.domain.models.navigation import Scene
from taleweaver.domain.models.traits import Trait, TraitBook
from taleweaver.infrastructure.inmemory.inmemory_content_repos import InMemoryNpcRepository, InMemoryOptionRepository
from taleweaver.infrastructure.inmemory.location_registry import LocationRegistry


def _scene(**overrides) -> Scene:
    record = {
        "optionIds": ["take-apple", "night-only", "take-apple"],
        "npcIds": ["trader"],
        "path": ["shop", "gate", "hidden"],
    }
    record.update(overrides)
    return Scene.from_record("start", "market", record)


class SceneAssemblerTests(unittest.TestCase):
    def setUp(self) -> None:
        self.options = InMemoryOptionRepository(
            {
                "market": {
                    "take-apple": {"name": "Take an apple", "effect": "take:apple"},
                    "night-only": {"name": "Sneak", "requirements": ["time:night"]},
                    "haggle": {"name": "Haggle", "requirements": ["trait:greed:1"]},
                    "ask-rumour": {"name": "Ask about rumours"},
                    "go:shop": {"name": "Walk to the shop", "time": 2, "effect": "go:shop:counter"},
                    "go:gate": {"requirements": ["event:gate-open"]},
                }
            }
        )
        self.npcs = InMemoryNpcRepository(
            {
                "market": [
                    {
                        "id": "trader",
                        "name": "Mira",
                        "description": "A fruit seller.",
                        "dialogue": ["Fresh apples!", "Anything else?"],
                        "options": ["haggle", "ask-rumour"],
                    },
                    {"id": "guard", "name": "Guard", "requirements": ["time:night"]},
                ]
            }
        )
        self.traits = TraitBook([Trait("greed")])
        self.registry = LocationRegistry()
        self.registry.ensure("market", title="Market Square")
        self.registry.ensure("shop", title="Curio Shop")
        self.registry.ensure("gate", title="Old Gate")
        self.requirements = RequirementInterpreter(clock=GameClock(start_time=9), traits=self.traits)
        self.assembler = SceneAssembler(
            options=self.options,
            npcs=self.npcs,
            requirements=self.requirements,
            registry=self.registry,
        )

    def test_choices_start_with_talk_entries_and_end_with_inventory_and_exit(self) -> None:
        choices = self.assembler.build_choices(_scene())

        self.assertEqual(["talk:trader", "take-apple", "inventory", "exit"], [choice.id for choice in choices])
        self.assertEqual("Talk: Mira", choices[0].name)
        self.assertEqual("take:apple", choices[1].meta["effect"])
        self.assertEqual({}, choices[-1].meta)

    def test_active_npc_is_marked_and_contributes_its_options(self) -> None:
        self.traits.update_trait_value("greed", 1)

        choices = self.assembler.build_choices(_scene(), SceneContext(current_npc_id="trader"))

        self.assertEqual(
            ["talk:trader", "haggle", "ask-rumour", "take-apple", "inventory", "exit"],
            [choice.id for choice in choices],
        )
        self.assertEqual("Talk: Mira ✓", choices[0].name)

    def test_npc_options_are_filtered_by_requirements(self) -> None:
        choices = self.assembler.build_choices(_scene(), SceneContext(current_npc_id="trader"))

        self.assertNotIn("haggle", [choice.id for choice in choices])
        self.assertIn("ask-rumour", [choice.id for choice in choices])

    def test_npcs_fall_back_to_location_listing_when_scene_names_none(self) -> None:
        choices = self.assembler.build_choices(_scene(npcIds=[]))

        self.assertEqual(["talk:trader"], [choice.id for choice in choices if choice.id.startswith("talk:")])

    def test_active_npc_options_appear_when_scene_names_no_npcs(self) -> None:
        self.traits.update_trait_value("greed", 1)

        choices = self.assembler.build_choices(_scene(npcIds=[]), SceneContext(current_npc_id="trader"))

        self.assertEqual(
            ["talk:trader", "haggle", "ask-rumour", "take-apple", "inventory", "exit"],
            [choice.id for choice in choices],
        )

    def test_path_choices_use_registered_locations_and_option_overrides(self) -> None:
        choices = self.assembler.build_path_choices(_scene(), base_option={"time": 1})

        self.assertEqual(["go:shop"], [choice.id for choice in choices])
        self.assertEqual("Walk to the shop", choices[0].name)
        self.assertEqual({"location_id": "shop", "effect": "go:shop:counter", "time": 2}, choices[0].meta)

    def test_path_choice_inherits_base_time_and_registry_name(self) -> None:
        self.options = InMemoryOptionRepository({"market": {}})
        assembler = SceneAssembler(
            options=self.options,
            npcs=self.npcs,
            requirements=self.requirements,
            registry=self.registry,
        )

        choices = assembler.build_path_choices(_scene(), base_option={"time": 1})

        self.assertEqual(["go:shop", "go:gate"], [choice.id for choice in choices])
        self.assertEqual("Old Gate", choices[1].name)
        self.assertEqual(1, choices[1].meta["time"])
        self.assertIsNone(choices[1].meta["effect"])

    def test_view_dto_carries_location_description_and_npc_panel(self) -> None:
        scene = _scene(description=["Stalls.", "Crowds."])
        ctx = SceneContext(current_npc_id="trader")
        choices = self.assembler.build_choices(scene, ctx)

        view = self.assembler.to_view_dto(scene, ctx, choices)

        self.assertEqual("Market Square", view.location.name)
        self.assertEqual(("Stalls.", "Crowds."), view.description)
        self.assertEqual("Mira", view.npc.name)
        self.assertEqual("Fresh apples!", view.npc.dialogue)
        self.assertEqual(("exit", "Exit"), view.options[-1])

    def test_view_dto_without_registered_location_uses_id(self) -> None:
        scene = Scene.from_record("x", "nowhere", {})

        view = self.assembler.to_view_dto(scene, None, [])

        self.assertEqual("nowhere", view.location.name)
        self.assertIsNone(view.npc)


if __name__ == "__main__":
    unittest.main()
