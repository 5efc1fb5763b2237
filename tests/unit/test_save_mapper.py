import sys
from pathlib import Path
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from taleweaver.application.dtos import SaveSnapshot
from taleweaver.application.mappers.save_mapper import SAVE_FORMAT_VERSION, from_save_payload, to_save_payload


class SaveMapperTests(unittest.TestCase):
    def test_payload_uses_camel_case_keys(self) -> None:
        snapshot = SaveSnapshot(
            location_id="market",
            scene_id="buy",
            history=[("market", "start"), ("market", "buy")],
            time=10.5,
            traits={"greed": 1},
            domain_events=["bought-map"],
            inventory={"map": 1},
        )

        payload = to_save_payload(snapshot)

        self.assertEqual(SAVE_FORMAT_VERSION, payload["version"])
        self.assertEqual({"locationId": "market", "sceneId": "buy"}, payload["pointer"])
        self.assertEqual({"locationId": "market", "sceneId": "start"}, payload["history"][0])
        self.assertEqual(["bought-map"], payload["domainEvents"])
        self.assertEqual(10.5, payload["time"])

    def test_time_is_omitted_when_unknown(self) -> None:
        self.assertNotIn("time", to_save_payload(SaveSnapshot(location_id="market")))

    def test_payload_without_pointer_is_rejected(self) -> None:
        self.assertIsNone(from_save_payload(None))
        self.assertIsNone(from_save_payload({"history": []}))
        self.assertIsNone(from_save_payload({"pointer": {"sceneId": "start"}}))

    def test_unreadable_fields_are_dropped(self) -> None:
        snapshot = from_save_payload(
            {
                "pointer": {"locationId": "market", "sceneId": ""},
                "history": [{"locationId": "market", "sceneId": "start"}, {"sceneId": "orphan"}, "junk"],
                "time": "noon",
                "traits": {"greed": 2, "kindness": "very"},
                "domainEvents": ["met-trader", " "],
                "inventory": {"coin": 3, "apple": None},
                "world": ["not", "a", "mapping"],
            }
        )

        self.assertEqual("market", snapshot.location_id)
        self.assertIsNone(snapshot.scene_id)
        self.assertEqual([("market", "start")], snapshot.history)
        self.assertIsNone(snapshot.time)
        self.assertEqual({"greed": 2.0}, snapshot.traits)
        self.assertEqual(["met-trader"], snapshot.domain_events)
        self.assertEqual({"coin": 3}, snapshot.inventory)
        self.assertEqual({}, snapshot.world)
        self.assertEqual(SAVE_FORMAT_VERSION, snapshot.version)


if __name__ == "__main__":
    unittest.main()
