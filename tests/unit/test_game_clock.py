import sys
from pathlib import Path
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from taleweaver.domain.events import ClockChanged
from taleweaver.domain.models.clock import GameClock, hour_in_window, normalize_hour


class HourWindowTests(unittest.TestCase):
    def test_equal_bounds_match_only_that_hour(self) -> None:
        self.assertTrue(hour_in_window(12, 12, 12))
        self.assertFalse(hour_in_window(12.5, 12, 12))
        self.assertTrue(hour_in_window(36, 12, 12))

    def test_forward_range_is_half_open(self) -> None:
        self.assertTrue(hour_in_window(6, 6, 21))
        self.assertTrue(hour_in_window(20.99, 6, 21))
        self.assertFalse(hour_in_window(21, 6, 21))
        self.assertFalse(hour_in_window(5, 6, 21))

    def test_wrapping_range_covers_midnight(self) -> None:
        for hour in (21, 23.5, 0, 4.99):
            self.assertTrue(hour_in_window(hour, 21, 5), hour)
        for hour in (5, 12, 20.99):
            self.assertFalse(hour_in_window(hour, 21, 5), hour)

    def test_unparseable_bounds_never_block(self) -> None:
        self.assertTrue(hour_in_window(3, "dawn", 5))
        self.assertTrue(hour_in_window(3, 1, None))

    def test_normalize_hour_wraps_negative_values(self) -> None:
        self.assertEqual(23, normalize_hour(-1))
        self.assertIsNone(normalize_hour("noon"))


class GameClockTests(unittest.TestCase):
    def test_tick_advances_and_notifies(self) -> None:
        clock = GameClock(start_time=9, end_time=5)
        seen: list[ClockChanged] = []
        clock.subscribe(seen.append)

        clock.tick(3)

        self.assertEqual(12, clock.current_time)
        self.assertEqual([ClockChanged(time=12, game_over=False)], seen)
        self.assertEqual("day", clock.get_time_window())

    def test_crossing_day_end_clamps_and_flags_game_over(self) -> None:
        clock = GameClock(start_time=9, end_time=5)
        seen: list[ClockChanged] = []
        clock.subscribe(seen.append)

        clock.tick(15)
        self.assertEqual(0, clock.current_time)
        self.assertTrue(clock.is_night())
        clock.tick(6)

        self.assertEqual(5, clock.current_time)
        self.assertTrue(clock.game_over)
        self.assertTrue(seen[-1].game_over)

    def test_failing_listener_is_isolated(self) -> None:
        clock = GameClock()
        seen: list[float] = []

        def broken(_change: ClockChanged) -> None:
            raise RuntimeError("boom")

        clock.subscribe(broken)
        clock.subscribe(lambda change: seen.append(change.time))

        with self.assertLogs("taleweaver.domain.models.clock", level="ERROR"):
            clock.tick(1)

        self.assertEqual([10], seen)

    def test_reset_returns_to_start_and_drops_observers(self) -> None:
        clock = GameClock(start_time=9, end_time=5)
        seen: list[ClockChanged] = []
        clock.subscribe(seen.append)
        clock.tick(2)
        clock.reset()
        clock.tick(1)

        self.assertEqual(10, clock.current_time)
        self.assertEqual([ClockChanged(time=11, game_over=False), ClockChanged(time=9, game_over=False)], seen)

    def test_unsubscribed_listener_is_not_notified(self) -> None:
        clock = GameClock()
        seen: list[ClockChanged] = []
        clock.subscribe(seen.append)
        clock.unsubscribe(seen.append)

        clock.tick(1)

        self.assertEqual([], seen)

    def test_format_time_and_restore(self) -> None:
        clock = GameClock()
        clock.restore(21.5)

        self.assertEqual("21:30", GameClock.format_time(clock.current_time))
        self.assertEqual("night", clock.get_time_window())
        self.assertFalse(clock.game_over)


if __name__ == "__main__":
    unittest.main()
