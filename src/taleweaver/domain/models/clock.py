from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Callable, List

from taleweaver.domain.events import ClockChanged


HOURS_PER_DAY = 24
_EXACT_HOUR_EPSILON = 1e-9

_logger = logging.getLogger(__name__)


def normalize_hour(value: object, cycle: float = HOURS_PER_DAY) -> float | None:
    try:
        hour = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
    if not math.isfinite(hour):
        return None
    hour = ((hour % cycle) + cycle) % cycle
    if hour >= cycle:
        hour -= cycle
    return hour


def hour_in_window(now: object, start: object, end: object) -> bool:
    """Return whether ``now`` falls within the ``[start, end)`` hour window.

    The window wraps midnight when ``start > end``; ``start == end`` matches
    only that exact hour. Unparseable bounds never block.
    """
    current = normalize_hour(now)
    begin = normalize_hour(start)
    finish = normalize_hour(end)
    if current is None or begin is None or finish is None:
        return True
    if abs(begin - finish) < _EXACT_HOUR_EPSILON:
        return abs(current - begin) < _EXACT_HOUR_EPSILON
    if begin < finish:
        return begin <= current < finish
    return current >= begin or current < finish


@dataclass(frozen=True)
class DaySettings:
    start: float = 0
    end: float = HOURS_PER_DAY
    night_start: float = 21
    night_end: float = 5

    def is_day_hour(self, hour: float) -> bool:
        return self.night_end <= hour < self.night_start

    def is_night_hour(self, hour: float) -> bool:
        return not self.is_day_hour(hour)


class GameClock:
    def __init__(self, start_time: float = 9, end_time: float = 5, settings: DaySettings | None = None) -> None:
        self._settings = settings or DaySettings()
        self._start_time = start_time
        self._end_time = end_time
        self._current_time = start_time
        self._game_over = False
        self._listeners: List[Callable[[ClockChanged], None]] = []

    @property
    def start_time(self) -> float:
        return self._start_time

    @property
    def end_time(self) -> float:
        return self._end_time

    @property
    def game_over(self) -> bool:
        return self._game_over

    @property
    def current_time(self) -> float:
        return self._current_time

    @current_time.setter
    def current_time(self, value: float) -> None:
        hour = normalize_hour(value, self._settings.end)
        if hour is None:
            return
        start, end = self._start_time, self._end_time
        crossed_end = (start < end and hour >= end) or (start > end and end <= hour < start)
        if crossed_end:
            self._current_time = end
            self._game_over = True
            self._notify(ClockChanged(time=end, game_over=True))
            return
        if hour != self._current_time:
            self._current_time = hour
            self._notify(ClockChanged(time=hour, game_over=False))

    def tick(self, hours: float = 1) -> None:
        self.current_time = self._current_time + hours

    def restore(self, value: float) -> None:
        hour = normalize_hour(value, self._settings.end)
        if hour is not None:
            self._current_time = hour
            self._game_over = False

    def reset(self) -> None:
        self._game_over = False
        self.current_time = self._start_time
        self.clear_observers()

    def is_day(self) -> bool:
        return self._settings.is_day_hour(self._current_time)

    def is_night(self) -> bool:
        return self._settings.is_night_hour(self._current_time)

    def get_time_window(self) -> str:
        return "day" if self.is_day() else "night"

    @staticmethod
    def format_time(value: object) -> str:
        try:
            total_minutes = round(float(value) * 60)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            total_minutes = 0
        hours = (total_minutes // 60) % HOURS_PER_DAY
        minutes = total_minutes % 60
        return f"{hours:02d}:{minutes:02d}"

    def subscribe(self, listener: Callable[[ClockChanged], None]) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: Callable[[ClockChanged], None]) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def clear_observers(self) -> None:
        self._listeners.clear()

    def _notify(self, change: ClockChanged) -> None:
        for listener in list(self._listeners):
            try:
                listener(change)
            except Exception:
                _logger.exception("Clock listener failed and was isolated", extra={"time": change.time})
