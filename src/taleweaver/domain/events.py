from dataclasses import dataclass, field
from typing import Tuple


GO_TOPIC = "go"
TIME_TOPIC = "time"
EFFECT_TOPIC_PREFIX = "effect:"


@dataclass(frozen=True)
class GoTarget:
    location_id: str
    scene_id: str | None = None


@dataclass(frozen=True)
class TimeAdvanced:
    hours: float


@dataclass(frozen=True)
class DomainEventFired:
    token: str
    head: str = ""
    args: Tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class ClockChanged:
    time: float
    game_over: bool = False


@dataclass(frozen=True)
class InventoryChanged:
    item_id: str
    delta: int
    quantity: int
