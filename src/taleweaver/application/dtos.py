from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple


@dataclass
class SceneChoice:
    id: str
    name: str
    meta: Dict[str, Any] = field(default_factory=dict)


@dataclass
class LocationSummaryView:
    id: str
    name: str
    background: Any = None


@dataclass
class NpcPanelView:
    id: str
    name: str
    description: str = ""
    dialogue: str = ""


@dataclass
class SceneView:
    location: LocationSummaryView
    scene_id: str
    description: Tuple[str, ...] = ()
    npc: NpcPanelView | None = None
    options: List[Tuple[str, str]] = field(default_factory=list)


@dataclass
class InventoryItemView:
    id: str
    name: str
    quantity: int
    description: str = ""


@dataclass
class InventoryView:
    items: List[InventoryItemView] = field(default_factory=list)
    speed: float = 1

    @property
    def empty(self) -> bool:
        return not self.items


@dataclass
class TimeView:
    time: float
    label: str
    window: str
    game_over: bool = False


@dataclass
class SaveSnapshot:
    location_id: str
    scene_id: str | None = None
    history: List[Tuple[str, str | None]] = field(default_factory=list)
    time: float | None = None
    traits: Dict[str, float] = field(default_factory=dict)
    domain_events: List[str] = field(default_factory=list)
    inventory: Dict[str, int] = field(default_factory=dict)
    world: Dict[str, Any] = field(default_factory=dict)
    version: int = 1
