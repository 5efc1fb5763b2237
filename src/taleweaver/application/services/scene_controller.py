from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Mapping, Optional, Protocol

from taleweaver.application.dtos import InventoryView, SceneChoice, SceneView, TimeView
from taleweaver.application.services.effect_interpreter import EffectInterpreter
from taleweaver.application.services.scene_assembler import (
    BACK_CHOICE_ID,
    EXIT_CHOICE_ID,
    GO_CHOICE_ID,
    INVENTORY_CHOICE_ID,
    TALK_PREFIX,
    SceneAssembler,
    SceneContext,
    option_effect,
)
from taleweaver.domain.events import GoTarget
from taleweaver.domain.models.navigation import Scene


_logger = logging.getLogger(__name__)

TimeScaler = Callable[..., float]


class SceneViewPort(Protocol):
    async def show_scene(self, dto: SceneView) -> Optional[str]: ...

    async def show_path(self, choices: List[SceneChoice], title: str = "") -> Optional[str]: ...

    async def show_inventory(self, snapshot: InventoryView) -> None: ...

    async def show_message(self, text: str) -> None: ...

    async def show_choice_result(self, option: Mapping[str, Any]) -> None: ...

    async def show_time(self, view: TimeView) -> None: ...


class SceneController:
    """Runs one turn: present the scene, follow sub-menus, execute the pick.

    Every view call is awaited before the next one is issued.
    """

    def __init__(
        self,
        *,
        view: SceneViewPort,
        assembler: SceneAssembler,
        effects: EffectInterpreter,
        time_scaler: TimeScaler | None = None,
        inventory_snapshot: Callable[[], InventoryView] | None = None,
    ) -> None:
        self._view = view
        self._assembler = assembler
        self._effects = effects
        self._time_scaler = time_scaler
        self._inventory_snapshot = inventory_snapshot

    def _scaled_travel_time(self, hours: object) -> object:
        if self._time_scaler is None:
            return hours
        try:
            return self._time_scaler(hours, kind="travel")
        except Exception:
            _logger.warning("Time scaler failed; using raw travel time", extra={"hours": hours}, exc_info=True)
            return hours

    async def _travel(self, scene: Scene, ctx: SceneContext, base_option: Mapping[str, Any] | None) -> tuple[bool, Any]:
        choices = self._assembler.build_path_choices(scene, ctx, base_option)
        picked = await self._view.show_path(choices, title="Where to?")
        if not picked or picked == BACK_CHOICE_ID:
            return False, None
        choice = next((entry for entry in choices if entry.id == picked), None)
        if choice is None:
            _logger.debug("Unknown path choice ignored", extra={"choice_id": picked})
            return False, None

        location_id = choice.meta.get("location_id") or str(picked).partition(":")[2]
        definition = choice.meta.get("effect") or f"{GO_CHOICE_ID}:{location_id}"
        result = self._effects.interpret(definition, time_cost=self._scaled_travel_time(choice.meta.get("time")))
        return True, result if result is not None else GoTarget(location_id=location_id)

    async def run(self, scene: Scene, ctx: SceneContext | None = None) -> Any:
        ctx = ctx if ctx is not None else SceneContext()
        while True:
            choices = self._assembler.build_choices(scene, ctx)
            by_id: Dict[str, SceneChoice] = {choice.id: choice for choice in choices}
            picked = await self._view.show_scene(self._assembler.to_view_dto(scene, ctx, choices))
            if not picked:
                return None
            picked = str(picked)

            if picked.startswith(TALK_PREFIX):
                ctx.current_npc_id = picked[len(TALK_PREFIX):] or None
                continue

            if picked == INVENTORY_CHOICE_ID:
                snapshot = self._inventory_snapshot() if self._inventory_snapshot else InventoryView()
                await self._view.show_inventory(snapshot)
                continue

            if picked == EXIT_CHOICE_ID and EXIT_CHOICE_ID in by_id and not by_id[EXIT_CHOICE_ID].meta:
                return EXIT_CHOICE_ID

            option = by_id[picked].meta if picked in by_id else {}
            if picked == GO_CHOICE_ID:
                moved, result = await self._travel(scene, ctx, option)
                if not moved:
                    continue
                return result

            if option.get("result"):
                await self._view.show_choice_result(option)
            effect = option_effect(option)
            result = self._effects.interpret(effect if effect is not None else picked, time_cost=option.get("time"))
            return result if result is not None else picked
