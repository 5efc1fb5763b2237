from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

from taleweaver.application.dtos import LocationSummaryView, NpcPanelView, SceneChoice, SceneView
from taleweaver.application.services.requirement_interpreter import RequirementEnv, RequirementInterpreter
from taleweaver.domain.models.navigation import Scene
from taleweaver.domain.repositories import NpcRepository, OptionRepository


_logger = logging.getLogger(__name__)

INVENTORY_CHOICE_ID = "inventory"
EXIT_CHOICE_ID = "exit"
GO_CHOICE_ID = "go"
BACK_CHOICE_ID = "back"
TALK_PREFIX = "talk:"
ACTIVE_NPC_MARK = " ✓"


@dataclass
class SceneContext:
    current_npc_id: str | None = None


def option_label(record: Mapping[str, Any], fallback: str) -> str:
    return str(record.get("name") or record.get("title") or record.get("label") or fallback)


def option_effect(record: Mapping[str, Any] | None) -> Any:
    if not isinstance(record, Mapping):
        return None
    if record.get("effects") is not None:
        return record.get("effects")
    return record.get("effect")


def _opening_line(npc: Mapping[str, Any]) -> str:
    dialogue = npc.get("dialogue")
    if isinstance(dialogue, str):
        return dialogue
    if isinstance(dialogue, list):
        return str(dialogue[0]) if dialogue else ""
    if isinstance(dialogue, Mapping):
        return str(dialogue.get("opening") or dialogue.get("greeting") or "")
    return ""


class SceneAssembler:
    """Turns a scene plus the transient turn context into selectable choices."""

    def __init__(
        self,
        *,
        options: OptionRepository,
        npcs: NpcRepository,
        requirements: RequirementInterpreter,
        registry,
    ) -> None:
        self._options = options
        self._npcs = npcs
        self._requirements = requirements
        self._registry = registry

    @staticmethod
    def env_for(scene: Scene, ctx: SceneContext | None) -> RequirementEnv:
        return RequirementEnv(
            location_id=scene.location_id,
            scene_id=scene.id,
            current_npc_id=ctx.current_npc_id if ctx else None,
            path=scene.path,
        )

    def _scene_npcs(self, scene: Scene) -> List[Dict[str, Any]]:
        if scene.npc_ids:
            rows = (self._npcs.get(scene.location_id, npc_id) for npc_id in scene.npc_ids)
            return [dict(row) for row in rows if isinstance(row, Mapping)]
        return [dict(row) for row in self._npcs.list(scene.location_id) or [] if isinstance(row, Mapping) and row.get("id")]

    def _option_choices(self, location_id: str, option_ids, env: RequirementEnv) -> List[SceneChoice]:
        choices: List[SceneChoice] = []
        for record in self._options.get_many(location_id, list(option_ids)):
            option_id = str(record.get("id") or "")
            if not option_id:
                continue
            if not self._requirements.passes(record.get("requirements"), env):
                _logger.debug("Option filtered by requirements", extra={"option_id": option_id})
                continue
            choices.append(SceneChoice(id=option_id, name=option_label(record, option_id), meta=dict(record)))
        return choices

    def build_choices(self, scene: Scene, ctx: SceneContext | None = None) -> List[SceneChoice]:
        env = self.env_for(scene, ctx)
        active_npc_id = env.current_npc_id
        entries: List[SceneChoice] = []

        for npc in self._scene_npcs(scene):
            npc_id = str(npc.get("id") or "")
            if not npc_id or not self._requirements.passes(npc.get("requirements"), env):
                continue
            label = f"Talk: {npc.get('name') or npc_id}"
            if npc_id == active_npc_id:
                label += ACTIVE_NPC_MARK
            entries.append(SceneChoice(id=f"{TALK_PREFIX}{npc_id}", name=label, meta={"npc": npc}))

        if active_npc_id and (not scene.npc_ids or active_npc_id in scene.npc_ids):
            npc_option_ids = self._npcs.options_for(scene.location_id, active_npc_id)
            entries.extend(self._option_choices(scene.location_id, npc_option_ids, env))

        entries.extend(self._option_choices(scene.location_id, scene.option_ids, env))
        entries.append(SceneChoice(id=INVENTORY_CHOICE_ID, name="Inventory"))
        entries.append(SceneChoice(id=EXIT_CHOICE_ID, name="Exit"))

        seen: set[str] = set()
        unique: List[SceneChoice] = []
        for entry in entries:
            if entry.id in seen:
                continue
            seen.add(entry.id)
            unique.append(entry)
        return unique

    def build_path_choices(
        self,
        scene: Scene,
        ctx: SceneContext | None = None,
        base_option: Mapping[str, Any] | None = None,
    ) -> List[SceneChoice]:
        env = self.env_for(scene, ctx)
        base_time = (base_option or {}).get("time")
        choices: List[SceneChoice] = []
        for location_id in scene.path:
            if not self._registry.has(location_id):
                continue
            choice_id = f"{GO_CHOICE_ID}:{location_id}"
            record = self._options.get(scene.location_id, choice_id) or {}
            if not self._requirements.passes(record.get("requirements"), env):
                continue
            time = record.get("time")
            if time is None:
                time = base_time if base_time is not None else 0
            name = option_label(record, self._registry.get_dto(location_id).name)
            choices.append(
                SceneChoice(
                    id=choice_id,
                    name=name,
                    meta={"location_id": location_id, "effect": option_effect(record), "time": time},
                )
            )
        return choices

    def _npc_panel(self, scene: Scene, npc_id: str | None) -> Optional[NpcPanelView]:
        if not npc_id:
            return None
        npc = self._npcs.get(scene.location_id, npc_id)
        if not isinstance(npc, Mapping):
            return None
        return NpcPanelView(
            id=npc_id,
            name=str(npc.get("name") or npc_id),
            description=str(npc.get("description") or ""),
            dialogue=_opening_line(npc),
        )

    def to_view_dto(self, scene: Scene, ctx: SceneContext | None, choices: List[SceneChoice]) -> SceneView:
        if self._registry.has(scene.location_id):
            location = self._registry.get_dto(scene.location_id)
            summary = LocationSummaryView(id=location.id, name=location.name, background=location.background)
        else:
            summary = LocationSummaryView(id=scene.location_id, name=scene.location_id)
        return SceneView(
            location=summary,
            scene_id=scene.id,
            description=scene.description_lines,
            npc=self._npc_panel(scene, ctx.current_npc_id if ctx else None),
            options=[(choice.id, choice.name) for choice in choices],
        )
