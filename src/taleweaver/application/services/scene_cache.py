from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional

from taleweaver.domain.events import GoTarget
from taleweaver.domain.models.clock import hour_in_window
from taleweaver.domain.models.navigation import NavigationPointer, Scene
from taleweaver.domain.repositories import LocationRepository


_logger = logging.getLogger(__name__)

_TIME_WINDOWS = ("day", "night")


def _scene_records(info: Mapping[str, Any]) -> List[Mapping[str, Any]]:
    scenes = info.get("scenes")
    if not isinstance(scenes, list):
        return []
    return [scene for scene in scenes if isinstance(scene, Mapping) and scene.get("id")]


def _find_scene(info: Mapping[str, Any], scene_id: str | None) -> Optional[Mapping[str, Any]]:
    if not scene_id:
        return None
    return next((scene for scene in _scene_records(info) if str(scene["id"]) == str(scene_id)), None)


class SceneCache:
    """Owns the navigation pointer and resolves it to concrete scenes.

    ``set_current`` and ``apply_result`` record history; ``current_scene`` may
    silently move the pointer to another scene when the clock has made the
    resolved one unavailable, without recording history.
    """

    def __init__(
        self,
        locations: LocationRepository,
        registry,
        *,
        clock=None,
        start: NavigationPointer | Mapping[str, Any] | None = None,
    ) -> None:
        self._locations = locations
        self._registry = registry
        self._clock = clock
        self._pointer: NavigationPointer | None = None
        self._history: List[NavigationPointer] = []

        if isinstance(start, NavigationPointer):
            self.set_current(start.location_id, start.scene_id)
        elif isinstance(start, Mapping) and (start.get("location_id") or start.get("locationId")):
            self.set_current(
                start.get("location_id") or start.get("locationId"),
                start.get("scene_id") or start.get("sceneId"),
            )

    @property
    def pointer(self) -> NavigationPointer | None:
        return self._pointer

    @property
    def history(self) -> List[NavigationPointer]:
        return list(self._history)

    @property
    def locations(self) -> LocationRepository:
        return self._locations

    @property
    def registry(self):
        return self._registry

    def _ensure_location(self, location_id: str) -> Dict[str, Any]:
        try:
            info = self._locations.get(location_id)
        except Exception:
            _logger.warning("Location catalog could not be loaded", extra={"location_id": location_id}, exc_info=True)
            info = {}
        if not isinstance(info, Mapping):
            info = {}
        self._registry.ensure(
            location_id,
            title=info.get("name") or info.get("title") or location_id,
            background=info.get("background"),
        )
        return dict(info)

    def is_scene_allowed_now(self, scene: Mapping[str, Any] | None) -> bool:
        if self._clock is None or not isinstance(scene, Mapping):
            return True
        window = str(scene.get("window") or "").strip().lower()
        if window == "any":
            return True
        if window in _TIME_WINDOWS:
            return self._clock.get_time_window() == window
        start, end = scene.get("from"), scene.get("to")
        if start is None and end is None:
            return True
        return hour_in_window(self._clock.current_time, start, end)

    def _gate(self, info: Mapping[str, Any], scene_id: str | None) -> str | None:
        if self._clock is None:
            return scene_id
        scenes = _scene_records(info)
        if not scenes:
            return scene_id
        if self.is_scene_allowed_now(_find_scene(info, scene_id)):
            return scene_id
        fallback = next((scene for scene in scenes if self.is_scene_allowed_now(scene)), None)
        return str(fallback["id"]) if fallback is not None else scene_id

    @staticmethod
    def _resolve_scene_id(info: Mapping[str, Any], scene_id: str | None) -> str | None:
        if _find_scene(info, scene_id) is not None:
            return str(scene_id)
        start_scene_id = info.get("startSceneId")
        if start_scene_id and _find_scene(info, start_scene_id) is not None:
            return str(start_scene_id)
        scenes = _scene_records(info)
        if scenes:
            return str(scenes[0]["id"])
        return str(scene_id) if scene_id else None

    def _preload_path(self, info: Mapping[str, Any], scene_id: str | None) -> None:
        scene = Scene.from_record(scene_id or "", "", _find_scene(info, scene_id), location_path=info.get("path"))
        for neighbour_id in scene.path:
            self._ensure_location(neighbour_id)

    def set_current(self, location_id: str | None, scene_id: str | None = None) -> NavigationPointer | None:
        if not location_id:
            return self._pointer
        location_id = str(location_id)
        info = self._ensure_location(location_id)
        resolved = self._gate(info, self._resolve_scene_id(info, scene_id))
        self._preload_path(info, resolved)

        self._pointer = NavigationPointer(location_id=location_id, scene_id=resolved)
        if not self._history or self._history[-1] != self._pointer:
            self._history.append(self._pointer)
        return self._pointer

    def restore(self, pointer: NavigationPointer, history: Iterable[NavigationPointer] = ()) -> NavigationPointer | None:
        self._history = [entry for entry in history if isinstance(entry, NavigationPointer)]
        self._pointer = self._history[-1] if self._history else None
        return self.set_current(pointer.location_id, pointer.scene_id)

    def current_scene(self) -> Scene | None:
        if self._pointer is None:
            return None
        location_id = self._pointer.location_id
        info = self._ensure_location(location_id)
        scene_id = self._gate(info, self._pointer.scene_id)
        if scene_id != self._pointer.scene_id:
            self._pointer = NavigationPointer(location_id=location_id, scene_id=scene_id)
        return Scene.from_record(scene_id or "", location_id, _find_scene(info, scene_id), location_path=info.get("path"))

    def _known_location(self, location_id: str) -> bool:
        try:
            info = self._locations.get(location_id)
        except Exception:
            return False
        return isinstance(info, Mapping) and bool(_scene_records(info))

    def _is_local_scene(self, scene_id: str) -> bool:
        if self._pointer is None:
            return False
        info = self._ensure_location(self._pointer.location_id)
        return _find_scene(info, scene_id) is not None

    def _target_from(self, result: object) -> tuple[str | None, str | None]:
        current_location = self._pointer.location_id if self._pointer else None
        if isinstance(result, (GoTarget, NavigationPointer)):
            return result.location_id, result.scene_id
        if isinstance(result, str):
            head, _, rest = result.strip().partition(":")
            if head != "go" or not rest:
                return None, None
            location_id, _, scene_id = rest.partition(":")
            return location_id or None, scene_id or None
        if isinstance(result, Mapping):
            go = result.get("go")
            if isinstance(go, Mapping):
                location_id = go.get("locationId") or go.get("location_id") or current_location
                return location_id, go.get("sceneId") or go.get("scene_id")
            scene_id = go or result.get("nextSceneId") or result.get("sceneId") or result.get("scene_id")
            location_id = result.get("locationId") or result.get("location_id") or current_location
            return location_id, scene_id
        return None, None

    def apply_result(self, result: object) -> NavigationPointer | None:
        if result is None:
            return self._pointer
        location_id, scene_id = self._target_from(result)
        if not location_id:
            return self._pointer
        location_id = str(location_id)

        if (
            not scene_id
            and self._pointer is not None
            and location_id != self._pointer.location_id
            and not self._known_location(location_id)
            and self._is_local_scene(location_id)
        ):
            return self.set_current(self._pointer.location_id, location_id)

        if scene_id:
            return self.set_current(location_id, str(scene_id))
        if self._pointer is None or location_id != self._pointer.location_id:
            return self.set_current(location_id)
        return self._pointer
