from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Tuple


@dataclass(frozen=True)
class NavigationPointer:
    location_id: str
    scene_id: str | None = None


def _string_tuple(value: object) -> Tuple[str, ...]:
    if not isinstance(value, (list, tuple)):
        return ()
    seen: list[str] = []
    for entry in value:
        if entry is None:
            continue
        key = str(entry)
        if key and key not in seen:
            seen.append(key)
    return tuple(seen)


@dataclass(frozen=True)
class Scene:
    id: str
    location_id: str
    description: str | Tuple[str, ...] = ""
    option_ids: Tuple[str, ...] = field(default_factory=tuple)
    npc_ids: Tuple[str, ...] = field(default_factory=tuple)
    path: Tuple[str, ...] = field(default_factory=tuple)
    items: Tuple[Mapping[str, Any], ...] = field(default_factory=tuple)

    @classmethod
    def from_record(
        cls,
        scene_id: str,
        location_id: str,
        record: Mapping[str, Any] | None,
        *,
        location_path: object = None,
    ) -> "Scene":
        row = record if isinstance(record, Mapping) else {}
        raw_description = row.get("description")
        if isinstance(raw_description, (list, tuple)):
            description: str | Tuple[str, ...] = tuple(str(line) for line in raw_description)
        elif isinstance(raw_description, str):
            description = raw_description
        else:
            description = ""

        raw_path = row.get("path")
        if not isinstance(raw_path, (list, tuple)):
            raw_path = location_path

        raw_items = row.get("inventory", row.get("items"))
        items = tuple(dict(item) for item in raw_items if isinstance(item, Mapping)) if isinstance(raw_items, list) else ()

        return cls(
            id=str(scene_id),
            location_id=str(location_id),
            description=description,
            option_ids=_string_tuple(row.get("optionIds")),
            npc_ids=_string_tuple(row.get("npcIds")),
            path=_string_tuple(raw_path),
            items=items,
        )

    @property
    def description_lines(self) -> Tuple[str, ...]:
        if isinstance(self.description, tuple):
            return self.description
        return (self.description,) if self.description else ()
