from __future__ import annotations

import math
from typing import Any, Dict, List, Mapping, Tuple

from taleweaver.application.dtos import SaveSnapshot


SAVE_FORMAT_VERSION = 1


def _finite(value: object) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value) if math.isfinite(value) else None


def to_save_payload(snapshot: SaveSnapshot) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "version": SAVE_FORMAT_VERSION,
        "pointer": {"locationId": snapshot.location_id, "sceneId": snapshot.scene_id},
        "history": [{"locationId": location_id, "sceneId": scene_id} for location_id, scene_id in snapshot.history],
        "traits": dict(snapshot.traits),
        "domainEvents": list(snapshot.domain_events),
        "inventory": dict(snapshot.inventory),
        "world": dict(snapshot.world),
    }
    if snapshot.time is not None:
        payload["time"] = snapshot.time
    return payload


def from_save_payload(payload: object) -> SaveSnapshot | None:
    """Map a stored payload back to a snapshot; ``None`` when it has no usable pointer."""
    if not isinstance(payload, Mapping):
        return None
    pointer = payload.get("pointer")
    if not isinstance(pointer, Mapping) or not pointer.get("locationId"):
        return None

    history: List[Tuple[str, str | None]] = []
    for row in payload.get("history") or []:
        if isinstance(row, Mapping) and row.get("locationId"):
            scene_id = row.get("sceneId")
            history.append((str(row["locationId"]), str(scene_id) if scene_id else None))

    traits = payload.get("traits") if isinstance(payload.get("traits"), Mapping) else {}
    inventory = payload.get("inventory") if isinstance(payload.get("inventory"), Mapping) else {}
    events = payload.get("domainEvents") if isinstance(payload.get("domainEvents"), list) else []
    world = payload.get("world") if isinstance(payload.get("world"), Mapping) else {}
    scene_id = pointer.get("sceneId")

    return SaveSnapshot(
        location_id=str(pointer["locationId"]),
        scene_id=str(scene_id) if scene_id else None,
        history=history,
        time=_finite(payload.get("time")),
        traits={str(name): float(value) for name, value in traits.items() if _finite(value) is not None},
        domain_events=[str(token) for token in events if str(token).strip()],
        inventory={str(item_id): int(count) for item_id, count in inventory.items() if _finite(count) is not None},
        world=dict(world),
        version=int(_finite(payload.get("version")) or SAVE_FORMAT_VERSION),
    )
