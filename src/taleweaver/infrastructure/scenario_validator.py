"""Validate scenario content before shipping it.

Usage examples:
    python -m taleweaver.infrastructure.scenario_validator
    python -m taleweaver.infrastructure.scenario_validator --path scenario
"""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Any, Mapping, Sequence

from taleweaver.application.services.effect_interpreter import is_recognised_effect
from taleweaver.application.services.requirement_interpreter import compile_requirement, unknown_tokens
from taleweaver.application.services.scene_assembler import option_effect
from taleweaver.infrastructure.json_content_repos import (
    JsonLocationRepository,
    JsonNpcRepository,
    JsonOptionRepository,
)
from taleweaver.infrastructure.json_file_cache import JsonFileCache


DEFAULT_SCENARIO_DIR = "scenario"
_SCENE_WINDOWS = ("any", "day", "night")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Validate scenario locations, scenes, options and NPCs")
    parser.add_argument(
        "--path",
        default=DEFAULT_SCENARIO_DIR,
        help="Scenario root directory (contains locations/)",
    )
    return parser


def _requirement_errors(owner: str, definition: object) -> list[str]:
    return [f"{owner} has unknown requirement '{token}'" for token in unknown_tokens(compile_requirement(definition))]


def _is_hour(value: object) -> bool:
    try:
        float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return False
    return True


def _validate_scene(prefix: str, scene: Mapping[str, Any], known_locations: set[str]) -> list[str]:
    errors: list[str] = []
    window = scene.get("window")
    if window is not None and str(window).strip().lower() not in _SCENE_WINDOWS:
        errors.append(f"{prefix}.window must be one of {', '.join(_SCENE_WINDOWS)}")
    for bound in ("from", "to"):
        if scene.get(bound) is not None and not _is_hour(scene.get(bound)):
            errors.append(f"{prefix}.{bound} must be a number")
    path = scene.get("path")
    if path is not None and not isinstance(path, list):
        errors.append(f"{prefix}.path must be a list")
    for destination in path if isinstance(path, list) else []:
        if str(destination) not in known_locations:
            errors.append(f"{prefix}.path references unknown location '{destination}'")
    return errors


def validate_location(
    location_id: str,
    *,
    locations: JsonLocationRepository,
    options: JsonOptionRepository,
    npcs: JsonNpcRepository,
    known_locations: set[str],
) -> list[str]:
    errors: list[str] = []
    info = locations.get(location_id)
    scenes = info.get("scenes")
    if not isinstance(scenes, list) or not scenes:
        return [f"{location_id}: scenes must be a non-empty list"]

    option_ids = set(options.list_ids(location_id))
    npc_records = {str(row["id"]): row for row in npcs.list(location_id)}
    scene_ids: list[str] = []

    for index, scene in enumerate(scenes):
        prefix = f"{location_id}.scenes[{index}]"
        if not isinstance(scene, Mapping):
            errors.append(f"{prefix} must be an object")
            continue
        scene_id = str(scene.get("id") or "").strip()
        if not scene_id:
            errors.append(f"{prefix}.id is required")
            continue
        if scene_id in scene_ids:
            errors.append(f"{prefix}.id '{scene_id}' is duplicated")
        scene_ids.append(scene_id)
        errors.extend(_validate_scene(prefix, scene, known_locations))
        for option_id in scene.get("optionIds") or []:
            if str(option_id) not in option_ids:
                errors.append(f"{prefix} references missing option '{option_id}'")
        for npc_id in scene.get("npcIds") or []:
            if str(npc_id) not in npc_records:
                errors.append(f"{prefix} references missing npc '{npc_id}'")

    start_scene_id = info.get("startSceneId")
    if start_scene_id and str(start_scene_id) not in scene_ids:
        errors.append(f"{location_id}.startSceneId '{start_scene_id}' is not a declared scene")

    for destination in info.get("path") or []:
        if str(destination) not in known_locations:
            errors.append(f"{location_id}.path references unknown location '{destination}'")

    for option_id in sorted(option_ids):
        record = options.get(location_id, option_id) or {}
        owner = f"{location_id}.options.{option_id}"
        errors.extend(_requirement_errors(owner, record.get("requirements")))
        effect = option_effect(record)
        if effect is not None and not is_recognised_effect(effect):
            errors.append(f"{owner} has a malformed effect")

    for npc_id, npc in npc_records.items():
        owner = f"{location_id}.npcs.{npc_id}"
        errors.extend(_requirement_errors(owner, npc.get("requirements")))
        for option_id in npc.get("options") or []:
            if str(option_id) not in option_ids:
                errors.append(f"{owner} references missing option '{option_id}'")

    return errors


def validate_scenario(path: str | Path) -> list[str]:
    root = Path(path)
    base_dir = root / "locations"
    if not base_dir.is_dir():
        return [f"Locations directory not found: {base_dir}"]

    json_cache = JsonFileCache()
    locations = JsonLocationRepository(base_dir, json_cache)
    options = JsonOptionRepository(base_dir, json_cache)
    npcs = JsonNpcRepository(base_dir, json_cache)
    known_locations = set(locations.list_ids())
    if not known_locations:
        return [f"No locations found under {base_dir}"]

    errors: list[str] = []
    for location_id in sorted(known_locations):
        errors.extend(
            validate_location(
                location_id,
                locations=locations,
                options=options,
                npcs=npcs,
                known_locations=known_locations,
            )
        )
    return errors


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    errors = validate_scenario(args.path)
    if errors:
        print(f"Scenario content invalid ({len(errors)} errors):")
        for message in errors:
            print(f"- {message}")
        return 1

    print("Scenario content valid.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
