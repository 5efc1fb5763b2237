import logging
import os
from pathlib import Path

from taleweaver.application.services.game_session import GameSession
from taleweaver.domain.models.clock import GameClock
from taleweaver.domain.models.navigation import NavigationPointer
from taleweaver.domain.models.traits import TraitBook
from taleweaver.domain.repositories import SaveRepository
from taleweaver.infrastructure.json_content_repos import (
    JsonItemRepository,
    JsonLocationRepository,
    JsonNpcRepository,
    JsonOptionRepository,
    load_traits,
)
from taleweaver.infrastructure.json_file_cache import JsonFileCache
from taleweaver.infrastructure.saves.json_save_repo import JsonSaveRepository
from taleweaver.infrastructure.saves.sql_save_repo import SqlSaveRepository


_logger = logging.getLogger(__name__)

DEFAULT_SCENARIO_DIR = "scenario"
DEFAULT_START_LOCATION = "market"
DEFAULT_SAVE_FILE = "saves/slot1.json"


def _env_flag(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes"}


def _env_hour(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        _logger.warning("Ignoring non-numeric clock setting", extra={"setting": name, "raw_value": raw})
        return default


def scenario_dir() -> Path:
    return Path(os.getenv("TALE_SCENARIO_DIR", DEFAULT_SCENARIO_DIR))


def create_save_repository() -> SaveRepository:
    database_url = os.getenv("TALE_DATABASE_URL", "").strip()
    if database_url:
        try:
            return SqlSaveRepository(database_url, slot=os.getenv("TALE_SAVE_SLOT", "slot1"))
        except Exception as exc:
            _logger.warning("Database saves unavailable; using JSON save file", extra={"reason": str(exc)})
    return JsonSaveRepository(os.getenv("TALE_SAVE_FILE", DEFAULT_SAVE_FILE))


def create_game_session(view, saver: SaveRepository | None = None) -> GameSession:
    root = scenario_dir()
    base_dir = root / "locations"
    json_cache = JsonFileCache()

    locations = JsonLocationRepository(base_dir, json_cache)
    start_location = os.getenv("TALE_START_LOCATION", DEFAULT_START_LOCATION)
    start_scene = os.getenv("TALE_START_SCENE") or locations.get(start_location).get("startSceneId")

    session = GameSession(
        view=view,
        locations=locations,
        options=JsonOptionRepository(base_dir, json_cache),
        npcs=JsonNpcRepository(base_dir, json_cache),
        items=JsonItemRepository(root / "items", json_cache),
        traits=TraitBook(load_traits(root / "traits.json", json_cache)),
        clock=GameClock(start_time=_env_hour("TALE_CLOCK_START", 9), end_time=_env_hour("TALE_CLOCK_END", 5)),
        start=NavigationPointer(location_id=start_location, scene_id=start_scene),
    )

    if saver is not None and _env_flag("TALE_LOAD_SAVE", "1"):
        snapshot = saver.load()
        if snapshot is not None:
            session.restore(snapshot)
    return session
