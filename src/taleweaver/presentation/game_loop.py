from __future__ import annotations

import logging
from typing import Any

from taleweaver.application.services.game_session import GameSession
from taleweaver.application.services.scene_assembler import EXIT_CHOICE_ID
from taleweaver.domain.repositories import SaveRepository
from taleweaver.infrastructure.saves.autosave import AutoSaver


_logger = logging.getLogger(__name__)


async def run_game_loop(session: GameSession, saver: SaveRepository | None = None, *, max_steps: int | None = None) -> Any:
    """Play autosaved turns until the player leaves, cancels, or the day ends."""
    autosaver = AutoSaver(saver, session) if saver is not None else None
    result = None
    steps = 0
    while True:
        if autosaver is not None:
            result = await autosaver.after(session.run_step)
        else:
            result = await session.run_step()
        steps += 1

        if not result or result == EXIT_CHOICE_ID:
            break
        if session.day_ended:
            await session.view.show_message("Night falls over the town. The day is over.")
            break
        if max_steps is not None and steps >= max_steps:
            break
    _logger.debug("Game loop stopped", extra={"steps": steps})
    return result
