from __future__ import annotations

from typing import Any, Awaitable, Callable

from taleweaver.domain.repositories import SaveRepository


class AutoSaver:
    """Persists the session snapshot after every wrapped step, even a failing one."""

    def __init__(self, saver: SaveRepository, session) -> None:
        self.saver = saver
        self.session = session

    async def after(self, step: Callable[[], Awaitable[Any]]) -> Any:
        try:
            return await step()
        finally:
            self.saver.save(self.session.snapshot())
