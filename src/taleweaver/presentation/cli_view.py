from __future__ import annotations

import asyncio
from typing import Any, Callable, List, Mapping, Optional, Sequence, Tuple

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from taleweaver.application.dtos import InventoryView, SceneChoice, SceneView, TimeView


_BORDER_SCENE = "yellow"
_BORDER_PATH = "cyan"
_BORDER_INVENTORY = "green"
_BORDER_RESULT = "magenta"
_BACK_LABEL = "Back"


def _ornate_title(title: str) -> str:
    core = str(title or "").strip() or "Panel"
    return f"[bold yellow]{core}[/bold yellow]"


class RichCliView:
    """Terminal view: rich panels for output, numbered prompts for input.

    ``input`` runs on a worker thread so the event loop stays free; end of
    input counts as cancelling the current menu.
    """

    def __init__(self, console: Console | None = None, input_fn: Callable[[str], str] = input) -> None:
        self.console = console or Console()
        self._input_fn = input_fn

    async def _read_line(self, prompt: str) -> Optional[str]:
        try:
            return await asyncio.to_thread(self._input_fn, prompt)
        except EOFError:
            return None

    async def _pick(self, entries: Sequence[Tuple[str, str]]) -> Optional[str]:
        if not entries:
            return None
        for index, (_, label) in enumerate(entries, start=1):
            self.console.print(f"  [bold]{index}[/bold]. {label}")
        while True:
            raw = await self._read_line("> ")
            if raw is None:
                return None
            raw = raw.strip()
            if raw.isdigit() and 1 <= int(raw) <= len(entries):
                return entries[int(raw) - 1][0]
            ids = [entry_id for entry_id, _ in entries]
            if raw in ids:
                return raw
            self.console.print(f"[dim]Choose 1-{len(entries)}.[/dim]")

    async def show_scene(self, dto: SceneView) -> Optional[str]:
        lines: List[str] = [str(line) for line in dto.description if str(line).strip()]
        if dto.npc is not None:
            lines.append("")
            lines.append(f"[bold]{dto.npc.name}[/bold]" + (f" - {dto.npc.description}" if dto.npc.description else ""))
            if dto.npc.dialogue:
                lines.append(f'[italic]"{dto.npc.dialogue}"[/italic]')
        self.console.print(
            Panel.fit(
                "\n".join(lines) if lines else "Nothing of note.",
                title=_ornate_title(dto.location.name),
                subtitle=f"[dim]{dto.scene_id}[/dim]",
                subtitle_align="left",
                border_style=_BORDER_SCENE,
            )
        )
        return await self._pick(dto.options)

    async def show_path(self, choices: List[SceneChoice], title: str = "") -> Optional[str]:
        table = Table(show_header=True, header_style="bold yellow")
        table.add_column("#", justify="right")
        table.add_column("Destination")
        table.add_column("Hours", justify="right")
        for index, choice in enumerate(choices, start=1):
            table.add_row(str(index), choice.name, str(choice.meta.get("time", "")))
        self.console.print(Panel.fit(table, title=_ornate_title(title or "Travel"), border_style=_BORDER_PATH))
        entries = [(choice.id, choice.name) for choice in choices] + [("back", _BACK_LABEL)]
        return await self._pick(entries)

    async def show_inventory(self, snapshot: InventoryView) -> None:
        if snapshot.empty:
            self.console.print(Panel.fit("Your pack is empty.", title=_ornate_title("Inventory"), border_style=_BORDER_INVENTORY))
            return
        table = Table(show_header=True, header_style="bold yellow")
        table.add_column("Item")
        table.add_column("Qty", justify="right")
        table.add_column("Description")
        for item in snapshot.items:
            table.add_row(item.name, str(item.quantity), item.description)
        self.console.print(
            Panel.fit(
                table,
                title=_ornate_title("Inventory"),
                subtitle=f"[dim]travel speed x{snapshot.speed:g}[/dim]",
                subtitle_align="left",
                border_style=_BORDER_INVENTORY,
            )
        )

    async def show_message(self, text: str) -> None:
        self.console.print(str(text))

    async def show_choice_result(self, option: Mapping[str, Any]) -> None:
        result = option.get("result")
        lines = [str(line) for line in result] if isinstance(result, list) else [str(result or "")]
        self.console.print(Panel.fit("\n".join(lines), border_style=_BORDER_RESULT))

    async def show_time(self, view: TimeView) -> None:
        self.console.print(f"[dim]{view.label} ({view.window})[/dim]")
