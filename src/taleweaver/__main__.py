from pathlib import Path
import asyncio
import logging
import os
import sys

from dotenv import load_dotenv

# Ensure the src directory is on sys.path when running as a script
_SRC_DIR = Path(__file__).resolve().parents[1]
if str(_SRC_DIR) not in sys.path:
    sys.path.insert(0, str(_SRC_DIR))

from taleweaver.bootstrap import create_game_session, create_save_repository
from taleweaver.presentation.cli_view import RichCliView
from taleweaver.presentation.game_loop import run_game_loop

load_dotenv()


def _print_help_surface() -> None:
    print("\nHelp:")
    print("- Pick a numbered choice and press ENTER; Ctrl+D leaves the current menu.")
    print("- Content issues: run python -m taleweaver.infrastructure.scenario_validator --path <scenario>.")
    print("- Startup issues: verify TALE_SCENARIO_DIR, or unset TALE_DATABASE_URL to save to a JSON file.")


def _configure_logging() -> None:
    level_name = os.getenv("TALE_LOG_LEVEL", "WARNING").strip().upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


async def _play() -> None:
    view = RichCliView()
    saver = create_save_repository()
    session = create_game_session(view, saver)
    await run_game_loop(session, saver)


def main():
    _configure_logging()
    try:
        asyncio.run(_play())
    except KeyboardInterrupt:
        print("\nSession ended.")
    except Exception as exc:
        print("An unexpected error occurred. The game closed safely.")
        print(f"Reason: {exc}")
        _print_help_surface()


if __name__ == "__main__":
    main()
