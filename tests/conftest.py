import os
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


def _is_e2e_test(request: pytest.FixtureRequest) -> bool:
    return "tests/e2e/" in str(request.node.fspath).replace("\\", "/")


@pytest.fixture(autouse=True)
def isolate_tale_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in list(os.environ):
        if name.startswith("TALE_"):
            monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def e2e_scenario_env(request: pytest.FixtureRequest, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    if not _is_e2e_test(request):
        return

    monkeypatch.setenv("TALE_SCENARIO_DIR", str(ROOT / "scenario"))
    monkeypatch.setenv("TALE_SAVE_FILE", str(tmp_path / "slot1.json"))
    monkeypatch.setenv("TALE_LOAD_SAVE", "0")
