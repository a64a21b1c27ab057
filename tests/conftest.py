"""Pytest fixtures for kanban-tui tests."""

from __future__ import annotations

import os
import tempfile
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING

import pytest
from hypothesis import Phase, Verbosity, settings

_TEST_BASE_DIR = Path(tempfile.mkdtemp(prefix="kanban-tui-tests-"))
os.environ["KANBAN_TUI_CONFIG_DIR"] = str(_TEST_BASE_DIR / "config")
os.environ["KANBAN_TUI_DATA_DIR"] = str(_TEST_BASE_DIR / "data")
os.environ["KANBAN_TUI_SAVE_DIR"] = str(_TEST_BASE_DIR / "saves")

if TYPE_CHECKING:
    from kanban_tui.config import AppConfig
    from kanban_tui.controller import Controller
    from kanban_tui.core.models import Workspace


settings.register_profile(
    "ci",
    max_examples=100,
    deadline=None,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
)
settings.register_profile(
    "dev",
    max_examples=20,
    deadline=500,
)
settings.register_profile(
    "debug",
    max_examples=10,
    verbosity=Verbosity.verbose,
    deadline=None,
)
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "dev"))


class FakeClock:
    """Monotonic clock the tests advance by hand."""

    def __init__(self, start: float = 1000.0) -> None:
        self.value = start

    def __call__(self) -> float:
        return self.value

    def advance(self, seconds: float) -> float:
        self.value += seconds
        return self.value


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def workspace() -> Workspace:
    """Two boards: 'Todo' with three cards, 'Done' with one."""
    from kanban_tui.core.enums import CardPriority, CardStatus
    from kanban_tui.core.models import Board, Card, Workspace

    created = datetime(2024, 1, 10, 9, 0, 0)
    todo = Board(
        name="Todo",
        description="Things to do",
        cards=[
            Card(name="Write docs", tags=["docs", "Writing"], created=created),
            Card(
                name="Fix bug",
                priority=CardPriority.HIGH,
                tags=["bug"],
                due_date=datetime(2024, 2, 1, 12, 0, 0),
                created=created,
            ),
            Card(name="Review", description="Review the PR", created=created),
        ],
    )
    done = Board(
        name="Done",
        cards=[
            Card(
                name="Release",
                status=CardStatus.COMPLETE,
                tags=["docs"],
                created=created,
            ),
        ],
    )
    return Workspace(boards=[todo, done])


@pytest.fixture
def save_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "saves"
    directory.mkdir()
    return directory


@pytest.fixture
def app_config(save_dir: Path) -> AppConfig:
    from kanban_tui.config import AppConfig

    return AppConfig(save_directory=save_dir, disable_animations=True)


@pytest.fixture
def controller(
    app_config: AppConfig, workspace: Workspace, clock: FakeClock, tmp_path: Path
) -> Controller:
    """A controller sized to a comfortable terminal with the sample workspace loaded."""
    from kanban_tui.controller import Controller

    ctrl = Controller(
        app_config,
        workspace=workspace,
        config_path=tmp_path / "config.json",
        themes_dir=tmp_path / "themes",
        session_path=tmp_path / "session.json",
        clock=clock,
    )
    ctrl.resize(160, 48)
    return ctrl
