"""Shared fixtures: a hand-cranked scheduler, a recording view and board builders."""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Any, Callable

import pytest
from seabattle.config import GameConfig
from seabattle.controller import GameController
from seabattle.engine.board import Board, empty_grid
from seabattle.engine.placement import place_at
from seabattle.engine.shapes import BOARD_SIZE, ShipKind
from seabattle.ui.view import BoardId, VisualState


@dataclass
class ManualHandle:
    when: float
    callback: Callable[..., Any]
    args: tuple[Any, ...]
    cancelled: bool = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Scheduler whose clock only moves when a test calls ``advance``."""

    def __init__(self) -> None:
        self.now = 0.0
        self.handles: list[ManualHandle] = []

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> ManualHandle:
        handle = ManualHandle(self.now + delay, callback, args)
        self.handles.append(handle)
        return handle

    @property
    def pending(self) -> list[ManualHandle]:
        return [handle for handle in self.handles if not handle.cancelled]

    def advance(self, seconds: float) -> None:
        self.now += seconds
        due = sorted(
            (h for h in self.handles if h.when <= self.now and not h.cancelled),
            key=lambda h: h.when,
        )
        for handle in due:
            self.handles.remove(handle)
            handle.callback(*handle.args)


@dataclass
class RecordingView:
    cells: dict[BoardId, list[VisualState]] = field(
        default_factory=lambda: {b: [VisualState.HIDDEN] * BOARD_SIZE for b in BoardId}
    )
    statuses: list[str] = field(default_factory=list)
    enabled: dict[BoardId, bool] = field(default_factory=lambda: {b: False for b in BoardId})
    render_calls: int = 0

    def render_cell(self, board_id: BoardId, index: int, state: VisualState) -> None:
        self.render_calls += 1
        self.cells[board_id][index] = state

    def render_status(self, message: str) -> None:
        self.statuses.append(message)

    def set_input_enabled(self, board_id: BoardId, enabled: bool) -> None:
        self.enabled[board_id] = enabled

    @property
    def status(self) -> str:
        return self.statuses[-1] if self.statuses else ""


def board_with(*ships: tuple[ShipKind, int, int, int], owner: str = "test") -> Board:
    """Build a board from ``(kind, rotation, left, top)`` placements."""
    grid = empty_grid()
    placements = []
    for kind, rotation, left, top in ships:
        placed = place_at(grid, kind, rotation, left, top)
        assert placed is not None, f"{kind} does not fit at ({left}, {top})"
        placements.append(placed)
    return Board.from_grid(grid, placements, owner=owner)


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def view() -> RecordingView:
    return RecordingView()


@pytest.fixture
def game_config() -> GameConfig:
    return GameConfig(opponent_delay=0.7, seed=1234)


@pytest.fixture
def controller(view: RecordingView, scheduler: ManualScheduler, game_config: GameConfig) -> GameController:
    game = GameController(view, scheduler, config=game_config, rng=random.Random(game_config.seed))
    game.new_match()
    return game


@pytest.fixture
def make_board() -> Callable[..., Board]:
    return board_with
