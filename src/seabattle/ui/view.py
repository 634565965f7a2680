"""Boundary between the game controller and whatever draws the boards."""

from __future__ import annotations

from enum import Enum
from typing import Protocol


class BoardId(Enum):
    PLAYER = "player"
    OPPONENT = "opponent"


class VisualState(Enum):
    """How a single cell should look."""

    HIDDEN = "hidden"
    SHIP = "ship"
    HIT = "hit"
    MISS = "miss"


class GameView(Protocol):
    """Outbound calls from the controller to a rendering collaborator."""

    def render_cell(self, board_id: BoardId, index: int, state: VisualState) -> None: ...

    def render_status(self, message: str) -> None: ...

    def set_input_enabled(self, board_id: BoardId, enabled: bool) -> None: ...
