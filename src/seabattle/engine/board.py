"""Single-grid board state for the seabattle engine."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import IntEnum

import numpy as np
import numpy.typing as npt

from seabattle.telemetry import get_meter

from .shapes import (
    BOARD_HEIGHT,
    BOARD_SIZE,
    BOARD_WIDTH,
    ShipKind,
    ShipShape,
    shape_for,
    to_index,
)

logger = logging.getLogger(__name__)
meter = get_meter("seabattle.engine.board")

SHOT_COUNTER = meter.create_counter(
    "seabattle_engine_board_shots",
    unit="1",
    description="Shots resolved against a board",
)

Grid = npt.NDArray[np.int8]


class CellState(IntEnum):
    """State of one grid cell."""

    EMPTY = 0
    SHIP = 1
    HIT = 2
    MISS = 3


def empty_grid() -> Grid:
    """Return a fresh all-EMPTY grid."""
    return np.full((BOARD_HEIGHT, BOARD_WIDTH), CellState.EMPTY, dtype=np.int8)


@dataclass(frozen=True)
class PlacedShip:
    """One fleet instance anchored on a grid."""

    kind: ShipKind
    rotation: int
    left: int
    top: int

    @property
    def shape(self) -> ShipShape:
        return shape_for(self.kind, self.rotation)

    def indices(self) -> tuple[int, ...]:
        """Linear indices of every occupied cell."""
        return tuple(
            to_index(self.top + row, self.left + col) for row, col in self.shape.cells
        )


@dataclass(eq=False)
class Board:
    """A populated 10×10 grid plus the live count of unsunk ship cells."""

    grid: Grid = field(default_factory=empty_grid)
    placements: list[PlacedShip] = field(default_factory=list)
    owner: str = "unknown"
    remaining_ship_cells: int = field(init=False)

    def __post_init__(self) -> None:
        if self.grid.shape != (BOARD_HEIGHT, BOARD_WIDTH):
            raise ValueError(f"Grid must be {BOARD_HEIGHT}x{BOARD_WIDTH}, got {self.grid.shape}.")
        self.remaining_ship_cells = int(np.count_nonzero(self.grid == CellState.SHIP))

    @classmethod
    def from_grid(
        cls, grid: Grid, placements: list[PlacedShip] | None = None, owner: str = "unknown"
    ) -> Board:
        return cls(grid=grid, placements=list(placements or []), owner=owner)

    @staticmethod
    def contains(index: int) -> bool:
        """Check whether a linear index lies on the board."""
        return 0 <= index < BOARD_SIZE

    def _require(self, index: int) -> tuple[int, int]:
        if not self.contains(index):
            logger.error("cell_out_of_bounds", extra={"index": index, "owner": self.owner})
            raise ValueError(f"Cell index {index} out of bounds.")
        return divmod(index, BOARD_WIDTH)

    def cell_state(self, index: int) -> CellState:
        """Return the state of the cell at ``index``."""
        row, col = self._require(index)
        return CellState(int(self.grid[row, col]))

    def is_shot(self, index: int) -> bool:
        return self.cell_state(index) in (CellState.HIT, CellState.MISS)

    def mark_shot(self, index: int) -> CellState | None:
        """Resolve a shot at ``index``.

        Returns the new cell state, or ``None`` when the cell was already shot
        (nothing changes in that case).
        """
        row, col = self._require(index)
        current = CellState(int(self.grid[row, col]))
        if current in (CellState.HIT, CellState.MISS):
            logger.debug("shot_duplicate", extra={"index": index, "owner": self.owner})
            return None

        if current is CellState.SHIP:
            outcome = CellState.HIT
            self.remaining_ship_cells -= 1
        else:
            outcome = CellState.MISS
        self.grid[row, col] = outcome
        SHOT_COUNTER.add(1, attributes={"outcome": outcome.name.lower(), "owner": self.owner})
        logger.debug(
            "shot_marked",
            extra={
                "index": index,
                "outcome": outcome.name,
                "remaining": self.remaining_ship_cells,
                "owner": self.owner,
            },
        )
        return outcome

    @property
    def is_defeated(self) -> bool:
        """True once every ship cell has been hit."""
        return self.remaining_ship_cells == 0

    def ship_indices(self) -> list[int]:
        """Linear indices of cells still holding an unhit ship."""
        return [int(i) for i in np.flatnonzero(self.grid.ravel() == CellState.SHIP)]

    def shot_count(self) -> int:
        return int(np.count_nonzero(self.grid >= CellState.HIT))
