"""Board, placement and turn rules of the seabattle engine."""

from .board import Board, CellState, PlacedShip, empty_grid
from .placement import (
    CandidateSequence,
    PlacementError,
    can_place,
    generate_board,
    place_at,
    place_one_random,
    populate,
)
from .shapes import (
    BOARD_HEIGHT,
    BOARD_SIZE,
    BOARD_WIDTH,
    FLEET,
    FLEET_CELL_TOTAL,
    ShipKind,
    ShipShape,
    rotations,
)
from .turns import ShotLog, ShotResult, Side, TurnEngine, TurnState

__all__ = [
    "BOARD_HEIGHT",
    "BOARD_SIZE",
    "BOARD_WIDTH",
    "Board",
    "CandidateSequence",
    "CellState",
    "FLEET",
    "FLEET_CELL_TOTAL",
    "PlacedShip",
    "PlacementError",
    "ShipKind",
    "ShipShape",
    "ShotLog",
    "ShotResult",
    "Side",
    "TurnEngine",
    "TurnState",
    "can_place",
    "empty_grid",
    "generate_board",
    "place_at",
    "place_one_random",
    "populate",
    "rotations",
]
