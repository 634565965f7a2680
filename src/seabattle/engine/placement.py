"""Random fleet packing onto an empty grid."""

from __future__ import annotations

import logging
import random

from seabattle.telemetry import get_meter, get_tracer

from .board import Board, CellState, Grid, PlacedShip, empty_grid
from .shapes import BOARD_SIZE, FLEET, ROTATIONS, ShipKind, ShipShape, shape_for

logger = logging.getLogger(__name__)
tracer = get_tracer("seabattle.engine.placement")
meter = get_meter("seabattle.engine.placement")

PLACEMENT_COUNTER = meter.create_counter(
    "seabattle_engine_ship_placements",
    unit="1",
    description="Anchor attempts made while packing a fleet",
)

REGENERATION_COUNTER = meter.create_counter(
    "seabattle_engine_board_regenerations",
    unit="1",
    description="Boards discarded because the fleet did not fit",
)

MIN_SWAPS_PER_CELL = 10
DEFAULT_SWAPS_PER_CELL = MIN_SWAPS_PER_CELL
DEFAULT_MAX_ATTEMPTS = 100


class PlacementError(RuntimeError):
    """The fleet could not be packed with the remaining candidate anchors."""


class CandidateSequence:
    """Shuffled anchor positions with a cursor and consumed slots.

    The sequence starts as the identity permutation of every cell index and is
    mixed with ``BOARD_SIZE * swaps_per_cell`` swaps of two distinct slots. Fewer than
    ``MIN_SWAPS_PER_CELL`` swaps per cell leave too many anchors in place.
    """

    def __init__(self, rng: random.Random, swaps_per_cell: int = DEFAULT_SWAPS_PER_CELL) -> None:
        if swaps_per_cell < MIN_SWAPS_PER_CELL:
            raise ValueError(f"swaps_per_cell must be at least {MIN_SWAPS_PER_CELL}, got {swaps_per_cell}")
        positions = list(range(BOARD_SIZE))
        for _ in range(BOARD_SIZE * swaps_per_cell):
            first = rng.randrange(BOARD_SIZE)
            second = rng.randrange(BOARD_SIZE - 1)
            if second >= first:
                second += 1
            positions[first], positions[second] = positions[second], positions[first]
        self._positions = positions
        self._consumed = [False] * BOARD_SIZE
        self._remaining = BOARD_SIZE
        self.cursor = 0

    def __len__(self) -> int:
        return self._remaining

    @property
    def order(self) -> tuple[int, ...]:
        return tuple(self._positions)

    def current(self) -> int:
        """Return the anchor under the cursor, skipping consumed slots."""
        if not self._remaining:
            raise PlacementError("Every candidate anchor has been consumed.")
        while self._consumed[self.cursor]:
            self.cursor = (self.cursor + 1) % BOARD_SIZE
        return self._positions[self.cursor]

    def advance(self) -> None:
        self.cursor = (self.cursor + 1) % BOARD_SIZE

    def consume(self) -> None:
        """Invalidate the slot under the cursor."""
        self.current()
        self._consumed[self.cursor] = True
        self._remaining -= 1


def can_place(grid: Grid, shape: ShipShape, left: int, top: int) -> bool:
    """Check whether ``shape`` fits with its top-left corner at ``(left, top)``.

    Every set bit must land on an in-bounds EMPTY cell with no SHIP in its
    8-neighbourhood. Bounds are checked before any grid access.
    """
    height, width = grid.shape
    cells = [(top + row, left + col) for row, col in shape.cells]
    if not all(0 <= row < height and 0 <= col < width for row, col in cells):
        return False

    for row, col in cells:
        if grid[row, col] != CellState.EMPTY:
            return False
        neighbourhood = grid[max(row - 1, 0) : row + 2, max(col - 1, 0) : col + 2]
        if (neighbourhood == CellState.SHIP).any():
            return False
    return True


def place_at(grid: Grid, kind: ShipKind, rotation: int, left: int, top: int) -> PlacedShip | None:
    """Place ``kind`` at an explicit anchor, or return ``None`` if it does not fit."""
    shape = shape_for(kind, rotation)
    if not can_place(grid, shape, left, top):
        return None
    for row, col in shape.cells:
        grid[top + row, left + col] = CellState.SHIP
    return PlacedShip(kind=kind, rotation=rotation, left=left, top=top)


def place_one_random(
    grid: Grid, kind: ShipKind, candidates: CandidateSequence, rng: random.Random
) -> PlacedShip | None:
    """Try one random rotation of ``kind`` at the next candidate anchor.

    A failed attempt moves the cursor on by one and returns ``None``; a
    successful one consumes the anchor.
    """
    rotation = rng.choice(ROTATIONS)
    top, left = divmod(candidates.current(), grid.shape[1])
    placed = place_at(grid, kind, rotation, left, top)
    if placed is None:
        candidates.advance()
        return None
    candidates.consume()
    return placed


def populate(
    grid: Grid,
    rng: random.Random,
    candidates: CandidateSequence | None = None,
    swaps_per_cell: int = DEFAULT_SWAPS_PER_CELL,
) -> list[PlacedShip]:
    """Pack the whole fleet onto ``grid``, largest kinds first.

    Raises :class:`PlacementError` when an instance fails at every one of the
    ``BOARD_SIZE`` positions the cursor can visit; ``grid`` is then left
    partially filled and must be discarded.
    """
    if candidates is None:
        candidates = CandidateSequence(rng, swaps_per_cell)

    with tracer.start_as_current_span("placement.populate") as span:
        placements: list[PlacedShip] = []
        attempts_total = 0
        for kind in FLEET:
            for instance in range(kind.count):
                for attempt in range(1, BOARD_SIZE + 1):
                    placed = place_one_random(grid, kind, candidates, rng)
                    PLACEMENT_COUNTER.add(
                        1, attributes={"kind": kind.label, "result": "placed" if placed else "rejected"}
                    )
                    if placed is not None:
                        placements.append(placed)
                        attempts_total += attempt
                        logger.debug(
                            "ship_placed",
                            extra={
                                "kind": kind.label,
                                "instance": instance,
                                "rotation": placed.rotation,
                                "left": placed.left,
                                "top": placed.top,
                                "attempts": attempt,
                            },
                        )
                        break
                else:
                    span.set_attribute("placement.failed_kind", kind.label)
                    raise PlacementError(
                        f"No room for {kind.label} instance {instance + 1} of {kind.count}."
                    )
        span.set_attribute("placement.ships", len(placements))
        span.set_attribute("placement.attempts", attempts_total)
        return placements


def generate_board(
    rng: random.Random,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    swaps_per_cell: int = DEFAULT_SWAPS_PER_CELL,
    owner: str = "unknown",
) -> Board:
    """Return a freshly populated board, regenerating from scratch on failure."""
    with tracer.start_as_current_span("placement.generate_board") as span:
        span.set_attribute("board.owner", owner)
        for attempt in range(1, max_attempts + 1):
            grid = empty_grid()
            try:
                placements = populate(grid, rng, swaps_per_cell=swaps_per_cell)
            except PlacementError as exc:
                REGENERATION_COUNTER.add(1, attributes={"owner": owner})
                logger.info(
                    "board_regenerated",
                    extra={"owner": owner, "attempt": attempt, "reason": str(exc)},
                )
                continue
            span.set_attribute("board.attempts", attempt)
            logger.debug("board_generated", extra={"owner": owner, "attempts": attempt})
            return Board.from_grid(grid, placements, owner=owner)

    logger.error("board_generation_failed", extra={"owner": owner, "attempts": max_attempts})
    raise PlacementError(f"Fleet did not fit after {max_attempts} fresh boards.")
