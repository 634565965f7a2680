"""Ship shape catalogue: authored masks for every kind and rotation."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

import numpy as np
import numpy.typing as npt

BOARD_WIDTH = 10
BOARD_HEIGHT = 10
BOARD_SIZE = BOARD_WIDTH * BOARD_HEIGHT

ROT_0 = 0
ROT_90 = 1
ROT_180 = 2
ROT_270 = 3
ROTATIONS = (ROT_0, ROT_90, ROT_180, ROT_270)


@dataclass(frozen=True)
class ShipShape:
    """Immutable bounding box plus row-major occupancy mask."""

    width: int
    height: int
    mask: tuple[int, ...]
    cells: tuple[tuple[int, int], ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if len(self.mask) != self.width * self.height:
            raise ValueError(
                f"Mask of length {len(self.mask)} does not fit a {self.width}x{self.height} box."
            )
        cells = tuple(
            divmod(offset, self.width) for offset, bit in enumerate(self.mask) if bit
        )
        object.__setattr__(self, "cells", cells)

    @property
    def occupied(self) -> int:
        """Number of set bits in the mask."""
        return len(self.cells)

    def as_array(self) -> npt.NDArray[np.bool_]:
        """Return the mask as a ``(height, width)`` boolean array."""
        return np.array(self.mask, dtype=bool).reshape(self.height, self.width)


def _shape(width: int, height: int, *mask: int) -> ShipShape:
    return ShipShape(width, height, tuple(mask))


class ShipKind(Enum):
    """Ship classes of the fixed fleet, ordered largest first.

    Each member carries its nominal ``size``, the number of instances in a
    fleet and its four authored rotations. Rotations are authored
    literally rather than computed, and are never mutated.
    """

    SHIP_4 = (
        "ship_4",
        4,
        1,
        (
            _shape(4, 1, 1, 1, 1, 1),
            _shape(1, 4, 1, 1, 1, 1),
            _shape(4, 1, 1, 1, 1, 1),
            _shape(1, 4, 1, 1, 1, 1),
        ),
    )
    SHIP_3 = (
        "ship_3",
        12,
        2,
        (
            _shape(4, 3, 0, 1, 0, 1, 1, 1, 1, 1, 0, 1, 0, 0),
            _shape(3, 4, 0, 1, 0, 1, 1, 1, 0, 1, 0, 0, 1, 1),
            _shape(4, 3, 0, 0, 1, 0, 1, 1, 1, 1, 1, 0, 1, 0),
            _shape(3, 4, 1, 1, 0, 0, 1, 0, 1, 1, 1, 0, 1, 0),
        ),
    )
    SHIP_2 = (
        "ship_2",
        2,
        2,
        (
            _shape(2, 1, 1, 1),
            _shape(1, 2, 1, 1),
            _shape(2, 1, 1, 1),
            _shape(1, 2, 1, 1),
        ),
    )
    SHIP_1 = (
        "ship_1",
        1,
        3,
        (
            _shape(1, 1, 1),
            _shape(1, 1, 1),
            _shape(1, 1, 1),
            _shape(1, 1, 1),
        ),
    )

    def __init__(
        self, label: str, size: int, count: int, rotations: tuple[ShipShape, ...]
    ) -> None:
        self.label = label
        self.size = size
        self.count = count
        self.rotations = rotations

    @property
    def occupied(self) -> int:
        """Cells a single instance covers (identical for every rotation)."""
        return self.rotations[ROT_0].occupied


# Placement order; largest footprint first.
FLEET: tuple[ShipKind, ...] = (
    ShipKind.SHIP_4,
    ShipKind.SHIP_3,
    ShipKind.SHIP_2,
    ShipKind.SHIP_1,
)

FLEET_CELL_TOTAL = sum(kind.occupied * kind.count for kind in FLEET)


def rotations(kind: ShipKind) -> tuple[ShipShape, ShipShape, ShipShape, ShipShape]:
    """Return the four authored orientations of ``kind`` (0°, 90°, 180°, 270°)."""
    rot0, rot90, rot180, rot270 = kind.rotations
    return rot0, rot90, rot180, rot270


def shape_for(kind: ShipKind, rotation: int) -> ShipShape:
    if rotation not in ROTATIONS:
        raise ValueError(f"Unknown rotation index {rotation}.")
    return kind.rotations[rotation]


def to_index(row: int, col: int) -> int:
    """Convert a row/column pair to a linear cell index."""
    return row * BOARD_WIDTH + col


def to_row_col(index: int) -> tuple[int, int]:
    """Convert a linear cell index to ``(row, col)``."""
    return divmod(index, BOARD_WIDTH)
