"""Plain-text rendering of both boards for terminal play."""

from __future__ import annotations

import sys
from typing import TextIO

from seabattle.engine.shapes import BOARD_HEIGHT, BOARD_SIZE, BOARD_WIDTH, to_index

from .view import BoardId, VisualState

ROW_LABELS = "ABCDEFGHIJ"

SYMBOLS = {
    VisualState.HIDDEN: ".",
    VisualState.SHIP: "S",
    VisualState.HIT: "X",
    VisualState.MISS: "o",
}


def parse_coordinate(text: str) -> int:
    """Turn ``A5`` or ``"0 4"`` style input into a linear cell index."""
    cleaned = text.strip().upper()
    if not cleaned:
        raise ValueError("Empty coordinate.")
    if cleaned[0].isalpha():
        if cleaned[0] not in ROW_LABELS[:BOARD_HEIGHT]:
            raise ValueError(f"Row must be between A and {ROW_LABELS[BOARD_HEIGHT - 1]}.")
        row = ROW_LABELS.index(cleaned[0])
        try:
            col = int(cleaned[1:]) - 1
        except ValueError as exc:
            raise ValueError(f"Column must be a number between 1 and {BOARD_WIDTH}.") from exc
    else:
        parts = cleaned.split()
        if len(parts) != 2:
            raise ValueError("Use formats like A5 or '3 7'.")
        try:
            row, col = map(int, parts)
        except ValueError as exc:
            raise ValueError("Row and column must be numbers.") from exc
    if row not in range(BOARD_HEIGHT) or col not in range(BOARD_WIDTH):
        raise ValueError(f"Coordinates must be within the {BOARD_WIDTH}x{BOARD_HEIGHT} board.")
    return to_index(row, col)


def format_coordinate(index: int) -> str:
    row, col = divmod(index, BOARD_WIDTH)
    return f"{ROW_LABELS[row]}{col + 1}"


class TerminalView:
    """Keeps the last visual state of every cell and prints it on demand."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self.stream = stream or sys.stdout
        self.cells: dict[BoardId, list[VisualState]] = {
            board_id: [VisualState.HIDDEN] * BOARD_SIZE for board_id in BoardId
        }
        self.enabled: dict[BoardId, bool] = {board_id: False for board_id in BoardId}
        self.status = ""

    def render_cell(self, board_id: BoardId, index: int, state: VisualState) -> None:
        self.cells[board_id][index] = state

    def render_status(self, message: str) -> None:
        self.status = message
        print(message, file=self.stream)

    def set_input_enabled(self, board_id: BoardId, enabled: bool) -> None:
        self.enabled[board_id] = enabled

    def format_board(self, board_id: BoardId) -> str:
        header = "    " + " ".join(f"{col + 1:>2}" for col in range(BOARD_WIDTH))
        rows = [header]
        cells = self.cells[board_id]
        for row in range(BOARD_HEIGHT):
            symbols = [f"{SYMBOLS[cells[to_index(row, col)]]:>2}" for col in range(BOARD_WIDTH)]
            rows.append(f"{ROW_LABELS[row]} |" + " ".join(symbols))
        return "\n".join(rows)

    def show(self) -> None:
        print("\nYour Board:", file=self.stream)
        print(self.format_board(BoardId.PLAYER), file=self.stream)
        print("\nEnemy Waters:", file=self.stream)
        print(self.format_board(BoardId.OPPONENT), file=self.stream)
