"""Tests for the terminal rendering collaborator."""

import io

import pytest
from seabattle.ui.terminal import TerminalView, format_coordinate, parse_coordinate
from seabattle.ui.view import BoardId, VisualState


@pytest.mark.parametrize(
    ("text", "index"),
    [("A1", 0), ("a10", 9), ("C5", 24), ("J10", 99), ("3 7", 37), (" 0 0 ", 0)],
)
def test_parse_coordinate(text: str, index: int) -> None:
    assert parse_coordinate(text) == index


@pytest.mark.parametrize("text", ["", "K1", "A0", "A11", "Ax", "1 2 3", "10 0", "a b"])
def test_parse_coordinate_rejects_bad_input(text: str) -> None:
    with pytest.raises(ValueError):
        parse_coordinate(text)


def test_format_coordinate() -> None:
    assert format_coordinate(0) == "A1"
    assert format_coordinate(99) == "J10"


def test_view_tracks_cells_and_prints_status() -> None:
    stream = io.StringIO()
    view = TerminalView(stream)
    view.render_cell(BoardId.PLAYER, 0, VisualState.SHIP)
    view.render_cell(BoardId.OPPONENT, 11, VisualState.HIT)
    view.render_cell(BoardId.OPPONENT, 12, VisualState.MISS)
    view.set_input_enabled(BoardId.OPPONENT, True)
    view.render_status("Hit!")

    assert view.enabled[BoardId.OPPONENT]
    assert view.status == "Hit!"
    assert "Hit!" in stream.getvalue()

    own = view.format_board(BoardId.PLAYER).splitlines()
    assert own[1].startswith("A |")
    assert own[1].split("|")[1].split()[0] == "S"
    enemy = view.format_board(BoardId.OPPONENT).splitlines()
    assert enemy[2].split("|")[1].split()[:3] == [".", "X", "o"]

    view.show()
    assert "Enemy Waters:" in stream.getvalue()
