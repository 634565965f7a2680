"""Rendering collaborators for the game controller."""

from .terminal import TerminalView, format_coordinate, parse_coordinate
from .view import BoardId, GameView, VisualState

__all__ = [
    "BoardId",
    "GameView",
    "TerminalView",
    "VisualState",
    "format_coordinate",
    "parse_coordinate",
]
