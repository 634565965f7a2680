"""Single-player Battleship: random fleet packing and turn resolution."""

__version__ = "0.1.0"
