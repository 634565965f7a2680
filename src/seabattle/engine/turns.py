"""Turn-resolution state machine for a player-versus-computer match."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from enum import Enum

from seabattle.telemetry import get_meter, get_tracer

from .board import Board, CellState
from .shapes import BOARD_SIZE

logger = logging.getLogger(__name__)
tracer = get_tracer("seabattle.engine.turns")
meter = get_meter("seabattle.engine.turns")

TURN_COUNTER = meter.create_counter(
    "seabattle_engine_turns",
    unit="1",
    description="Shots resolved by the turn engine",
)


class Side(Enum):
    """The two participants of a match."""

    PLAYER = "player"
    OPPONENT = "opponent"

    def other(self) -> Side:
        return Side.OPPONENT if self is Side.PLAYER else Side.PLAYER


class TurnState(Enum):
    WAITING_FOR_PLAYER = "waiting_for_player"
    WAITING_FOR_OPPONENT = "waiting_for_opponent"
    GAME_OVER = "game_over"


@dataclass(frozen=True)
class ShotResult:
    """Outcome of one resolved shot."""

    shooter: Side
    index: int
    outcome: CellState
    state: TurnState
    winner: Side | None = None

    @property
    def hit(self) -> bool:
        return self.outcome is CellState.HIT


@dataclass
class SideStats:
    shots: int = 0
    hits: int = 0

    @property
    def accuracy(self) -> float:
        return self.hits / self.shots if self.shots else 0.0


@dataclass
class ShotLog:
    """Indices the automated opponent has already fired at."""

    indices: set[int] = field(default_factory=set)

    def __contains__(self, index: object) -> bool:
        return index in self.indices

    def __len__(self) -> int:
        return len(self.indices)

    def add(self, index: int) -> None:
        self.indices.add(index)

    def clear(self) -> None:
        self.indices.clear()

    def untried(self) -> list[int]:
        return [index for index in range(BOARD_SIZE) if index not in self.indices]


class TurnEngine:
    """Resolves alternating shots and decides the winner.

    Out-of-turn shots, shots after the game is over and repeated targets are
    ignored: the methods return ``None`` and nothing changes.
    """

    def __init__(
        self,
        player_board: Board,
        opponent_board: Board,
        rng: random.Random | None = None,
        shot_log: ShotLog | None = None,
    ) -> None:
        self.boards: dict[Side, Board] = {
            Side.PLAYER: player_board,
            Side.OPPONENT: opponent_board,
        }
        self.shot_log = shot_log if shot_log is not None else ShotLog()
        self.state = TurnState.WAITING_FOR_PLAYER
        self.winner: Side | None = None
        self.stats: dict[Side, SideStats] = {Side.PLAYER: SideStats(), Side.OPPONENT: SideStats()}
        self._rng = rng or random.Random()

    @property
    def is_over(self) -> bool:
        return self.state is TurnState.GAME_OVER

    def player_shot(self, index: int) -> ShotResult | None:
        """Fire at the opponent's board on the player's behalf."""
        if self.state is not TurnState.WAITING_FOR_PLAYER:
            logger.debug("player_shot_ignored", extra={"index": index, "state": self.state.value})
            return None
        target = self.boards[Side.OPPONENT]
        if not target.contains(index) or target.is_shot(index):
            logger.debug("player_shot_ignored", extra={"index": index, "state": self.state.value})
            return None
        return self._resolve(Side.PLAYER, index)

    def choose_opponent_target(self) -> int:
        """Draw uniformly among the indices the opponent has not tried yet."""
        untried = self.shot_log.untried()
        if not untried:
            raise RuntimeError("The opponent has already fired at every cell.")
        return self._rng.choice(untried)

    def opponent_shot(self) -> ShotResult | None:
        """Let the automated opponent fire at the player's board."""
        if self.state is not TurnState.WAITING_FOR_OPPONENT:
            logger.debug("opponent_shot_ignored", extra={"state": self.state.value})
            return None
        index = self.choose_opponent_target()
        self.shot_log.add(index)
        return self._resolve(Side.OPPONENT, index)

    def _resolve(self, shooter: Side, index: int) -> ShotResult:
        with tracer.start_as_current_span("turns.resolve_shot") as span:
            span.set_attribute("shot.shooter", shooter.value)
            span.set_attribute("shot.index", index)

            target = self.boards[shooter.other()]
            outcome = target.mark_shot(index)
            if outcome is None:  # pragma: no cover - callers filter repeats
                raise RuntimeError(f"Cell {index} was already shot.")

            stats = self.stats[shooter]
            stats.shots += 1
            if outcome is CellState.HIT:
                stats.hits += 1

            if target.is_defeated:
                self.state = TurnState.GAME_OVER
                self.winner = shooter
                span.set_attribute("game.winner", shooter.value)
            elif shooter is Side.PLAYER:
                self.state = TurnState.WAITING_FOR_OPPONENT
            else:
                self.state = TurnState.WAITING_FOR_PLAYER

            span.set_attribute("shot.outcome", outcome.name.lower())
            TURN_COUNTER.add(1, attributes={"shooter": shooter.value, "outcome": outcome.name.lower()})
            logger.info(
                "shot_resolved",
                extra={
                    "shooter": shooter.value,
                    "index": index,
                    "outcome": outcome.name,
                    "remaining": target.remaining_ship_cells,
                    "next_state": self.state.value,
                },
            )
            return ShotResult(
                shooter=shooter,
                index=index,
                outcome=outcome,
                state=self.state,
                winner=self.winner,
            )
