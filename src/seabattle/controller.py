"""Match orchestration between the engine, a view and a scheduler."""

from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass
from enum import Enum

from seabattle.config import GameConfig, load_game_config
from seabattle.engine.board import Board, CellState
from seabattle.engine.placement import generate_board
from seabattle.engine.shapes import BOARD_SIZE
from seabattle.engine.turns import ShotResult, Side, TurnEngine, TurnState
from seabattle.scheduling import Cancellable, Scheduler
from seabattle.telemetry import get_tracer, observe_game_metric, record_game_metric
from seabattle.ui.view import BoardId, GameView, VisualState

logger = logging.getLogger(__name__)
tracer = get_tracer("seabattle.controller")

STATUS_READY = "Click 'Start Game' to begin"
STATUS_STARTED = "Game started! Your turn!"
STATUS_PLAYER_HIT = "Hit!"
STATUS_PLAYER_MISS = "Miss!"
STATUS_OPPONENT_HIT = "Computer hit your ship! - Your turn!"
STATUS_OPPONENT_MISS = "Computer missed! - Your turn!"
STATUS_WIN = "🎉 You win!"
STATUS_LOSE = "💥 You lose!"

_BOARD_FOR_SIDE = {Side.PLAYER: BoardId.PLAYER, Side.OPPONENT: BoardId.OPPONENT}
_VISUAL_FOR_OUTCOME = {CellState.HIT: VisualState.HIT, CellState.MISS: VisualState.MISS}


class MatchPhase(Enum):
    """High-level lifecycle of a match."""

    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    FINISHED = "finished"


@dataclass(frozen=True)
class GameState:
    """Immutable snapshot of the current match."""

    match_id: int
    phase: MatchPhase
    turn: TurnState | None
    winner: Side | None
    remaining: dict[Side, int]
    opponent_shots: int


class GameController:
    """Drives one match at a time for a single human player.

    The controller owns both boards and the turn engine, forwards outcomes to
    the view and defers the computer's reply through the scheduler. Each
    scheduled reply remembers the match it belongs to and does nothing if that
    match has since been reset or finished.
    """

    def __init__(
        self,
        view: GameView,
        scheduler: Scheduler,
        config: GameConfig | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.view = view
        self.scheduler = scheduler
        self.config = config or load_game_config()
        self._rng = rng or random.Random(self.config.seed)
        self.engine: TurnEngine | None = None
        self.phase = MatchPhase.NOT_STARTED
        self.match_id = 0
        self._started_once = False
        self._pending: Cancellable | None = None
        self._started_at: float | None = None

    @property
    def player_board(self) -> Board:
        return self._require_engine().boards[Side.PLAYER]

    @property
    def opponent_board(self) -> Board:
        return self._require_engine().boards[Side.OPPONENT]

    @property
    def awaiting_player(self) -> bool:
        return (
            self.phase is MatchPhase.IN_PROGRESS
            and self.engine is not None
            and self.engine.state is TurnState.WAITING_FOR_PLAYER
        )

    def new_match(self) -> None:
        """Deal two fresh fleets and show them, without starting play."""
        with tracer.start_as_current_span("controller.new_match") as span:
            self._cancel_pending()
            player_board = generate_board(
                self._rng,
                max_attempts=self.config.max_placement_attempts,
                swaps_per_cell=self.config.shuffle_swaps_per_cell,
                owner=Side.PLAYER.value,
            )
            opponent_board = generate_board(
                self._rng,
                max_attempts=self.config.max_placement_attempts,
                swaps_per_cell=self.config.shuffle_swaps_per_cell,
                owner=Side.OPPONENT.value,
            )
            self.engine = TurnEngine(player_board, opponent_board, rng=self._rng)
            self.match_id += 1
            self.phase = MatchPhase.NOT_STARTED
            self._started_once = False
            self._started_at = None
            span.set_attribute("match.id", self.match_id)

            self._render_boards()
            self.view.set_input_enabled(BoardId.OPPONENT, False)
            self.view.set_input_enabled(BoardId.PLAYER, False)
            self.view.render_status(STATUS_READY)
            logger.info("match_created", extra={"match_id": self.match_id})

    def start(self) -> None:
        """Begin play; a match that was already started is redealt first."""
        if self.engine is None or self._started_once:
            self.new_match()
        self.phase = MatchPhase.IN_PROGRESS
        self._started_once = True
        self._started_at = time.perf_counter()
        self.view.set_input_enabled(BoardId.OPPONENT, True)
        self.view.render_status(STATUS_STARTED)
        record_game_metric("seabattle_matches_started_total", 1)
        logger.info("match_started", extra={"match_id": self.match_id})

    def reset(self) -> None:
        """Abandon the current match and deal a new one that waits for ``start``."""
        logger.info("match_reset", extra={"match_id": self.match_id, "phase": self.phase.value})
        self.new_match()

    def on_cell_activated(self, board_id: BoardId, index: int) -> None:
        """Handle the user picking a cell; anything out of turn is ignored."""
        if self.phase is not MatchPhase.IN_PROGRESS or board_id is not BoardId.OPPONENT:
            logger.debug(
                "cell_activation_ignored",
                extra={"board": board_id.value, "index": index, "phase": self.phase.value},
            )
            return
        result = self._require_engine().player_shot(index)
        if result is None:
            return

        self._show(result)
        if result.state is TurnState.GAME_OVER:
            self._finish(result)
            return

        self.view.render_status(STATUS_PLAYER_HIT if result.hit else STATUS_PLAYER_MISS)
        self.view.set_input_enabled(BoardId.OPPONENT, False)
        self._pending = self.scheduler.call_later(
            self.config.opponent_delay, self._opponent_turn, self.match_id
        )

    def snapshot(self) -> GameState:
        engine = self.engine
        return GameState(
            match_id=self.match_id,
            phase=self.phase,
            turn=engine.state if engine else None,
            winner=engine.winner if engine else None,
            remaining={
                side: board.remaining_ship_cells for side, board in engine.boards.items()
            }
            if engine
            else {},
            opponent_shots=len(engine.shot_log) if engine else 0,
        )

    def _opponent_turn(self, match_id: int) -> None:
        if match_id != self.match_id:
            logger.debug("stale_opponent_reply", extra={"match_id": match_id, "current": self.match_id})
            return
        self._pending = None
        engine = self._require_engine()
        if self.phase is not MatchPhase.IN_PROGRESS or engine.state is not TurnState.WAITING_FOR_OPPONENT:
            logger.debug("opponent_reply_skipped", extra={"match_id": match_id, "phase": self.phase.value})
            return

        result = engine.opponent_shot()
        if result is None:  # pragma: no cover - state checked above
            return
        self._show(result)
        if result.state is TurnState.GAME_OVER:
            self._finish(result)
            return
        self.view.render_status(STATUS_OPPONENT_HIT if result.hit else STATUS_OPPONENT_MISS)
        self.view.set_input_enabled(BoardId.OPPONENT, True)

    def _show(self, result: ShotResult) -> None:
        target = _BOARD_FOR_SIDE[result.shooter.other()]
        self.view.render_cell(target, result.index, _VISUAL_FOR_OUTCOME[result.outcome])

    def _finish(self, result: ShotResult) -> None:
        engine = self._require_engine()
        winner = result.winner or result.shooter
        self.phase = MatchPhase.FINISHED
        self._cancel_pending()
        self.view.set_input_enabled(BoardId.OPPONENT, False)
        self.view.render_status(STATUS_WIN if winner is Side.PLAYER else STATUS_LOSE)

        duration = time.perf_counter() - self._started_at if self._started_at else 0.0
        player_stats = engine.stats[Side.PLAYER]
        with tracer.start_as_current_span("controller.match_complete") as span:
            span.set_attribute("match.id", self.match_id)
            span.set_attribute("match.winner", winner.value)
            span.set_attribute("match.player_shots", player_stats.shots)
            span.set_attribute("match.duration_ms", duration * 1000)
        record_game_metric("seabattle_matches_finished_total", 1, {"winner": winner.value})
        observe_game_metric("seabattle_match_player_shots", player_stats.shots, {"winner": winner.value})
        logger.info(
            "match_finished",
            extra={
                "match_id": self.match_id,
                "winner": winner.value,
                "player_shots": player_stats.shots,
                "player_accuracy": round(player_stats.accuracy, 3),
                "opponent_shots": engine.stats[Side.OPPONENT].shots,
                "duration_s": round(duration, 3),
            },
        )

    def _render_boards(self) -> None:
        engine = self._require_engine()
        own = engine.boards[Side.PLAYER]
        for index in range(BOARD_SIZE):
            visual = VisualState.SHIP if own.cell_state(index) is CellState.SHIP else VisualState.HIDDEN
            self.view.render_cell(BoardId.PLAYER, index, visual)
        for index in range(BOARD_SIZE):
            self.view.render_cell(BoardId.OPPONENT, index, VisualState.HIDDEN)

    def _cancel_pending(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def _require_engine(self) -> TurnEngine:
        if self.engine is None:
            raise RuntimeError("No match has been dealt yet.")
        return self.engine
