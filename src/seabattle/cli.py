"""Command-line driver for playing seabattle against the computer."""

from __future__ import annotations

import argparse
import asyncio
import logging
import random
from typing import Callable, Sequence

from seabattle.config import GameConfig
from seabattle.controller import GameController, MatchPhase
from seabattle.scheduling import AsyncioScheduler
from seabattle.telemetry import configure_logging, init_telemetry
from seabattle.ui.terminal import TerminalView, format_coordinate, parse_coordinate
from seabattle.ui.view import BoardId

logger = logging.getLogger(__name__)

PROMPT = "Enter target coordinate (e.g., A5), 'r' to restart or 'q' to quit: "
AGAIN_PROMPT = "Play again? [y/N]: "

InputFn = Callable[[str], str]


async def _read_line(prompt: str, input_fn: InputFn) -> str:
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, input_fn, prompt)


async def play_game(
    config: GameConfig,
    view: TerminalView | None = None,
    input_fn: InputFn = input,
    poll_interval: float = 0.05,
) -> MatchPhase:
    """Run matches until the player quits or declines to play again."""
    view = view or TerminalView()
    controller = GameController(
        view,
        AsyncioScheduler(asyncio.get_running_loop()),
        config=config,
        rng=random.Random(config.seed),
    )
    print("Welcome to Battleship!", file=view.stream)
    controller.new_match()
    controller.start()

    while True:
        while controller.phase is MatchPhase.IN_PROGRESS:
            if not controller.awaiting_player:
                await asyncio.sleep(poll_interval)
                continue

            view.show()
            raw = (await _read_line(PROMPT, input_fn)).strip()
            if raw.lower() == "q":
                print("Goodbye!", file=view.stream)
                controller.reset()
                return controller.phase
            if raw.lower() == "r":
                controller.reset()
                controller.start()
                continue
            try:
                index = parse_coordinate(raw)
            except ValueError as exc:
                print(f"Invalid input: {exc}", file=view.stream)
                continue
            if controller.opponent_board.is_shot(index):
                print(
                    f"{format_coordinate(index)} has already been targeted. Choose another.",
                    file=view.stream,
                )
                continue
            controller.on_cell_activated(BoardId.OPPONENT, index)

        view.show()
        answer = (await _read_line(AGAIN_PROMPT, input_fn)).strip().lower()
        if answer not in ("y", "yes"):
            print("Goodbye!", file=view.stream)
            return controller.phase
        controller.start()


def main(argv: Sequence[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Play Battleship against the computer.")
    parser.add_argument(
        "--seed", type=int, default=None, help="Optional RNG seed for reproducibility."
    )
    parser.add_argument(
        "--delay", type=float, default=None, help="Seconds before the computer replies."
    )
    parser.add_argument(
        "--log-level", default="WARNING", help="Logging level for engine diagnostics."
    )
    args = parser.parse_args(argv)

    configure_logging(args.log_level.upper())
    init_telemetry()

    overrides = {}
    if args.seed is not None:
        overrides["seed"] = args.seed
    if args.delay is not None:
        overrides["opponent_delay"] = args.delay
    config = GameConfig.from_env(**overrides)
    logger.debug("cli_config", extra={"config": config.model_dump()})

    try:
        asyncio.run(play_game(config))
    except (KeyboardInterrupt, EOFError):
        print("\nGoodbye!")


if __name__ == "__main__":
    main()
