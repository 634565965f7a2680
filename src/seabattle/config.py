"""Gameplay settings loaded from the environment."""

from __future__ import annotations

import os
from functools import lru_cache
from typing import Any

from pydantic import BaseModel, Field

from seabattle.engine.placement import MIN_SWAPS_PER_CELL

_ENV_FIELDS = {
    "opponent_delay": "SEABATTLE_OPPONENT_DELAY",
    "max_placement_attempts": "SEABATTLE_MAX_PLACEMENT_ATTEMPTS",
    "shuffle_swaps_per_cell": "SEABATTLE_SHUFFLE_SWAPS_PER_CELL",
    "seed": "SEABATTLE_SEED",
}


class GameConfig(BaseModel):
    """Tunables for a match."""

    opponent_delay: float = Field(default=0.7, ge=0.0)
    max_placement_attempts: int = Field(default=100, ge=1)
    shuffle_swaps_per_cell: int = Field(default=MIN_SWAPS_PER_CELL, ge=MIN_SWAPS_PER_CELL)
    seed: int | None = None

    @classmethod
    def from_env(cls, **overrides: Any) -> GameConfig:
        """Construct config from ``SEABATTLE_*`` variables; pydantic coerces the strings."""
        data: dict[str, Any] = {}
        for name, env_name in _ENV_FIELDS.items():
            raw = os.getenv(env_name)
            if raw is not None and raw.strip():
                data[name] = raw.strip()
        data.update(overrides)
        return cls(**data)


@lru_cache(maxsize=1)
def load_game_config() -> GameConfig:
    return GameConfig.from_env()
