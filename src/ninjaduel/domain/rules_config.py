"""Declarative rule configuration for duels and seasons."""

from __future__ import annotations

from dataclasses import dataclass, field

from .enums import Move, TiePolicy


def _default_base_power() -> dict[Move, int]:
    return {Move.ROCK: 100, Move.PAPER: 100, Move.SCISSORS: 100}


@dataclass(frozen=True, slots=True)
class DuelRules:
    """Round and match constants."""

    max_rounds: int = 3
    base_power: dict[Move, int] = field(default_factory=_default_base_power)
    tie_policy: TiePolicy = TiePolicy.COIN_FLIP

    def __post_init__(self) -> None:
        if self.max_rounds <= 0:
            raise ValueError(f"max_rounds must be positive, got {self.max_rounds}")

    @property
    def wins_required(self) -> int:
        """Round wins that end a match early (a strict majority of max_rounds)."""

        return self.max_rounds // 2 + 1


@dataclass(frozen=True, slots=True)
class RankingRules:
    """Season length and reward tiers."""

    season_duration_days: int = 30
    reward_pool_size: int = 100
    first_place_reward: int = 10_000
    top_ten_reward: int = 5_000
    top_fifty_reward: int = 2_000
    participation_reward: int = 1_000


@dataclass(frozen=True, slots=True)
class RulesConfig:
    """Top-level configuration container for all subsystems."""

    duel: DuelRules = DuelRules()
    ranking: RankingRules = RankingRules()


DEFAULT_RULES = RulesConfig()
