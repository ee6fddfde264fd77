"""Season ranking rules."""

from __future__ import annotations

from datetime import datetime, timedelta

from .rules_config import DEFAULT_RULES, RankingRules


def calculate_reward(rank: int, rules: RankingRules = DEFAULT_RULES.ranking) -> int:
    """Reward paid to the player finishing a season at ``rank`` (1-based)."""

    if rank < 1:
        raise ValueError(f"rank must be positive, got {rank}")
    if rank == 1:
        return rules.first_place_reward
    if rank <= 10:
        return rules.top_ten_reward
    if rank <= 50:
        return rules.top_fifty_reward
    return rules.participation_reward


def season_has_ended(
    season_start: datetime,
    now: datetime,
    rules: RankingRules = DEFAULT_RULES.ranking,
) -> bool:
    return now - season_start >= timedelta(days=rules.season_duration_days)
