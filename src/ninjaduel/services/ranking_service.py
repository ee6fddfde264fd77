"""Ranking Service for ninja duels.

Tracks the current season, forwards ranking points to the ledger, and rolls
seasons over once their duration has elapsed, paying tiered rewards to the
top of the leaderboard.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime, timedelta

from ninjaduel.domain.errors import LedgerError
from ninjaduel.domain.models import LeaderboardEntry, PlayerID
from ninjaduel.domain.ranking import calculate_reward, season_has_ended
from ninjaduel.domain.rules_config import DEFAULT_RULES, RankingRules
from ninjaduel.interfaces.ledger import ILedgerClient

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(UTC)


class RankingService:
    """Service for season rankings and rewards."""

    def __init__(
        self,
        ledger: ILedgerClient,
        *,
        rules: RankingRules = DEFAULT_RULES.ranking,
        clock: Callable[[], datetime] = _utc_now,
        season: int = 1,
    ) -> None:
        self.ledger = ledger
        self.rules = rules
        self._clock = clock
        self.current_season = season
        self.season_start = clock()

    async def update_ranking(self, player: str, points: int) -> None:
        """Add ``points`` to the player's score for the current season."""
        await self.ledger.call("updatePlayerRanking", [player, points, self.current_season])

    async def get_leaderboard(self, top_n: int = 10) -> list[LeaderboardEntry]:
        """Return the top ``top_n`` players of the current season."""
        if top_n <= 0:
            raise ValueError(f"top_n must be positive, got {top_n}")
        result = await self.ledger.call("getLeaderboard", [self.current_season, top_n])
        try:
            rows = result["leaderboard"]
            return [
                LeaderboardEntry(
                    address=PlayerID(str(row["address"])),
                    points=int(row["points"]),
                    rank=position,
                )
                for position, row in enumerate(rows, start=1)
            ]
        except (KeyError, TypeError, ValueError) as exc:
            raise LedgerError(f"Malformed leaderboard response: {result!r}") from exc

    async def check_season_end(self) -> bool:
        """End the season if its duration has elapsed; return whether it did."""
        if season_has_ended(self.season_start, self._clock(), self.rules):
            await self.end_season()
            return True
        return False

    async def end_season(self) -> None:
        """Close the current season, pay rewards and open the next one."""
        finished = self.current_season
        await self.ledger.call("endSeason", [finished])
        await self.distribute_season_rewards()
        self.current_season += 1
        self.season_start = self._clock()
        await self.ledger.call("startNewSeason", [self.current_season])
        logger.info("season %d ended; season %d started", finished, self.current_season)

    async def distribute_season_rewards(self) -> None:
        top_players = await self.get_leaderboard(self.rules.reward_pool_size)
        for entry in top_players:
            reward = calculate_reward(entry.rank, self.rules)
            await self.ledger.call(
                "distributeSeasonReward", [entry.address, reward, self.current_season]
            )
        logger.info(
            "distributed season %d rewards to %d players", self.current_season, len(top_players)
        )

    def season_info(self) -> dict[str, object]:
        """Return a JSON-friendly description of the current season."""
        ends_at = self.season_start + timedelta(days=self.rules.season_duration_days)
        return {
            "season": self.current_season,
            "started_at": self.season_start.isoformat(),
            "ends_at": ends_at.isoformat(),
            "duration_days": self.rules.season_duration_days,
        }
