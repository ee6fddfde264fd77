"""Lightweight configuration for the duel service."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from ninjaduel.domain.enums import Move, TiePolicy
from ninjaduel.domain.rules_config import DuelRules, RankingRules, RulesConfig


class Settings(BaseSettings):
    """Minimal application settings."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", env_prefix="NINJADUEL_"
    )

    max_rounds: int = Field(default=3, description="Round ceiling of a match", gt=0)
    base_power: int = Field(default=100, description="Power every move starts with", ge=0)
    tie_policy: TiePolicy = Field(
        default=TiePolicy.COIN_FLIP,
        description="How dead-even rounds and tied matches are settled",
    )
    oracle_timeout_seconds: float = Field(
        default=5.0, description="Upper bound on a single power lookup", gt=0.0
    )
    recorder_timeout_seconds: float = Field(
        default=10.0, description="Upper bound on recording a finished match", gt=0.0
    )
    season_duration_days: int = Field(default=30, description="Length of a ranking season", gt=0)
    season_check_interval_seconds: float = Field(
        default=3600.0,
        description="Real-time seconds between checks for an elapsed season",
        gt=0.0,
    )
    points_per_win: int = Field(
        default=10, description="Ranking points credited to a match winner", ge=0
    )
    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:5173", "http://127.0.0.1:5173"],
        description="Origins allowed to call the HTTP API",
    )

    def rules(self) -> RulesConfig:
        """Build the rule configuration these settings describe."""

        return RulesConfig(
            duel=DuelRules(
                max_rounds=self.max_rounds,
                base_power={move: self.base_power for move in Move},
                tie_policy=self.tie_policy,
            ),
            ranking=RankingRules(season_duration_days=self.season_duration_days),
        )


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance."""

    return Settings()
