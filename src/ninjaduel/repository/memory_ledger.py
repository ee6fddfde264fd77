"""In-memory ledger used for development and tests.

Implements every ledger function the services call, keeping weapons,
season scores, balances and recorded results in plain dicts. Nothing is
persisted.
"""

from __future__ import annotations

import asyncio
import itertools
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any

from ninjaduel.domain.errors import LedgerError

RARITY_TIERS = ("common", "rare", "epic", "legendary")
RARITY_BASE_POWER = {"common": 10, "rare": 25, "epic": 50, "legendary": 100}


@dataclass(slots=True)
class LedgerWeapon:
    """Weapon record as the ledger stores it."""

    id: str
    owner: str
    name: str
    weapon_type: str
    rarity: str
    level: int = 1

    @property
    def power(self) -> int:
        return RARITY_BASE_POWER[self.rarity] * self.level

    def to_record(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "owner": self.owner,
            "name": self.name,
            "weapon_type": self.weapon_type,
            "rarity": self.rarity,
            "level": self.level,
            "power": self.power,
        }


@dataclass(slots=True)
class BattleRecord:
    winner: str
    wins1: int
    wins2: int


@dataclass(slots=True)
class LedgerState:
    """Everything the in-memory ledger knows."""

    weapons: dict[str, LedgerWeapon] = field(default_factory=dict)
    scores: dict[int, dict[str, int]] = field(default_factory=lambda: defaultdict(dict))
    balances: dict[str, int] = field(default_factory=dict)
    results: list[BattleRecord] = field(default_factory=list)
    ended_seasons: list[int] = field(default_factory=list)
    active_season: int = 1


class InMemoryLedger:
    """Dict-backed implementation of ``ILedgerClient``."""

    def __init__(self) -> None:
        self.state = LedgerState()
        self._ids = itertools.count(1)
        self._lock = asyncio.Lock()
        self._functions = {
            "getWeaponPower": self._get_weapon_power,
            "recordBattleResult": self._record_battle_result,
            "getPlayerWeapons": self._get_player_weapons,
            "createWeapon": self._create_weapon,
            "upgradeWeapon": self._upgrade_weapon,
            "mergeWeapons": self._merge_weapons,
            "updatePlayerRanking": self._update_player_ranking,
            "getLeaderboard": self._get_leaderboard,
            "endSeason": self._end_season,
            "startNewSeason": self._start_new_season,
            "distributeSeasonReward": self._distribute_season_reward,
        }

    async def call(self, function: str, args: list[Any]) -> Any:
        handler = self._functions.get(function)
        if handler is None:
            raise LedgerError(f"Unknown ledger function '{function}'")
        async with self._lock:
            try:
                return handler(*args)
            except TypeError as exc:
                raise LedgerError(f"Bad arguments for '{function}': {args!r}") from exc

    # --- weapons -----------------------------------------------------------------

    def mint(self, owner: str, weapon_type: str, rarity: str) -> LedgerWeapon:
        """Create a weapon directly; also used to seed development data."""

        if rarity not in RARITY_BASE_POWER:
            raise LedgerError(f"Unknown rarity '{rarity}'")
        weapon = LedgerWeapon(
            id=f"weapon_{next(self._ids)}",
            owner=owner,
            name=f"{rarity.title()} {weapon_type.title()}",
            weapon_type=weapon_type,
            rarity=rarity,
        )
        self.state.weapons[weapon.id] = weapon
        return weapon

    def _owned(self, owner: str, weapon_id: str) -> LedgerWeapon:
        weapon = self.state.weapons.get(weapon_id)
        if weapon is None or weapon.owner != owner:
            raise LedgerError(f"Weapon '{weapon_id}' is not owned by '{owner}'")
        return weapon

    def _get_weapon_power(self, weapon_id: str) -> int:
        weapon = self.state.weapons.get(weapon_id)
        if weapon is None:
            raise LedgerError(f"Unknown weapon '{weapon_id}'")
        return weapon.power

    def _get_player_weapons(self, owner: str) -> list[dict[str, Any]]:
        return [w.to_record() for w in self.state.weapons.values() if w.owner == owner]

    def _create_weapon(self, owner: str, weapon_type: str, rarity: str) -> dict[str, Any]:
        return {"created": [self.mint(owner, weapon_type, rarity).to_record()]}

    def _upgrade_weapon(self, owner: str, weapon_id: str) -> dict[str, Any]:
        weapon = self._owned(owner, weapon_id)
        weapon.level += 1
        return {"modified": [weapon.to_record()]}

    def _merge_weapons(self, owner: str, weapon_id1: str, weapon_id2: str) -> dict[str, Any]:
        first = self._owned(owner, weapon_id1)
        second = self._owned(owner, weapon_id2)
        if first is second:
            raise LedgerError("Cannot merge a weapon with itself")
        best = max(RARITY_TIERS.index(first.rarity), RARITY_TIERS.index(second.rarity))
        rarity = RARITY_TIERS[min(best + 1, len(RARITY_TIERS) - 1)]
        del self.state.weapons[first.id]
        del self.state.weapons[second.id]
        merged = self.mint(owner, first.weapon_type, rarity)
        return {"created": [merged.to_record()], "deleted": [first.id, second.id]}

    # --- results and rankings ----------------------------------------------------

    def _record_battle_result(self, winner: str, wins1: int, wins2: int) -> dict[str, Any]:
        self.state.results.append(BattleRecord(winner, wins1, wins2))
        return {"recorded": True}

    def _update_player_ranking(self, player: str, points: int, season: int) -> dict[str, Any]:
        season_scores = self.state.scores[season]
        season_scores[player] = season_scores.get(player, 0) + points
        return {"points": season_scores[player]}

    def _get_leaderboard(self, season: int, top_n: int) -> dict[str, Any]:
        ordered = sorted(self.state.scores[season].items(), key=lambda item: (-item[1], item[0]))
        return {
            "leaderboard": [
                {"address": address, "points": points} for address, points in ordered[:top_n]
            ]
        }

    def _end_season(self, season: int) -> dict[str, Any]:
        if season != self.state.active_season:
            raise LedgerError(f"Season {season} is not active")
        self.state.ended_seasons.append(season)
        return {"ended": season}

    def _start_new_season(self, season: int) -> dict[str, Any]:
        self.state.active_season = season
        return {"started": season}

    def _distribute_season_reward(self, address: str, reward: int, season: int) -> dict[str, Any]:
        self.state.balances[address] = self.state.balances.get(address, 0) + reward
        return {"address": address, "reward": reward, "season": season}
