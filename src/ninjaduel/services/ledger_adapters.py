"""Adapters that satisfy the engine's collaborator protocols via the ledger."""

from __future__ import annotations

import logging

from ninjaduel.domain.errors import LedgerError
from ninjaduel.interfaces.ledger import ILedgerClient
from ninjaduel.interfaces.recorder import IResultRecorder
from ninjaduel.services.ranking_service import RankingService

logger = logging.getLogger(__name__)


class LedgerPowerOracle:
    """Power oracle backed by the ledger's ``getWeaponPower`` function."""

    def __init__(self, ledger: ILedgerClient) -> None:
        self._ledger = ledger

    async def get_power(self, equipment_id: str) -> int:
        raw = await self._ledger.call("getWeaponPower", [equipment_id])
        # fractional powers are rejected, never truncated
        if isinstance(raw, int) and not isinstance(raw, bool):
            return raw
        if isinstance(raw, str):
            try:
                return int(raw)
            except ValueError:
                pass
        raise LedgerError(f"Weapon power for '{equipment_id}' is not a whole number: {raw!r}")


class LedgerResultRecorder:
    """Result recorder backed by the ledger's ``recordBattleResult`` function."""

    def __init__(self, ledger: ILedgerClient) -> None:
        self._ledger = ledger

    async def record_result(self, winner: str, wins1: int, wins2: int) -> None:
        await self._ledger.call("recordBattleResult", [winner, wins1, wins2])


class RankedResultRecorder:
    """Record a result, then credit the winner with season ranking points."""

    def __init__(
        self, recorder: IResultRecorder, ranking: RankingService, *, points_per_win: int
    ) -> None:
        self._recorder = recorder
        self._ranking = ranking
        self._points_per_win = points_per_win

    async def record_result(self, winner: str, wins1: int, wins2: int) -> None:
        await self._recorder.record_result(winner, wins1, wins2)
        if self._points_per_win <= 0:
            return
        # the result is recorded by now; ranking trouble is logged, not raised
        try:
            await self._ranking.update_ranking(winner, self._points_per_win)
        except Exception:
            logger.exception("ranking update for %s failed after result was recorded", winner)
            return
        logger.debug("credited %s with %d ranking points", winner, self._points_per_win)
