"""Runtime primitives backing the duel HTTP API."""

from __future__ import annotations

import asyncio
import logging

from ninjaduel.config import Settings, get_settings
from ninjaduel.domain.models import MatchResult, MatchSnapshot, MoveOutcome, RoundResult
from ninjaduel.factory import (
    create_battle_engine,
    create_equipment_service,
    create_ranking_service,
)
from ninjaduel.interfaces.battle import IBattleEngine
from ninjaduel.interfaces.ledger import ILedgerClient
from ninjaduel.repository.memory_ledger import InMemoryLedger
from ninjaduel.services.ranking_service import RankingService

logger = logging.getLogger(__name__)


def outcome_to_dict(outcome: MoveOutcome) -> dict[str, object]:
    """Return a JSON-friendly representation of a move outcome."""

    payload: dict[str, object] = {
        "match_id": outcome.match_id,
        "status": str(outcome.status),
        "message": outcome.message,
    }
    if isinstance(outcome, RoundResult):
        payload.update(
            {
                "round": outcome.round,
                "wins1": outcome.wins1,
                "wins2": outcome.wins2,
                "round_winner": outcome.round_winner,
                "move1": str(outcome.move1),
                "move2": str(outcome.move2),
                "power1": outcome.power1,
                "power2": outcome.power2,
            }
        )
    elif isinstance(outcome, MatchResult):
        payload.update(
            {
                "round": outcome.rounds_played,
                "wins1": outcome.wins1,
                "wins2": outcome.wins2,
                "winner": outcome.winner,
                "recording_error": (
                    str(outcome.recording_error) if outcome.recording_error is not None else None
                ),
            }
        )
    else:
        payload["player"] = outcome.player
    return payload


def snapshot_to_dict(snapshot: MatchSnapshot) -> dict[str, object]:
    return {
        "match_id": snapshot.match_id,
        "player1": snapshot.player1,
        "player2": snapshot.player2,
        "equipment1": snapshot.equipment1,
        "equipment2": snapshot.equipment2,
        "round": snapshot.round,
        "max_rounds": snapshot.max_rounds,
        "wins1": snapshot.wins1,
        "wins2": snapshot.wins2,
        "player1_moved": snapshot.player1_moved,
        "player2_moved": snapshot.player2_moved,
    }


class SeasonManager:
    """Background scheduler that rolls ranking seasons over when they elapse."""

    MIN_INTERVAL_SECONDS = 0.1

    def __init__(self, ranking: RankingService, *, interval_seconds: float) -> None:
        self._ranking = ranking
        self._interval = max(interval_seconds, self.MIN_INTERVAL_SECONDS)
        self._task: asyncio.Task[None] | None = None
        self._stop_event = asyncio.Event()
        self._check_lock = asyncio.Lock()

    @property
    def interval_seconds(self) -> float:
        return self._interval

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._stop_event = asyncio.Event()
        loop = asyncio.get_running_loop()
        self._task = loop.create_task(self._run_loop(), name="ninjaduel-season-loop")

    async def stop(self) -> None:
        task = self._task
        if task is None:
            return
        self._stop_event.set()
        await task
        self._task = None

    async def check_now(self) -> bool:
        """Run one season check immediately; return whether a season ended."""

        async with self._check_lock:
            return await self._ranking.check_season_end()

    async def _run_loop(self) -> None:
        try:
            while not self._stop_event.is_set():
                try:
                    await asyncio.wait_for(self._stop_event.wait(), timeout=self._interval)
                    break
                except TimeoutError:
                    pass
                try:
                    await self.check_now()
                except Exception:
                    logger.exception("season check failed; retrying next cycle")
        finally:
            self._task = None


class ApiState:
    """Aggregated services shared by the FastAPI layer."""

    def __init__(
        self, *, settings: Settings | None = None, ledger: ILedgerClient | None = None
    ) -> None:
        self.settings = settings or get_settings()
        self.ledger = ledger if ledger is not None else InMemoryLedger()
        self.ranking = create_ranking_service(self.ledger, self.settings)
        self.equipment = create_equipment_service(self.ledger)
        self.battles: IBattleEngine = create_battle_engine(
            self.ledger, self.settings, ranking=self.ranking
        )
        self.seasons = SeasonManager(
            self.ranking, interval_seconds=self.settings.season_check_interval_seconds
        )

    def start(self) -> None:
        self.seasons.start()

    async def shutdown(self) -> None:
        await self.seasons.stop()


def build_state() -> ApiState:
    """Factory used by the API to initialize state."""

    return ApiState()
