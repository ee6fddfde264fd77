"""Battle Engine for ninja duels.

The engine keeps a registry of independent match state machines. Each match
is mutated only while its own lock is held, so "record move, check both
sides, resolve" behaves as one atomic step per match while unrelated matches
proceed concurrently.
"""

from __future__ import annotations

import asyncio
import logging
import secrets
import uuid
from collections.abc import Callable
from dataclasses import replace

from ninjaduel.domain import duel
from ninjaduel.domain.enums import Move, Side
from ninjaduel.domain.errors import (
    InvalidMoveError,
    InvalidPlayerError,
    NotFoundError,
    OracleError,
    RecordingError,
    RoundNotReadyError,
)
from ninjaduel.domain.models import (
    EquipmentID,
    Match,
    MatchID,
    MatchResult,
    MatchSnapshot,
    MoveOutcome,
    PlayerID,
    RoundResult,
    WaitingResult,
)
from ninjaduel.domain.rules_config import DEFAULT_RULES, DuelRules
from ninjaduel.interfaces.oracle import IPowerOracle
from ninjaduel.interfaces.recorder import IResultRecorder
from ninjaduel.interfaces.store import IMatchStore
from ninjaduel.repository.match_store import InMemoryMatchStore, MatchEntry

logger = logging.getLogger(__name__)

MATCH_ID_PREFIX = "match_"
MAX_ID_ATTEMPTS = 8


def new_match_id() -> str:
    """Return a collision-resistant match identifier."""

    return f"{MATCH_ID_PREFIX}{uuid.uuid4().hex}"


def new_tie_salt() -> str:
    return secrets.token_hex(16)


class BattleEngine:
    """Registry of active matches and the transitions that drive them."""

    def __init__(
        self,
        oracle: IPowerOracle,
        recorder: IResultRecorder,
        *,
        store: IMatchStore | None = None,
        rules: DuelRules = DEFAULT_RULES.duel,
        oracle_timeout: float | None = None,
        recorder_timeout: float | None = None,
        id_factory: Callable[[], str] = new_match_id,
        salt_factory: Callable[[], str] = new_tie_salt,
    ) -> None:
        self._oracle = oracle
        self._recorder = recorder
        self._store = store if store is not None else InMemoryMatchStore()
        self._rules = rules
        self._oracle_timeout = oracle_timeout
        self._recorder_timeout = recorder_timeout
        self._id_factory = id_factory
        self._salt_factory = salt_factory

    @property
    def rules(self) -> DuelRules:
        return self._rules

    async def create(
        self, player1: str, player2: str, equipment1: str, equipment2: str
    ) -> MatchID:
        """Register a new match and return its identifier.

        Args:
            player1: First player identifier
            player2: Second player identifier (must differ from player1)
            equipment1: Equipment the first player fights with
            equipment2: Equipment the second player fights with

        Returns:
            Identifier of the new match

        Raises:
            InvalidPlayerError: If both seats name the same player
        """
        if player1 == player2:
            logger.warning("rejected self-match for player %s", player1)
            raise InvalidPlayerError(f"Player '{player1}' cannot duel themselves")

        for _ in range(MAX_ID_ATTEMPTS):
            match = Match(
                match_id=MatchID(self._id_factory()),
                player1=PlayerID(player1),
                player2=PlayerID(player2),
                equipment1=EquipmentID(equipment1),
                equipment2=EquipmentID(equipment2),
                max_rounds=self._rules.max_rounds,
                tie_salt=self._salt_factory(),
            )
            try:
                self._store.add(match)
            except ValueError:
                logger.warning("match id %s already in use; drawing another", match.match_id)
                continue
            logger.info(
                "match %s created: %s (%s) vs %s (%s)",
                match.match_id,
                player1,
                equipment1,
                player2,
                equipment2,
            )
            return match.match_id

        raise RuntimeError("Could not allocate a unique match identifier")

    async def submit_move(self, match_id: str, player: str, move: Move | str) -> MoveOutcome:
        """Record a player's move for the current round.

        A player may change their move until the opponent has moved; the new
        choice silently replaces the old one. Once both sides have moved the
        round is resolved before this call returns.

        Raises:
            NotFoundError: If the match is not active
            InvalidPlayerError: If ``player`` is not part of the match
            InvalidMoveError: If ``move`` is not rock, paper or scissors
            OracleError: If a power lookup failed; both moves stay pending
        """
        entry = self._entry(match_id)
        parsed = duel.parse_move(move)

        async with entry.lock:
            match = self._live_match(match_id, entry)
            side = match.side_of(player)
            if side is None:
                logger.warning("player %s is not part of match %s", player, match_id)
                raise InvalidPlayerError(f"Player '{player}' is not part of match '{match_id}'")
            if parsed is None:
                logger.warning("invalid move %r from %s in match %s", move, player, match_id)
                raise InvalidMoveError(move)

            match.set_pending(side, parsed)
            if not match.both_moved:
                return WaitingResult(match_id=match.match_id, player=match.player_for(side))

            result = await self._resolve_round(match)

        return await self._finish(result)

    async def retry_round(self, match_id: str) -> RoundResult | MatchResult:
        """Re-attempt a round whose previous resolution failed.

        Raises:
            NotFoundError: If the match is not active
            RoundNotReadyError: If either player has not moved this round
            OracleError: If the power lookup fails again
        """
        entry = self._entry(match_id)
        async with entry.lock:
            match = self._live_match(match_id, entry)
            if not match.both_moved:
                raise RoundNotReadyError(
                    f"Round {match.round + 1} of match '{match_id}' is still waiting for moves"
                )
            result = await self._resolve_round(match)

        return await self._finish(result)

    def get_match(self, match_id: str) -> MatchSnapshot:
        """Return a read-only view of an active match."""

        return MatchSnapshot.of(self._entry(match_id).match)

    def active_match_ids(self) -> list[MatchID]:
        return self._store.ids()

    def _entry(self, match_id: str) -> MatchEntry:
        entry = self._store.get(MatchID(match_id))
        if entry is None:
            raise NotFoundError(match_id)
        return entry

    def _live_match(self, match_id: str, entry: MatchEntry) -> Match:
        # The match may have ended while this caller waited for the lock.
        if self._store.get(MatchID(match_id)) is not entry:
            raise NotFoundError(match_id)
        return entry.match

    async def _resolve_round(self, match: Match) -> RoundResult | MatchResult:
        """Resolve the current round. Caller must hold the match lock."""

        move1 = match.pending1
        move2 = match.pending2
        if move1 is None or move2 is None:
            raise RoundNotReadyError(
                f"Round {match.round + 1} of match '{match.match_id}' is missing a move"
            )

        power1, power2 = await self._round_powers(match, move1, move2)

        winner = duel.decide_round(
            move1,
            move2,
            power1,
            power2,
            tie_policy=self._rules.tie_policy,
            tie_seed=duel.round_tie_seed(match),
        )
        match.record_round(winner)
        logger.info(
            "match %s round %d: %s (%s, %d) vs %s (%s, %d) -> %s",
            match.match_id,
            match.round,
            match.player1,
            move1,
            power1,
            match.player2,
            move2,
            power2,
            match.player_for(winner),
        )

        if duel.is_terminal(match, self._rules):
            return self._end_match(match)

        return RoundResult(
            match_id=match.match_id,
            round=match.round,
            wins1=match.wins1,
            wins2=match.wins2,
            round_winner=match.player_for(winner),
            move1=move1,
            move2=move2,
            power1=power1,
            power2=power2,
            message=f"Round {match.round} ended",
        )

    async def _round_powers(self, match: Match, move1: Move, move2: Move) -> tuple[int, int]:
        results = await asyncio.gather(
            self._side_power(match, Side.PLAYER1, move1),
            self._side_power(match, Side.PLAYER2, move2),
            return_exceptions=True,
        )
        for outcome in results:
            if isinstance(outcome, BaseException):
                logger.error(
                    "round %d of match %s left unresolved: %s",
                    match.round + 1,
                    match.match_id,
                    outcome,
                )
                raise outcome
        return results[0], results[1]

    async def _side_power(self, match: Match, side: Side, move: Move) -> int:
        equipment = match.equipment_for(side)
        try:
            bonus = await asyncio.wait_for(
                self._oracle.get_power(equipment), timeout=self._oracle_timeout
            )
        except TimeoutError as exc:
            raise OracleError(match.match_id, equipment, "timed out") from exc
        except Exception as exc:
            raise OracleError(match.match_id, equipment, str(exc) or type(exc).__name__) from exc

        if isinstance(bonus, bool) or not isinstance(bonus, int) or bonus < 0:
            raise OracleError(match.match_id, equipment, f"invalid power {bonus!r}")
        return duel.base_power(move, self._rules.base_power) + bonus

    def _end_match(self, match: Match) -> MatchResult:
        """Remove a terminal match and build its result. Caller holds the lock."""

        winner = match.player_for(duel.match_winner(match, self._rules.tie_policy))
        self._store.remove(match.match_id)
        logger.info(
            "match %s ended after %d rounds: winner %s (%d-%d)",
            match.match_id,
            match.round,
            winner,
            match.wins1,
            match.wins2,
        )
        return MatchResult(
            match_id=match.match_id,
            winner=winner,
            wins1=match.wins1,
            wins2=match.wins2,
            rounds_played=match.round,
            message=f"Battle ended! Winner: {winner}",
        )

    async def _finish(self, result: RoundResult | MatchResult) -> RoundResult | MatchResult:
        if isinstance(result, RoundResult):
            return result

        try:
            await asyncio.wait_for(
                self._recorder.record_result(result.winner, result.wins1, result.wins2),
                timeout=self._recorder_timeout,
            )
        except TimeoutError as exc:
            error = RecordingError(result.match_id, "timed out")
            error.__cause__ = exc
        except Exception as exc:
            logger.exception("recording result of match %s failed", result.match_id)
            error = RecordingError(result.match_id, str(exc) or type(exc).__name__)
            error.__cause__ = exc
        else:
            return result

        logger.error("match %s ended but its result was not recorded: %s", result.match_id, error)
        return replace(result, recording_error=error)
