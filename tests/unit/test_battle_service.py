"""Unit tests for the BattleEngine."""

from __future__ import annotations

import asyncio

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from ninjaduel.domain import duel
from ninjaduel.domain.enums import MatchStatus, Move, Side, TiePolicy
from ninjaduel.domain.errors import (
    InvalidMoveError,
    InvalidPlayerError,
    NotFoundError,
    OracleError,
    RecordingError,
    RoundNotReadyError,
)
from ninjaduel.domain.models import MatchResult, RoundResult, WaitingResult
from ninjaduel.domain.rules_config import DuelRules
from ninjaduel.repository.match_store import InMemoryMatchStore
from ninjaduel.services.battle_service import MATCH_ID_PREFIX, BattleEngine
from ninjaduel.utils.rng import generate_seed


class FakeOracle:
    """Power oracle returning fixed bonuses per equipment id."""

    def __init__(self, powers: dict[str, int] | None = None, *, delay: float = 0.0):
        self.powers = powers or {}
        self.delay = delay
        self.calls: list[str] = []
        self.fail_with: Exception | None = None
        self.fail_only: set[str] | None = None

    async def get_power(self, equipment_id: str) -> int:
        self.calls.append(equipment_id)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail_with is not None and (
            self.fail_only is None or equipment_id in self.fail_only
        ):
            raise self.fail_with
        return self.powers.get(equipment_id, 0)


class FakeRecorder:
    """Result recorder remembering every call."""

    def __init__(self):
        self.results: list[tuple[str, int, int]] = []
        self.fail_with: Exception | None = None
        self.delay = 0.0

    async def record_result(self, winner: str, wins1: int, wins2: int) -> None:
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail_with is not None:
            raise self.fail_with
        self.results.append((winner, wins1, wins2))


def _engine(
    oracle: FakeOracle | None = None,
    recorder: FakeRecorder | None = None,
    **kwargs,
) -> BattleEngine:
    return BattleEngine(oracle or FakeOracle(), recorder or FakeRecorder(), **kwargs)


async def _play_round(engine: BattleEngine, match_id: str, move1: str, move2: str):
    first = await engine.submit_move(match_id, "p1", move1)
    assert isinstance(first, WaitingResult)
    return await engine.submit_move(match_id, "p2", move2)


# --- create ---------------------------------------------------------------------


@pytest.mark.asyncio
async def test_create_registers_fresh_match():
    engine = _engine()

    match_id = await engine.create("p1", "p2", "w1", "w2")

    assert match_id.startswith(MATCH_ID_PREFIX)
    assert engine.active_match_ids() == [match_id]
    snapshot = engine.get_match(match_id)
    assert snapshot.round == 0
    assert snapshot.max_rounds == 3
    assert (snapshot.wins1, snapshot.wins2) == (0, 0)
    assert not snapshot.player1_moved
    assert not snapshot.player2_moved
    assert (snapshot.equipment1, snapshot.equipment2) == ("w1", "w2")


@pytest.mark.asyncio
async def test_create_generates_unique_ids():
    engine = _engine()

    ids = {await engine.create(f"a{i}", f"b{i}", "w1", "w2") for i in range(200)}

    assert len(ids) == 200


@pytest.mark.asyncio
async def test_create_rejects_self_match():
    engine = _engine()

    with pytest.raises(InvalidPlayerError, match="cannot duel themselves"):
        await engine.create("p1", "p1", "w1", "w2")
    assert engine.active_match_ids() == []


@pytest.mark.asyncio
async def test_create_redraws_colliding_identifier():
    draws = iter(["match_dup", "match_dup", "match_fresh"])
    engine = _engine(id_factory=lambda: next(draws))

    first = await engine.create("p1", "p2", "w1", "w2")
    second = await engine.create("p3", "p4", "w3", "w4")

    assert first == "match_dup"
    assert second == "match_fresh"


@pytest.mark.asyncio
async def test_create_gives_up_when_identifiers_keep_colliding():
    engine = _engine(id_factory=lambda: "match_same")
    await engine.create("p1", "p2", "w1", "w2")

    with pytest.raises(RuntimeError, match="unique match identifier"):
        await engine.create("p3", "p4", "w3", "w4")


# --- submit_move validation -----------------------------------------------------


@pytest.mark.asyncio
async def test_submit_move_unknown_match():
    engine = _engine()

    with pytest.raises(NotFoundError):
        await engine.submit_move("match_missing", "p1", "rock")


@pytest.mark.asyncio
async def test_submit_move_rejects_outsider():
    engine = _engine()
    match_id = await engine.create("p1", "p2", "w1", "w2")

    with pytest.raises(InvalidPlayerError):
        await engine.submit_move(match_id, "intruder", "rock")

    snapshot = engine.get_match(match_id)
    assert not snapshot.player1_moved
    assert not snapshot.player2_moved


@pytest.mark.asyncio
@pytest.mark.parametrize("move", ["lizard", "", "spock", None, 0])
async def test_submit_move_rejects_unknown_moves(move):
    engine = _engine()
    match_id = await engine.create("p1", "p2", "w1", "w2")

    with pytest.raises(InvalidMoveError):
        await engine.submit_move(match_id, "p1", move)

    assert not engine.get_match(match_id).player1_moved


@pytest.mark.asyncio
async def test_submit_move_accepts_enum_and_mixed_case():
    engine = _engine()
    match_id = await engine.create("p1", "p2", "w1", "w2")

    await engine.submit_move(match_id, "p1", " ROCK ")
    result = await engine.submit_move(match_id, "p2", Move.SCISSORS)

    assert isinstance(result, RoundResult)
    assert result.move1 is Move.ROCK
    assert result.round_winner == "p1"


@pytest.mark.asyncio
async def test_first_move_waits_for_opponent():
    oracle = FakeOracle()
    engine = _engine(oracle)
    match_id = await engine.create("p1", "p2", "w1", "w2")

    result = await engine.submit_move(match_id, "p2", "paper")

    assert result == WaitingResult(match_id=match_id, player="p2")
    assert result.status is MatchStatus.WAITING
    assert oracle.calls == []
    snapshot = engine.get_match(match_id)
    assert snapshot.player2_moved
    assert not snapshot.player1_moved
    assert snapshot.round == 0


@pytest.mark.asyncio
async def test_resubmission_replaces_previous_move():
    engine = _engine()
    match_id = await engine.create("p1", "p2", "w1", "w2")

    await engine.submit_move(match_id, "p1", "scissors")
    again = await engine.submit_move(match_id, "p1", "paper")
    assert isinstance(again, WaitingResult)
    assert engine.get_match(match_id).round == 0

    result = await engine.submit_move(match_id, "p2", "rock")

    assert isinstance(result, RoundResult)
    assert result.move1 is Move.PAPER
    assert result.round_winner == "p1"


# --- round resolution -----------------------------------------------------------


@pytest.mark.asyncio
async def test_two_round_sweep_ends_match_and_records_result():
    recorder = FakeRecorder()
    engine = _engine(FakeOracle({"w1": 0, "w2": 0}), recorder)
    match_id = await engine.create("p1", "p2", "w1", "w2")

    first = await _play_round(engine, match_id, "rock", "scissors")

    assert isinstance(first, RoundResult)
    assert first.status is MatchStatus.ONGOING
    assert (first.round, first.wins1, first.wins2) == (1, 1, 0)
    assert first.message == "Round 1 ended"
    assert (first.power1, first.power2) == (100, 100)
    assert recorder.results == []

    second = await _play_round(engine, match_id, "rock", "scissors")

    assert isinstance(second, MatchResult)
    assert second.status is MatchStatus.ENDED
    assert second.winner == "p1"
    assert (second.wins1, second.wins2) == (2, 0)
    assert second.rounds_played == 2
    assert second.message == "Battle ended! Winner: p1"
    assert second.recording_error is None
    assert recorder.results == [("p1", 2, 0)]
    assert engine.active_match_ids() == []

    with pytest.raises(NotFoundError):
        await engine.submit_move(match_id, "p1", "rock")
    with pytest.raises(NotFoundError):
        engine.get_match(match_id)


@pytest.mark.asyncio
async def test_triangle_beats_any_power_gap():
    engine = _engine(FakeOracle({"w1": 0, "w2": 100_000}))
    match_id = await engine.create("p1", "p2", "w1", "w2")

    result = await _play_round(engine, match_id, "rock", "scissors")

    assert result.round_winner == "p1"
    assert result.power2 > result.power1


@pytest.mark.asyncio
async def test_identical_moves_go_to_stronger_equipment():
    engine = _engine(FakeOracle({"w1": 3, "w2": 7}))
    match_id = await engine.create("p1", "p2", "w1", "w2")

    result = await _play_round(engine, match_id, "paper", "paper")

    assert result.round_winner == "p2"
    assert (result.power1, result.power2) == (103, 107)


@pytest.mark.asyncio
async def test_split_rounds_then_tied_round_ends_at_round_ceiling():
    recorder = FakeRecorder()
    engine = _engine(recorder=recorder, rules=DuelRules(tie_policy=TiePolicy.PLAYER2))
    match_id = await engine.create("p1", "p2", "w1", "w2")

    await _play_round(engine, match_id, "rock", "scissors")
    split = await _play_round(engine, match_id, "scissors", "rock")
    assert (split.wins1, split.wins2) == (1, 1)

    final = await _play_round(engine, match_id, "rock", "rock")

    assert isinstance(final, MatchResult)
    assert final.rounds_played == 3
    assert final.winner == "p2"
    assert (final.wins1, final.wins2) == (1, 2)
    assert recorder.results == [("p2", 1, 2)]


@pytest.mark.asyncio
async def test_tied_match_on_even_round_ceiling_uses_tie_policy():
    recorder = FakeRecorder()
    rules = DuelRules(max_rounds=2, tie_policy=TiePolicy.PLAYER1)
    engine = _engine(recorder=recorder, rules=rules)
    match_id = await engine.create("p1", "p2", "w1", "w2")

    await _play_round(engine, match_id, "rock", "paper")
    final = await _play_round(engine, match_id, "paper", "rock")

    assert isinstance(final, MatchResult)
    assert (final.wins1, final.wins2) == (1, 1)
    assert final.winner == "p1"
    assert recorder.results == [("p1", 1, 1)]


@pytest.mark.asyncio
async def test_coin_flip_tiebreak_is_reproducible():
    winners = []
    for _ in range(2):
        engine = _engine(id_factory=lambda: "match_replay", salt_factory=lambda: "salt")
        match_id = await engine.create("p1", "p2", "w1", "w2")
        result = await _play_round(engine, match_id, "scissors", "scissors")
        assert result.wins1 + result.wins2 == result.round == 1
        winners.append(result.round_winner)

    assert winners[0] == winners[1]
    assert winners[0] in ("p1", "p2")


@pytest.mark.asyncio
async def test_coin_flip_tiebreak_cannot_be_derived_from_match_id():
    predicted = 0
    for _ in range(40):
        engine = _engine()
        match_id = await engine.create("p1", "p2", "w1", "w2")
        public_guess = duel.settle_tie(
            TiePolicy.COIN_FLIP, generate_seed(match_id, 1, duel.ROUND_TIEBREAK_CONTEXT)
        )
        result = await _play_round(engine, match_id, "rock", "rock")
        if result.round_winner == {Side.PLAYER1: "p1", Side.PLAYER2: "p2"}[public_guess]:
            predicted += 1

    assert 0 < predicted < 40


@pytest.mark.asyncio
async def test_oracle_calls_for_a_round_run_concurrently():
    started = 0
    both_started = asyncio.Event()

    class BarrierOracle:
        async def get_power(self, equipment_id: str) -> int:
            nonlocal started
            started += 1
            if started == 2:
                both_started.set()
            await both_started.wait()
            return 0

    engine = BattleEngine(BarrierOracle(), FakeRecorder(), oracle_timeout=1.0)
    match_id = await engine.create("p1", "p2", "w1", "w2")

    result = await _play_round(engine, match_id, "rock", "paper")

    assert isinstance(result, RoundResult)
    assert started == 2


# --- oracle failures ------------------------------------------------------------


@pytest.mark.asyncio
async def test_oracle_failure_keeps_round_pending_until_retry():
    oracle = FakeOracle()
    oracle.fail_with = ConnectionError("ledger unreachable")
    engine = _engine(oracle)
    match_id = await engine.create("p1", "p2", "w1", "w2")

    await engine.submit_move(match_id, "p1", "rock")
    with pytest.raises(OracleError) as excinfo:
        await engine.submit_move(match_id, "p2", "scissors")

    assert isinstance(excinfo.value.__cause__, ConnectionError)
    assert "ledger unreachable" in str(excinfo.value)
    snapshot = engine.get_match(match_id)
    assert snapshot.round == 0
    assert (snapshot.wins1, snapshot.wins2) == (0, 0)
    assert snapshot.player1_moved
    assert snapshot.player2_moved

    oracle.fail_with = None
    result = await engine.retry_round(match_id)

    assert isinstance(result, RoundResult)
    assert (result.round, result.wins1) == (1, 1)
    assert not engine.get_match(match_id).player1_moved


@pytest.mark.asyncio
async def test_one_sided_oracle_failure_leaves_both_moves_pending():
    oracle = FakeOracle({"w1": 5, "w2": 5})
    oracle.fail_with = ConnectionError("w2 lookup failed")
    oracle.fail_only = {"w2"}
    engine = _engine(oracle)
    match_id = await engine.create("p1", "p2", "w1", "w2")

    await engine.submit_move(match_id, "p1", "rock")
    with pytest.raises(OracleError) as excinfo:
        await engine.submit_move(match_id, "p2", "scissors")

    assert excinfo.value.equipment_id == "w2"
    snapshot = engine.get_match(match_id)
    assert snapshot.round == 0
    assert snapshot.player1_moved
    assert snapshot.player2_moved

    oracle.fail_with = None
    result = await engine.retry_round(match_id)

    assert isinstance(result, RoundResult)
    assert result.round_winner == "p1"
    assert (result.power1, result.power2) == (105, 105)


@pytest.mark.asyncio
async def test_oracle_failure_then_resubmission_resolves():
    oracle = FakeOracle()
    oracle.fail_with = RuntimeError("boom")
    engine = _engine(oracle)
    match_id = await engine.create("p1", "p2", "w1", "w2")
    await engine.submit_move(match_id, "p1", "rock")
    with pytest.raises(OracleError):
        await engine.submit_move(match_id, "p2", "scissors")

    oracle.fail_with = None
    result = await engine.submit_move(match_id, "p2", "paper")

    assert isinstance(result, RoundResult)
    assert result.round_winner == "p2"


@pytest.mark.asyncio
@pytest.mark.parametrize("bad_power", [-1, "12", 1.5, None, True])
async def test_invalid_oracle_power_is_an_oracle_error(bad_power):
    class BadOracle:
        async def get_power(self, equipment_id: str):
            return bad_power

    engine = BattleEngine(BadOracle(), FakeRecorder())
    match_id = await engine.create("p1", "p2", "w1", "w2")
    await engine.submit_move(match_id, "p1", "rock")

    with pytest.raises(OracleError, match="invalid power"):
        await engine.submit_move(match_id, "p2", "rock")
    assert engine.get_match(match_id).round == 0


@pytest.mark.asyncio
async def test_oracle_timeout_is_an_oracle_error():
    engine = _engine(FakeOracle(delay=1.0), oracle_timeout=0.01)
    match_id = await engine.create("p1", "p2", "w1", "w2")
    await engine.submit_move(match_id, "p1", "rock")

    with pytest.raises(OracleError, match="timed out"):
        await engine.submit_move(match_id, "p2", "paper")
    assert engine.get_match(match_id).player2_moved


@pytest.mark.asyncio
async def test_retry_round_requires_both_moves():
    engine = _engine()
    match_id = await engine.create("p1", "p2", "w1", "w2")
    await engine.submit_move(match_id, "p1", "rock")

    with pytest.raises(RoundNotReadyError):
        await engine.retry_round(match_id)
    with pytest.raises(NotFoundError):
        await engine.retry_round("match_missing")


@pytest.mark.asyncio
async def test_resolving_a_half_played_round_is_rejected():
    store = InMemoryMatchStore()
    engine = _engine(store=store)
    match_id = await engine.create("p1", "p2", "w1", "w2")
    await engine.submit_move(match_id, "p1", "rock")

    with pytest.raises(RoundNotReadyError, match="missing a move"):
        await engine._resolve_round(store.get(match_id).match)
    assert engine.get_match(match_id).player1_moved


# --- recorder failures ----------------------------------------------------------


@pytest.mark.asyncio
async def test_recorder_failure_is_attached_to_match_result():
    recorder = FakeRecorder()
    recorder.fail_with = ConnectionError("ledger write failed")
    engine = _engine(recorder=recorder)
    match_id = await engine.create("p1", "p2", "w1", "w2")

    await _play_round(engine, match_id, "paper", "rock")
    result = await _play_round(engine, match_id, "paper", "rock")

    assert isinstance(result, MatchResult)
    assert result.winner == "p1"
    assert isinstance(result.recording_error, RecordingError)
    assert isinstance(result.recording_error.__cause__, ConnectionError)
    assert "ledger write failed" in str(result.recording_error)
    assert match_id not in engine.active_match_ids()


@pytest.mark.asyncio
async def test_recorder_timeout_is_attached_to_match_result():
    recorder = FakeRecorder()
    recorder.delay = 1.0
    engine = _engine(recorder=recorder, recorder_timeout=0.01)
    match_id = await engine.create("p1", "p2", "w1", "w2")

    await _play_round(engine, match_id, "scissors", "paper")
    result = await _play_round(engine, match_id, "scissors", "paper")

    assert result.recording_error is not None
    assert "timed out" in str(result.recording_error)
    assert engine.active_match_ids() == []


# --- concurrency ----------------------------------------------------------------


@pytest.mark.asyncio
async def test_simultaneous_moves_resolve_exactly_one_round():
    engine = _engine(FakeOracle(delay=0.01))
    match_id = await engine.create("p1", "p2", "w1", "w2")

    results = await asyncio.gather(
        engine.submit_move(match_id, "p1", "rock"),
        engine.submit_move(match_id, "p2", "scissors"),
    )

    kinds = sorted(type(result).__name__ for result in results)
    assert kinds == ["RoundResult", "WaitingResult"]
    snapshot = engine.get_match(match_id)
    assert snapshot.round == 1
    assert (snapshot.wins1, snapshot.wins2) == (1, 0)


@pytest.mark.asyncio
async def test_move_queued_behind_final_round_sees_ended_match():
    engine = _engine(FakeOracle(delay=0.01))
    match_id = await engine.create("p1", "p2", "w1", "w2")
    await _play_round(engine, match_id, "rock", "scissors")
    await engine.submit_move(match_id, "p1", "rock")

    finishing, late = await asyncio.gather(
        engine.submit_move(match_id, "p2", "scissors"),
        engine.submit_move(match_id, "p1", "paper"),
        return_exceptions=True,
    )

    assert isinstance(finishing, MatchResult)
    assert isinstance(late, NotFoundError)


@pytest.mark.asyncio
async def test_matches_progress_independently():
    engine = _engine(FakeOracle(delay=0.01))
    ids = [await engine.create(f"a{i}", f"b{i}", "w1", "w2") for i in range(5)]

    for i, match_id in enumerate(ids):
        await engine.submit_move(match_id, f"a{i}", "rock")
    results = await asyncio.gather(
        *(engine.submit_move(match_id, f"b{i}", "scissors") for i, match_id in enumerate(ids))
    )

    assert all(isinstance(result, RoundResult) for result in results)
    assert all(engine.get_match(match_id).round == 1 for match_id in ids)

    with pytest.raises(InvalidPlayerError):
        await engine.submit_move(ids[0], "b1", "rock")
    assert engine.get_match(ids[1]).round == 1


# --- invariants -----------------------------------------------------------------

moves = st.sampled_from(["rock", "paper", "scissors"])


@settings(max_examples=60, deadline=None)
@given(
    rounds=st.lists(st.tuples(moves, moves), min_size=3, max_size=3),
    power1=st.integers(min_value=0, max_value=50),
    power2=st.integers(min_value=0, max_value=50),
)
def test_counters_stay_within_bounds(rounds, power1, power2):
    async def play() -> None:
        recorder = FakeRecorder()
        engine = _engine(FakeOracle({"w1": power1, "w2": power2}), recorder)
        match_id = await engine.create("p1", "p2", "w1", "w2")
        for move1, move2 in rounds:
            result = await _play_round(engine, match_id, move1, move2)
            if isinstance(result, RoundResult):
                assert result.wins1 + result.wins2 == result.round
                assert result.round < 3
                assert max(result.wins1, result.wins2) < 2
                continue
            assert result.wins1 + result.wins2 == result.rounds_played <= 3
            assert max(result.wins1, result.wins2) == 2 or result.rounds_played == 3
            assert result.winner == ("p1" if result.wins1 > result.wins2 else "p2")
            assert recorder.results == [(result.winner, result.wins1, result.wins2)]
            assert engine.active_match_ids() == []
            return
        pytest.fail("match did not end within the round ceiling")

    asyncio.run(play())
