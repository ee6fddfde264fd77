"""Dataclasses describing matches, round outcomes and ledger records.

Matches live only in memory; every mutation goes through the battle engine
while it holds the match lock. The result types are what callers receive
back from a move submission.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import NewType

from .enums import MatchStatus, Move, Side
from .errors import RecordingError

# --- Strongly typed identifiers -------------------------------------------------

MatchID = NewType("MatchID", str)
PlayerID = NewType("PlayerID", str)
EquipmentID = NewType("EquipmentID", str)


# --- Match state ----------------------------------------------------------------


@dataclass(slots=True)
class Match:
    """One multi-round duel between two players with fixed equipment."""

    match_id: MatchID
    player1: PlayerID
    player2: PlayerID
    equipment1: EquipmentID
    equipment2: EquipmentID
    max_rounds: int = 3
    round: int = 0
    wins1: int = 0
    wins2: int = 0
    pending1: Move | None = None
    pending2: Move | None = None
    # secret mixed into tie-break seeds; never exposed through snapshots
    tie_salt: str = field(default="", repr=False)

    def side_of(self, player: str) -> Side | None:
        if player == self.player1:
            return Side.PLAYER1
        if player == self.player2:
            return Side.PLAYER2
        return None

    def player_for(self, side: Side) -> PlayerID:
        return self.player1 if side is Side.PLAYER1 else self.player2

    def equipment_for(self, side: Side) -> EquipmentID:
        return self.equipment1 if side is Side.PLAYER1 else self.equipment2

    def pending_for(self, side: Side) -> Move | None:
        return self.pending1 if side is Side.PLAYER1 else self.pending2

    def set_pending(self, side: Side, move: Move) -> None:
        if side is Side.PLAYER1:
            self.pending1 = move
        else:
            self.pending2 = move

    @property
    def both_moved(self) -> bool:
        return self.pending1 is not None and self.pending2 is not None

    def record_round(self, winner: Side) -> None:
        """Credit the round winner, advance the round and clear both moves."""

        if winner is Side.PLAYER1:
            self.wins1 += 1
        else:
            self.wins2 += 1
        self.round += 1
        self.pending1 = None
        self.pending2 = None


@dataclass(frozen=True, slots=True)
class MatchSnapshot:
    """Read-only view of an active match; pending moves stay hidden."""

    match_id: MatchID
    player1: PlayerID
    player2: PlayerID
    equipment1: EquipmentID
    equipment2: EquipmentID
    round: int
    max_rounds: int
    wins1: int
    wins2: int
    player1_moved: bool
    player2_moved: bool

    @classmethod
    def of(cls, match: Match) -> MatchSnapshot:
        return cls(
            match_id=match.match_id,
            player1=match.player1,
            player2=match.player2,
            equipment1=match.equipment1,
            equipment2=match.equipment2,
            round=match.round,
            max_rounds=match.max_rounds,
            wins1=match.wins1,
            wins2=match.wins2,
            player1_moved=match.pending1 is not None,
            player2_moved=match.pending2 is not None,
        )


# --- Move submission results ----------------------------------------------------


@dataclass(frozen=True, slots=True)
class WaitingResult:
    """Returned while the opponent has not yet moved this round."""

    match_id: MatchID
    player: PlayerID
    status: MatchStatus = MatchStatus.WAITING
    message: str = "Waiting for opponent's move"


@dataclass(frozen=True, slots=True)
class RoundResult:
    """Summary of a resolved round in a match that continues."""

    match_id: MatchID
    round: int
    wins1: int
    wins2: int
    round_winner: PlayerID
    move1: Move
    move2: Move
    power1: int
    power2: int
    status: MatchStatus = MatchStatus.ONGOING
    message: str = ""


@dataclass(frozen=True, slots=True)
class MatchResult:
    """Final outcome of a match.

    ``recording_error`` is set when the result recorder failed; the match has
    ended regardless and is no longer registered.
    """

    match_id: MatchID
    winner: PlayerID
    wins1: int
    wins2: int
    rounds_played: int
    status: MatchStatus = MatchStatus.ENDED
    message: str = ""
    recording_error: RecordingError | None = None


MoveOutcome = WaitingResult | RoundResult | MatchResult


# --- Ledger records -------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Weapon:
    """A piece of equipment as exposed to players."""

    id: EquipmentID
    name: str
    type: str
    rarity: str
    power: int


@dataclass(frozen=True, slots=True)
class LeaderboardEntry:
    """One row of a season leaderboard."""

    address: PlayerID
    points: int
    rank: int
