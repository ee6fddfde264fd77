"""Enumerations used across the duel domain."""

from __future__ import annotations

from enum import StrEnum


class Move(StrEnum):
    """The three simultaneous moves a player may choose."""

    ROCK = "rock"
    PAPER = "paper"
    SCISSORS = "scissors"

    @property
    def index(self) -> int:
        """Position on the rock -> paper -> scissors cycle."""

        return _MOVE_INDEX[self]


_MOVE_INDEX = {Move.ROCK: 0, Move.PAPER: 1, Move.SCISSORS: 2}


class Side(StrEnum):
    """Which seat of a match a player occupies."""

    PLAYER1 = "player1"
    PLAYER2 = "player2"

    @property
    def opponent(self) -> Side:
        return Side.PLAYER2 if self is Side.PLAYER1 else Side.PLAYER1


class MatchStatus(StrEnum):
    """Status reported back to a caller after a move."""

    WAITING = "waiting"
    ONGOING = "ongoing"
    ENDED = "ended"


class TiePolicy(StrEnum):
    """How a dead-even round or match is settled."""

    COIN_FLIP = "coin_flip"
    PLAYER1 = "player1"
    PLAYER2 = "player2"
