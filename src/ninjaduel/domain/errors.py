"""Exceptions raised by the duel engine and its collaborators."""

from __future__ import annotations


class BattleError(Exception):
    """Base class for every failure the battle engine reports."""


class NotFoundError(BattleError, LookupError):
    """No active match is registered under the given identifier."""

    def __init__(self, match_id: str) -> None:
        super().__init__(f"Match '{match_id}' not found")
        self.match_id = match_id


class InvalidPlayerError(BattleError, ValueError):
    """The acting player is not a participant (or the pairing is invalid)."""


class InvalidMoveError(BattleError, ValueError):
    """A move outside rock, paper and scissors was submitted."""

    def __init__(self, move: object) -> None:
        super().__init__(f"Invalid move {move!r}; expected rock, paper or scissors")
        self.move = move


class RoundNotReadyError(BattleError):
    """A round retry was requested before both players moved."""


class OracleError(BattleError):
    """The power oracle failed while a round was being resolved.

    The round is left unresolved: both pending moves stay in place so the
    round can be retried once the oracle recovers.
    """

    def __init__(self, match_id: str, equipment_id: str | None, reason: str) -> None:
        target = f" for equipment '{equipment_id}'" if equipment_id is not None else ""
        super().__init__(f"Power lookup failed{target} in match '{match_id}': {reason}")
        self.match_id = match_id
        self.equipment_id = equipment_id
        self.reason = reason


class RecordingError(BattleError):
    """The result recorder failed after a match had already ended."""

    def __init__(self, match_id: str, reason: str) -> None:
        super().__init__(f"Recording result of match '{match_id}' failed: {reason}")
        self.match_id = match_id
        self.reason = reason


class LedgerError(Exception):
    """A ledger call failed or returned an unexpected payload."""
