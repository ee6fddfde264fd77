"""Battle Engine Protocol Interface.

This module defines the protocol for the duel engine consumed by the HTTP
layer and any message front-end.
"""

from typing import Protocol

from ninjaduel.domain.enums import Move
from ninjaduel.domain.models import MatchID, MatchResult, MatchSnapshot, MoveOutcome, RoundResult
from ninjaduel.domain.rules_config import DuelRules


class IBattleEngine(Protocol):
    """Protocol defining the interface for creating and playing matches."""

    @property
    def rules(self) -> DuelRules:
        """Round and match rules the engine applies."""
        ...

    async def create(
        self, player1: str, player2: str, equipment1: str, equipment2: str
    ) -> MatchID:
        """Register a new match and return its identifier."""
        ...

    async def submit_move(self, match_id: str, player: str, move: Move | str) -> MoveOutcome:
        """Record a player's move, resolving the round when both sides moved."""
        ...

    async def retry_round(self, match_id: str) -> RoundResult | MatchResult:
        """Re-attempt a round whose resolution previously failed."""
        ...

    def get_match(self, match_id: str) -> MatchSnapshot:
        """Return a read-only view of an active match."""
        ...

    def active_match_ids(self) -> list[MatchID]:
        """Return identifiers of every active match."""
        ...
