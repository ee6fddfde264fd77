"""Match Store Protocol Interface.

This module defines the protocol for the registry of active matches the
battle engine owns.
"""

from typing import Protocol

from ninjaduel.domain.models import Match, MatchID
from ninjaduel.repository.match_store import MatchEntry


class IMatchStore(Protocol):
    """Protocol for a concurrency-safe registry of active matches."""

    def add(self, match: Match) -> MatchEntry:
        """Register a new match and return its entry (match plus lock).

        Raises:
            ValueError: If the identifier is already registered
        """
        ...

    def get(self, match_id: MatchID) -> MatchEntry | None:
        """Return the entry for an active match, or None."""
        ...

    def remove(self, match_id: MatchID) -> bool:
        """Remove a match; return whether it was registered."""
        ...

    def __contains__(self, match_id: object) -> bool: ...

    def ids(self) -> list[MatchID]:
        """Return identifiers of every active match."""
        ...
