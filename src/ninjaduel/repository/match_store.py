"""In-memory registry of active matches."""

from __future__ import annotations

import asyncio
import threading
from dataclasses import dataclass, field

from ninjaduel.domain.models import Match, MatchID


@dataclass(slots=True)
class MatchEntry:
    """A registered match and the lock serializing its mutations."""

    match: Match
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)


class InMemoryMatchStore:
    """Keep active matches in a dict guarded by a short-lived lock.

    The registry lock only covers insert/remove/lookup; per-match work is
    serialized by each entry's own ``asyncio.Lock``.
    """

    def __init__(self) -> None:
        self._entries: dict[MatchID, MatchEntry] = {}
        self._guard = threading.Lock()

    def add(self, match: Match) -> MatchEntry:
        """Register a match and return its entry."""

        with self._guard:
            if match.match_id in self._entries:
                raise ValueError(f"Match '{match.match_id}' is already registered")
            entry = MatchEntry(match)
            self._entries[match.match_id] = entry
            return entry

    def get(self, match_id: MatchID) -> MatchEntry | None:
        with self._guard:
            return self._entries.get(match_id)

    def remove(self, match_id: MatchID) -> bool:
        """Remove a match; return whether it was registered."""

        with self._guard:
            return self._entries.pop(match_id, None) is not None

    def __contains__(self, match_id: object) -> bool:
        with self._guard:
            return match_id in self._entries

    def __len__(self) -> int:
        with self._guard:
            return len(self._entries)

    def ids(self) -> list[MatchID]:
        with self._guard:
            return list(self._entries)
