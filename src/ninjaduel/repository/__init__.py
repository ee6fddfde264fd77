"""In-memory repositories backing the duel engine and its collaborators."""

from ninjaduel.repository.match_store import InMemoryMatchStore, MatchEntry
from ninjaduel.repository.memory_ledger import InMemoryLedger

__all__ = ["InMemoryLedger", "InMemoryMatchStore", "MatchEntry"]
