"""Protocol-based interfaces for the duel engine and its collaborators.

This module exports every protocol the engine consumes or exposes, providing
a clear contract for implementations and enabling dependency injection and
testing with plain fakes.
"""

from ninjaduel.interfaces.battle import IBattleEngine
from ninjaduel.interfaces.ledger import ILedgerClient
from ninjaduel.interfaces.oracle import IPowerOracle
from ninjaduel.interfaces.recorder import IResultRecorder
from ninjaduel.interfaces.store import IMatchStore

__all__ = [
    "IBattleEngine",
    "ILedgerClient",
    "IMatchStore",
    "IPowerOracle",
    "IResultRecorder",
]
