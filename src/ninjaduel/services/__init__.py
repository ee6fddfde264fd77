"""Service layer for the ninja duel system.

All services depend on Protocol interfaces rather than concrete
collaborators:

- BattleEngine depends on IPowerOracle, IResultRecorder and IMatchStore
- EquipmentService and RankingService depend on ILedgerClient
- Use factory.py for production dependency wiring
- Inject protocol-based fakes for testing (avoid complex mocking)

Architecture:
    - BattleEngine: Match registry, move submission, round and match resolution
    - EquipmentService: Weapon listing, minting, upgrading, merging
    - RankingService: Season points, leaderboard, season rollover and rewards
    - Ledger adapters: Oracle and recorder implementations over the ledger

Testing Usage:
    from ninjaduel.services.battle_service import BattleEngine

    class FakeOracle:
        async def get_power(self, equipment_id):
            return 0

    class FakeRecorder:
        async def record_result(self, winner, wins1, wins2):
            pass

    engine = BattleEngine(FakeOracle(), FakeRecorder())
"""

from ninjaduel.services.battle_service import BattleEngine
from ninjaduel.services.equipment_service import EquipmentService
from ninjaduel.services.ledger_adapters import (
    LedgerPowerOracle,
    LedgerResultRecorder,
    RankedResultRecorder,
)
from ninjaduel.services.ranking_service import RankingService

__all__ = [
    "BattleEngine",
    "EquipmentService",
    "LedgerPowerOracle",
    "LedgerResultRecorder",
    "RankedResultRecorder",
    "RankingService",
]
