"""Service Factory for the duel system.

This module provides factory functions for creating service instances with
proper dependency wiring. Use these functions in production code to ensure
all service dependencies are correctly initialized.

For testing, inject protocol-based fakes instead of using these factories.

Example:
    # Production usage
    from ninjaduel.factory import create_all_services
    services = create_all_services(ledger, settings)

    # Testing usage
    from ninjaduel.services.battle_service import BattleEngine

    class FakeOracle:
        async def get_power(self, equipment_id):
            return 0

    engine = BattleEngine(FakeOracle(), recorder)
"""

from ninjaduel.config import Settings
from ninjaduel.interfaces.ledger import ILedgerClient
from ninjaduel.interfaces.recorder import IResultRecorder
from ninjaduel.interfaces.store import IMatchStore
from ninjaduel.services.battle_service import BattleEngine
from ninjaduel.services.equipment_service import EquipmentService
from ninjaduel.services.ledger_adapters import (
    LedgerPowerOracle,
    LedgerResultRecorder,
    RankedResultRecorder,
)
from ninjaduel.services.ranking_service import RankingService


def create_ranking_service(ledger: ILedgerClient, settings: Settings) -> RankingService:
    """Create a RankingService for the configured season length.

    Args:
        ledger: Ledger client
        settings: Application settings

    Returns:
        RankingService starting at season 1
    """
    return RankingService(ledger, rules=settings.rules().ranking)


def create_equipment_service(ledger: ILedgerClient) -> EquipmentService:
    """Create an EquipmentService over the ledger."""
    return EquipmentService(ledger)


def create_battle_engine(
    ledger: ILedgerClient,
    settings: Settings,
    *,
    ranking: RankingService | None = None,
    store: IMatchStore | None = None,
) -> BattleEngine:
    """Create a BattleEngine whose oracle and recorder call the ledger.

    Args:
        ledger: Ledger client used for power lookups and result recording
        settings: Application settings (rules and timeouts)
        ranking: When given, match winners are credited with ranking points
        store: Match registry; a fresh in-memory store by default

    Returns:
        Fully initialized BattleEngine
    """
    recorder: IResultRecorder = LedgerResultRecorder(ledger)
    if ranking is not None:
        recorder = RankedResultRecorder(recorder, ranking, points_per_win=settings.points_per_win)
    return BattleEngine(
        LedgerPowerOracle(ledger),
        recorder,
        store=store,
        rules=settings.rules().duel,
        oracle_timeout=settings.oracle_timeout_seconds,
        recorder_timeout=settings.recorder_timeout_seconds,
    )


def create_all_services(ledger: ILedgerClient, settings: Settings) -> dict:
    """Create all services with proper dependency wiring.

    Returns:
        Dictionary containing all initialized services:
        - ranking: RankingService
        - equipment: EquipmentService
        - battle: BattleEngine (crediting winners through ranking)
    """
    ranking = create_ranking_service(ledger, settings)
    return {
        "ranking": ranking,
        "equipment": create_equipment_service(ledger),
        "battle": create_battle_engine(ledger, settings, ranking=ranking),
    }
