"""Equipment Service for ninja duels.

Weapons live on the ledger; this service fetches, mints, upgrades and merges
them and turns raw ledger records into ``Weapon`` values.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from ninjaduel.domain.errors import LedgerError
from ninjaduel.domain.models import EquipmentID, Weapon
from ninjaduel.interfaces.ledger import ILedgerClient

logger = logging.getLogger(__name__)


def format_weapon(raw: Mapping[str, Any]) -> Weapon:
    """Translate a ledger weapon record into a ``Weapon``."""

    try:
        return Weapon(
            id=EquipmentID(str(raw["id"])),
            name=str(raw["name"]),
            type=str(raw["weapon_type"]),
            rarity=str(raw["rarity"]),
            power=int(raw["power"]),
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise LedgerError(f"Malformed weapon record: {raw!r}") from exc


def _first(response: Any, key: str, function: str) -> Mapping[str, Any]:
    try:
        return response[key][0]
    except (KeyError, IndexError, TypeError) as exc:
        raise LedgerError(f"Ledger function '{function}' returned no '{key}' object") from exc


class EquipmentService:
    """Service for managing player weapons on the ledger."""

    def __init__(self, ledger: ILedgerClient):
        self.ledger = ledger

    async def get_player_weapons(self, player: str) -> list[Weapon]:
        """Return every weapon owned by ``player``."""
        weapons = await self.ledger.call("getPlayerWeapons", [player])
        return [format_weapon(weapon) for weapon in weapons]

    async def create_weapon(self, player: str, weapon_type: str, rarity: str) -> Weapon:
        """Mint a new weapon for ``player``.

        Args:
            player: Owner of the new weapon
            weapon_type: Weapon kind (e.g. 'katana', 'shuriken')
            rarity: Rarity tier known to the ledger

        Returns:
            The minted weapon
        """
        result = await self.ledger.call("createWeapon", [player, weapon_type, rarity])
        weapon = format_weapon(_first(result, "created", "createWeapon"))
        logger.info("minted %s weapon %s for %s", rarity, weapon.id, player)
        return weapon

    async def upgrade_weapon(self, player: str, weapon_id: str) -> Weapon:
        """Upgrade one of the player's weapons."""
        result = await self.ledger.call("upgradeWeapon", [player, weapon_id])
        return format_weapon(_first(result, "modified", "upgradeWeapon"))

    async def merge_weapons(self, player: str, weapon_id1: str, weapon_id2: str) -> Weapon:
        """Merge two of the player's weapons into a new one.

        Raises:
            ValueError: If both identifiers name the same weapon
        """
        if weapon_id1 == weapon_id2:
            raise ValueError("Cannot merge a weapon with itself")
        result = await self.ledger.call("mergeWeapons", [player, weapon_id1, weapon_id2])
        weapon = format_weapon(_first(result, "created", "mergeWeapons"))
        logger.info("merged %s and %s into %s for %s", weapon_id1, weapon_id2, weapon.id, player)
        return weapon
