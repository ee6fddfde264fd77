"""Power Oracle Protocol Interface.

This module defines the protocol for the external capability that supplies
the power bonus of a piece of equipment.
"""

from typing import Protocol


class IPowerOracle(Protocol):
    """Protocol for looking up equipment power during round resolution."""

    async def get_power(self, equipment_id: str) -> int:
        """Return the non-negative power bonus of a piece of equipment.

        Args:
            equipment_id: Opaque equipment identifier fixed at match creation

        Returns:
            Power bonus added to the move's base power

        Raises:
            Exception: Any lookup failure; the engine reports it as an
                OracleError and leaves the round unresolved
        """
        ...
