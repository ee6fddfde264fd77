"""Ledger Client Protocol Interface.

The ledger stores weapons, season rankings and match results. Services talk
to it through a single named-function call.
"""

from typing import Any, Protocol


class ILedgerClient(Protocol):
    """Protocol for invoking ledger functions."""

    async def call(self, function: str, args: list[Any]) -> Any:
        """Invoke a ledger function.

        Args:
            function: Ledger function name (e.g. 'getWeaponPower')
            args: Positional arguments for the function

        Returns:
            The decoded ledger response

        Raises:
            LedgerError: If the function is unknown or the call fails
        """
        ...
