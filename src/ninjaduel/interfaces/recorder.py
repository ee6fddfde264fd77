"""Result Recorder Protocol Interface.

This module defines the protocol for the external sink that durably records
the outcome of a finished match.
"""

from typing import Protocol


class IResultRecorder(Protocol):
    """Protocol for recording finished matches."""

    async def record_result(self, winner: str, wins1: int, wins2: int) -> None:
        """Record a finished match.

        Args:
            winner: Player identifier of the match winner
            wins1: Rounds won by the first player
            wins2: Rounds won by the second player

        Raises:
            Exception: Any recording failure; the engine attaches it to the
                match result as a RecordingError
        """
        ...
