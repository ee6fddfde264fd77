"""Deterministic random choices for settling ties.

Every random decision in a duel is seeded from match state (match id, round
number, context and a per-match secret salt) so that:
- Replaying the same match always settles ties the same way
- Neither seat is favored: the draw is a fair coin over both sides
- A disputed tie-break can be re-derived from the seed alone
- Players cannot work out a draw from the public match id

Examples:
    >>> seed = generate_seed("match_ab12", 2, "round_tiebreak")
    >>> seed
    'match_ab12:2:round_tiebreak'
    >>> result = random_choice(seed, ["player1", "player2"])
    >>> result["choice"] in ("player1", "player2")
    True
"""

import hashlib
import random
from typing import Any


def generate_seed(match_id: str, round_number: int, context: str, salt: str = "") -> str:
    """Generate a deterministic seed from match state.

    Format: "match_id:round_number:context", prefixed with "salt:" when a
    salt is given.

    Args:
        match_id: Identifier of the match the draw belongs to
        round_number: Round being settled (the match-level draw uses the
            number of rounds played)
        context: What the draw is for (e.g. 'round_tiebreak')
        salt: Server-side secret that keeps the draw unpredictable to
            anyone who only knows the public match state

    Returns:
        Seed string in format "[salt:]match_id:round_number:context"

    Raises:
        ValueError: If round_number is negative or match_id is empty
    """
    if not match_id:
        raise ValueError("match_id must be non-empty")
    if round_number < 0:
        raise ValueError(f"round_number must be non-negative, got {round_number}")

    seed = f"{match_id}:{round_number}:{context}"
    return f"{salt}:{seed}" if salt else seed


def _seed_to_int(seed: str) -> int:
    """Convert a seed string to a stable 64-bit integer for random.Random()."""
    digest = hashlib.sha256(seed.encode("utf-8")).digest()
    return int.from_bytes(digest[:8], "big", signed=False)


def random_choice(seed: str, options: list[Any]) -> dict[str, Any]:
    """Choose one option with a deterministic seed.

    Args:
        seed: Deterministic seed string (from generate_seed)
        options: Options to choose from (must be non-empty)

    Returns:
        Dictionary containing:
            - choice: The selected option
            - index: Index of the selected option
            - seed: The seed used

    Raises:
        ValueError: If options list is empty
    """
    if not options:
        raise ValueError("options list cannot be empty")

    rng = random.Random(_seed_to_int(seed))
    index = rng.randint(0, len(options) - 1)

    return {
        "choice": options[index],
        "index": index,
        "seed": seed,
    }
