"""Round and match resolution rules.

Moves are power-symmetric: every move carries the same base power, so
equipment and the rock -> scissors -> paper -> rock triangle are the only
sources of asymmetry. Power only separates identical moves; it never
overrides a clean triangle win.
"""

from __future__ import annotations

from collections.abc import Mapping

from ninjaduel.utils.rng import generate_seed, random_choice

from .enums import Move, Side, TiePolicy
from .models import Match
from .rules_config import DEFAULT_RULES, DuelRules

ROUND_TIEBREAK_CONTEXT = "round_tiebreak"
MATCH_TIEBREAK_CONTEXT = "match_tiebreak"


def parse_move(value: object) -> Move | None:
    """Return the ``Move`` named by ``value`` or ``None`` if it names none."""

    if isinstance(value, Move):
        return value
    if not isinstance(value, str):
        return None
    try:
        return Move(value.strip().lower())
    except ValueError:
        return None


def base_power(move: Move, table: Mapping[Move, int] | None = None) -> int:
    """Base power contributed by the move itself."""

    table = table if table is not None else DEFAULT_RULES.duel.base_power
    return table[move]


def beats(move: Move, other: Move) -> bool:
    """True when ``move`` wins the triangle against ``other``."""

    return (move.index - other.index) % 3 == 1


def settle_tie(policy: TiePolicy, seed: str) -> Side:
    """Pick a side for a dead-even round or match."""

    if policy is TiePolicy.PLAYER1:
        return Side.PLAYER1
    if policy is TiePolicy.PLAYER2:
        return Side.PLAYER2
    return random_choice(seed, [Side.PLAYER1, Side.PLAYER2])["choice"]


def decide_round(
    move1: Move,
    move2: Move,
    power1: int,
    power2: int,
    *,
    tie_policy: TiePolicy = TiePolicy.COIN_FLIP,
    tie_seed: str = "",
) -> Side:
    """Return the side that wins a round.

    Differing moves follow the triangle regardless of power. Identical moves
    go to the strictly stronger side; equal power falls to ``tie_policy``.
    """

    if move1 is not move2:
        return Side.PLAYER1 if beats(move1, move2) else Side.PLAYER2
    if power1 > power2:
        return Side.PLAYER1
    if power2 > power1:
        return Side.PLAYER2
    return settle_tie(tie_policy, tie_seed)


def round_tie_seed(match: Match) -> str:
    # keyed on the round about to be played
    return generate_seed(
        match.match_id, match.round + 1, ROUND_TIEBREAK_CONTEXT, salt=match.tie_salt
    )


def is_terminal(match: Match, rules: DuelRules = DEFAULT_RULES.duel) -> bool:
    """Whether a match must end; only meaningful right after a round resolves."""

    return (
        match.wins1 >= rules.wins_required
        or match.wins2 >= rules.wins_required
        or match.round >= match.max_rounds
    )


def match_winner(match: Match, tie_policy: TiePolicy = TiePolicy.COIN_FLIP) -> Side:
    """Side with strictly more round wins; an exact tie falls to ``tie_policy``."""

    if match.wins1 > match.wins2:
        return Side.PLAYER1
    if match.wins2 > match.wins1:
        return Side.PLAYER2
    seed = generate_seed(
        match.match_id, match.round, MATCH_TIEBREAK_CONTEXT, salt=match.tie_salt
    )
    return settle_tie(tie_policy, seed)
