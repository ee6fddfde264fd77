"""Domain model for ninja duels.

This package holds everything that can be reasoned about without I/O:

* Enumerations (see :mod:`enums`) and the exception taxonomy (:mod:`errors`).
* Dataclasses for matches, results and ledger records (:mod:`models`).
* Rule configuration objects (:mod:`rules_config`).
* Pure rule functions for rounds (:mod:`duel`) and seasons (:mod:`ranking`).
"""

from . import duel, enums, errors, models, ranking, rules_config

__all__ = [
    "duel",
    "enums",
    "errors",
    "models",
    "ranking",
    "rules_config",
]
