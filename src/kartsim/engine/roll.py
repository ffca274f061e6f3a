from __future__ import annotations

from typing import TYPE_CHECKING, cast

from kartsim.core.types import Effect

if TYPE_CHECKING:
    import random

    from kartsim.core.types import D6Values


def roll_dice(rng: random.Random) -> D6Values:
    return cast("D6Values", rng.randint(1, 6))


def roll_effect(rng: random.Random, special_effect_odds: int = 5) -> Effect:
    """
    Draw the per-turn effect.

    Two independent draws: a 1-in-`special_effect_odds` check for a special
    turn, then a fair coin between SKID and BOOST. With the default odds this
    gives 80% NORMAL, 10% SKID and 10% BOOST, not a uniform three-way split.
    """
    if rng.randint(0, special_effect_odds - 1) != 0:
        return Effect.NORMAL
    return Effect.SKID if rng.random() < 0.5 else Effect.BOOST
