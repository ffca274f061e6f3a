from __future__ import annotations

from typing import TYPE_CHECKING

from kartsim.core.events import TurnOutcomeEvent
from kartsim.core.types import Effect
from kartsim.engine.roll import roll_dice, roll_effect

if TYPE_CHECKING:
    import random

    from kartsim.core.state import RaceRules, RacerState
    from kartsim.core.types import D6Values, SkidReason


def _skid_reason(
    racer: RacerState,
    dice: D6Values,
    effect: Effect,
    rules: RaceRules,
) -> SkidReason | None:
    # An explicit skid wins over the instability check.
    if effect is Effect.SKID:
        return "Effect"
    if (
        dice == rules.unstable_dice_value
        and racer.profile.stability < rules.instability_threshold
    ):
        return "Instability"
    return None


def resolve_turn(
    racer: RacerState,
    rng: random.Random,
    rules: RaceRules,
) -> TurnOutcomeEvent:
    """
    Play one turn for `racer`: roll the dice, roll the effect, then either
    skid in place or move by the profile (plus the boost bonus).

    Mutates `racer.position` and `racer.last_effect`.
    """
    dice = roll_dice(rng)
    effect = roll_effect(rng, rules.special_effect_odds)
    racer.last_effect = effect

    skid_reason = _skid_reason(racer, dice, effect, rules)
    start = racer.position

    if skid_reason is None:
        new_position = racer.profile.move(start, dice)
        if effect is Effect.BOOST:
            new_position += rules.boost_bonus
        racer.position = new_position

    return TurnOutcomeEvent(
        racer_idx=racer.idx,
        racer_name=racer.name,
        dice=dice,
        effect=effect,
        delta=racer.position - start,
        position=racer.position,
        skid_reason=skid_reason,
    )
