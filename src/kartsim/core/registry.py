from __future__ import annotations

from typing import TYPE_CHECKING, get_args

from kartsim.core.errors import UnknownProfileError
from kartsim.core.profiles import MovementProfile
from kartsim.core.state import RacerState
from kartsim.core.types import PilotName

if TYPE_CHECKING:
    from collections.abc import Mapping

PILOT_PROFILES: Mapping[PilotName, MovementProfile] = {
    "Mario": MovementProfile(speed=2, stability=2),
    "Luigi": MovementProfile(speed=1, stability=3),
    "Peach": MovementProfile(speed=3, stability=1),
}

_LOOKUP: dict[str, PilotName] = {name.lower(): name for name in get_args(PilotName)}


def resolve_pilot_name(identifier: str) -> PilotName | None:
    """Case-insensitive match against the closed set of pilots."""
    return _LOOKUP.get(identifier.strip().lower())


def lookup_profile(identifier: str) -> MovementProfile | None:
    name = resolve_pilot_name(identifier)
    if name is None:
        return None
    return PILOT_PROFILES[name]


def create_profile(identifier: str) -> MovementProfile:
    profile = lookup_profile(identifier)
    if profile is None:
        raise UnknownProfileError(identifier, get_args(PilotName))
    return profile


def create_racer(
    idx: int,
    identifier: str,
    *,
    is_automated: bool = True,
    is_primary: bool = False,
) -> RacerState:
    name = resolve_pilot_name(identifier)
    if name is None:
        raise UnknownProfileError(identifier, get_args(PilotName))
    return RacerState(
        idx=idx,
        name=name,
        profile=PILOT_PROFILES[name],
        is_automated=is_automated,
        is_primary=is_primary,
    )
