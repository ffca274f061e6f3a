from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from kartsim.core.types import D6Values, Effect, PilotName, SkidReason


@dataclass(frozen=True)
class RaceEvent:
    """Base class for everything the engine reports to observers."""


@dataclass(frozen=True, kw_only=True)
class TurnOutcomeEvent(RaceEvent):
    racer_idx: int
    racer_name: PilotName
    dice: D6Values
    effect: Effect
    delta: float
    position: float
    skid_reason: SkidReason | None = None

    @property
    def skidded(self) -> bool:
        return self.skid_reason is not None


@dataclass(frozen=True, kw_only=True)
class RaceFinishedEvent(RaceEvent):
    winner_idx: int
    winner_name: PilotName
    position: float
    turns_taken: int
