from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import TYPE_CHECKING

from kartsim.core.errors import ConfigurationError
from kartsim.core.types import Effect

if TYPE_CHECKING:
    import random
    from collections.abc import Mapping

    from kartsim.core.events import TurnOutcomeEvent
    from kartsim.core.profiles import MovementProfile
    from kartsim.core.types import PilotName


@dataclass(slots=True)
class RaceRules:
    track_length: int = 20
    special_effect_odds: int = 5  # 1-in-N chance of a skid/boost turn
    boost_bonus: int = 1
    instability_threshold: float = 2
    unstable_dice_value: int = 6

    def __post_init__(self) -> None:
        for name in ("track_length", "special_effect_odds", "boost_bonus", "unstable_dice_value"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                msg = f"{name} must be a whole number, got {value!r}"
                raise ConfigurationError(msg)
        if isinstance(self.instability_threshold, bool) or not isinstance(
            self.instability_threshold, int | float
        ):
            msg = f"instability_threshold must be numeric, got {self.instability_threshold!r}"
            raise ConfigurationError(msg)

        if self.track_length <= 0:
            msg = f"track_length must be positive, got {self.track_length}"
            raise ConfigurationError(msg)
        if self.special_effect_odds < 1:
            msg = f"special_effect_odds must be at least 1, got {self.special_effect_odds}"
            raise ConfigurationError(msg)
        if self.boost_bonus < 0:
            msg = f"boost_bonus must not be negative, got {self.boost_bonus}"
            raise ConfigurationError(msg)
        if self.instability_threshold <= 0:
            msg = f"instability_threshold must be positive, got {self.instability_threshold}"
            raise ConfigurationError(msg)
        if not 1 <= self.unstable_dice_value <= 6:
            msg = f"unstable_dice_value must be a die face (1-6), got {self.unstable_dice_value}"
            raise ConfigurationError(msg)

    @classmethod
    def from_overrides(cls, overrides: Mapping[str, int | float | str | bool]) -> RaceRules:
        """Build rules from house-rule style key/value pairs."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(overrides) - known)
        if unknown:
            msg = f"Unknown rule(s): {', '.join(unknown)}. Known rules: {', '.join(sorted(known))}"
            raise ConfigurationError(msg)

        values: dict[str, int | float] = {}
        for key, value in overrides.items():
            if isinstance(value, bool) or not isinstance(value, int | float):
                msg = f"Rule '{key}' must be numeric, got {value!r}"
                raise ConfigurationError(msg)
            values[key] = value
        return cls(**values)  # pyright: ignore[reportArgumentType]


@dataclass(slots=True)
class RacerState:
    idx: int
    name: PilotName
    profile: MovementProfile
    position: float = 0
    last_effect: Effect = Effect.NORMAL
    is_automated: bool = True
    # Only changes how the CLI reports the result.
    is_primary: bool = False

    @property
    def repr(self) -> str:
        return f"{self.idx}:{self.name}"

    def has_won(self, track_length: int) -> bool:
        return self.position >= track_length

    def take_turn(self, rng: random.Random, rules: RaceRules) -> TurnOutcomeEvent:
        from kartsim.engine.turn import resolve_turn  # noqa: PLC0415

        return resolve_turn(self, rng, rules)

    def track_repr(self, track_length: int) -> str:
        """One-line track with the pilot's initial at its (clamped) position."""
        track = ["-"] * (track_length + 1)
        track[int(min(self.position, track_length))] = self.name[0]
        return "".join(track)


@dataclass(slots=True)
class RaceState:
    racers: list[RacerState]
    rules: RaceRules = field(default_factory=RaceRules)
    current_racer_idx: int = 0
    winner_idx: int | None = None
    turns_taken: int = 0

    def __post_init__(self) -> None:
        for slot, racer in enumerate(self.racers):
            if racer.idx != slot:
                msg = f"Racer {racer.repr} sits in slot {slot}; idx must match turn order."
                raise ConfigurationError(msg)

        primaries = [r.repr for r in self.racers if r.is_primary]
        if len(primaries) > 1:
            msg = f"At most one primary racer allowed, got {', '.join(primaries)}"
            raise ConfigurationError(msg)

    @property
    def race_over(self) -> bool:
        return self.winner_idx is not None

    @property
    def winner(self) -> RacerState | None:
        if self.winner_idx is None:
            return None
        return self.racers[self.winner_idx]

    @property
    def primary(self) -> RacerState | None:
        return next((r for r in self.racers if r.is_primary), None)


@dataclass(slots=True)
class LogContext:
    """Per-race logging state."""

    engine_id: int = 0
    round: int = 1
    turn_log_count: int = 0
    current_racer_repr: str = "_"

    def new_round(self):
        self.round += 1

    def start_turn_log(self, racer_repr: str):
        self.turn_log_count = 0
        self.current_racer_repr = racer_repr

    def inc_log_count(self):
        self.turn_log_count += 1
