from __future__ import annotations

from dataclasses import dataclass

from kartsim.core.errors import ConfigurationError


@dataclass(frozen=True, slots=True)
class MovementProfile:
    """
    Per-pilot tuning.

    `speed` scales the dice value into distance, `stability` decides whether a
    maximum roll makes the kart skid. Positions are never rounded, so
    fractional factors give fractional positions.
    """

    speed: float
    stability: float

    def __post_init__(self) -> None:
        if self.speed <= 0:
            msg = f"speed must be positive, got {self.speed}"
            raise ConfigurationError(msg)
        if self.stability <= 0:
            msg = f"stability must be positive, got {self.stability}"
            raise ConfigurationError(msg)

    def move(self, position: float, dice_value: int) -> float:
        return position + self.speed * dice_value
