"""Configuration schema for races and batch simulations using msgspec."""

from __future__ import annotations

import base64
import hashlib
import json
from pathlib import Path
from typing import get_args

import msgspec

from kartsim.core.types import PilotName


class RaceConfig(msgspec.Struct, frozen=True):
    """
    Immutable representation of a single race setup.
    Serves as both the execution config and the deduplication key.
    """

    racers: tuple[PilotName, ...]
    seed: int
    # Index of the human-controlled racer, if any
    player_idx: int | None = None
    rules: dict[str, int | float] = msgspec.field(default_factory=dict)

    def compute_hash(self) -> str:
        """Compute stable SHA-256 hash of this configuration."""
        canonical = json.dumps(
            {
                "racers": list(self.racers),
                "seed": self.seed,
                "rules": dict(sorted(self.rules.items())) if self.rules else {},
            },
            sort_keys=True,
            separators=(",", ":"),
        )
        return hashlib.sha256(canonical.encode("utf-8")).hexdigest()

    @property
    def encoded(self) -> str:
        """Shareable config string (Base64)."""
        data: dict[str, object] = {"racers": list(self.racers), "seed": self.seed}
        if self.rules:
            data["rules"] = self.rules

        canonical = json.dumps(data, sort_keys=True, separators=(",", ":"))
        return base64.urlsafe_b64encode(canonical.encode("utf-8")).decode("ascii")

    @classmethod
    def from_encoded(cls, encoded: str) -> RaceConfig:
        """Decode from shareable string."""
        json_str = base64.urlsafe_b64decode(encoded).decode("utf-8")
        return msgspec.json.decode(json_str, type=cls)

    @property
    def repr(self) -> str:
        """String representation for logging."""
        return f"{', '.join(self.racers)} (Seed: {self.seed}) - {self.encoded}"


class PartialRaceConfig(msgspec.Struct):
    """
    Partial configuration for loading a single race from TOML.
    Pilot names are free-form here and resolved case-insensitively later.
    """

    racers: list[str] | None = None
    player: str | None = None
    seed: int | None = None
    rules: dict[str, int | float] | None = None

    @classmethod
    def from_toml(cls, path: Path) -> PartialRaceConfig:
        with path.open("rb") as f:
            return msgspec.toml.decode(f.read(), type=cls)


class BatchConfig(msgspec.Struct):
    """
    TOML-backed configuration for batch race simulations.
    """

    racers: list[PilotName] = msgspec.field(
        default_factory=lambda: list(get_args(PilotName)),
    )
    runs: int = 1000
    seed_offset: int = 0
    max_turns_per_race: int = 500
    rules: dict[str, int | float] = msgspec.field(default_factory=dict)

    @classmethod
    def from_toml(cls, path: str) -> BatchConfig:
        """Load configuration from a TOML file path."""
        with Path(path).open("rb") as f:
            return msgspec.toml.decode(f.read(), type=cls)

    def race_configs(self) -> list[RaceConfig]:
        """One config per run, seeded consecutively from `seed_offset`."""
        racers = tuple(self.racers)
        return [
            RaceConfig(racers=racers, seed=self.seed_offset + i, rules=self.rules)
            for i in range(self.runs)
        ]
