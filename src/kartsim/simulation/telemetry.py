from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from kartsim.core.events import RaceFinishedEvent, TurnOutcomeEvent
from kartsim.core.types import Effect

if TYPE_CHECKING:
    from kartsim.core.events import RaceEvent
    from kartsim.core.types import PilotName
    from kartsim.engine.race_engine import RaceEngine


@dataclass(slots=True)
class RacerResult:
    """Result of one racer in a specific race."""

    config_hash: str
    racer_id: int
    racer_name: PilotName

    turns_taken: int = 0
    normal_turns: int = 0
    skid_turns: int = 0
    boost_turns: int = 0
    # Turns lost to rolling the unstable dice value with a low-stability profile
    instability_skids: int = 0
    sum_dice_rolled: int = 0
    distance: float = 0.0
    final_position: float = 0.0
    won: bool = False


@dataclass(slots=True)
class MetricsAggregator:
    """Collects per-racer statistics from the engine's event stream."""

    config_hash: str

    results: dict[int, RacerResult] = field(default_factory=dict)

    def initialize_racers(self, engine: RaceEngine) -> None:
        for racer in engine.state.racers:
            self.results[racer.idx] = RacerResult(
                config_hash=self.config_hash,
                racer_id=racer.idx,
                racer_name=racer.name,
            )

    def on_event(self, event: RaceEvent) -> None:
        match event:
            case TurnOutcomeEvent():
                stats = self.results[event.racer_idx]
                stats.turns_taken += 1
                stats.sum_dice_rolled += event.dice
                stats.distance += event.delta

                match event.effect:
                    case Effect.NORMAL:
                        stats.normal_turns += 1
                    case Effect.SKID:
                        stats.skid_turns += 1
                    case Effect.BOOST:
                        stats.boost_turns += 1

                if event.skid_reason == "Instability":
                    stats.instability_skids += 1

            case RaceFinishedEvent():
                self.results[event.winner_idx].won = True

            case _:
                pass

    def finalize_metrics(self, engine: RaceEngine) -> list[RacerResult]:
        output: list[RacerResult] = []
        for racer in engine.state.racers:
            stats = self.results[racer.idx]
            stats.final_position = float(racer.position)
            output.append(stats)
        return output
