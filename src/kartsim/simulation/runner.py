"""Core simulation execution logic."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import TYPE_CHECKING

from kartsim.core.state import RaceRules
from kartsim.engine.scenario import RaceScenario, RacerConfig
from kartsim.simulation.telemetry import MetricsAggregator

if TYPE_CHECKING:
    from kartsim.core.events import RaceEvent
    from kartsim.core.types import ErrorCode, PilotName
    from kartsim.engine.race_engine import RaceEngine
    from kartsim.simulation.config import RaceConfig
    from kartsim.simulation.telemetry import RacerResult


@dataclass(slots=True)
class SimulationResult:
    """Result of a single race simulation."""

    config_hash: str
    seed: int
    timestamp: float
    execution_time_ms: float
    error_code: ErrorCode | None
    turn_count: int
    rounds: int
    winner_name: PilotName | None
    metrics: list[RacerResult]

    @property
    def aborted(self) -> bool:
        return self.error_code is not None


def run_single_simulation(
    config: RaceConfig,
    max_turns: int | None = None,
    *,
    verbose: bool = False,
) -> SimulationResult:
    """
    Execute one race and return aggregated metrics.

    The engine itself has no turn cap; `max_turns` lets batch runs give up
    on a race and flag it with MAX_TURNS_REACHED instead.
    """
    start_time = time.perf_counter()
    timestamp = time.time()

    config_hash = config.compute_hash()

    scenario = RaceScenario(
        racers_config=[
            RacerConfig(idx=i, name=name) for i, name in enumerate(config.racers)
        ],
        seed=config.seed,
        rules=RaceRules.from_overrides(config.rules),
        verbose=verbose,
    )

    engine = scenario.engine
    aggregator = MetricsAggregator(config_hash=config_hash)
    aggregator.initialize_racers(engine)

    def on_event(_: RaceEngine, event: RaceEvent):
        aggregator.on_event(event)

    engine.on_event_processed = on_event

    error_code: ErrorCode | None = None
    turn_counter = 0

    while not engine.state.race_over:
        if max_turns is not None and turn_counter >= max_turns:
            error_code = "MAX_TURNS_REACHED"
            break
        _ = scenario.run_turn()
        turn_counter += 1

    execution_time_ms = (time.perf_counter() - start_time) * 1000
    winner = engine.state.winner

    return SimulationResult(
        config_hash=config_hash,
        seed=config.seed,
        timestamp=timestamp,
        execution_time_ms=execution_time_ms,
        error_code=error_code,
        turn_count=turn_counter,
        rounds=engine.log_context.round,
        winner_name=winner.name if winner is not None else None,
        metrics=aggregator.finalize_metrics(engine),
    )
