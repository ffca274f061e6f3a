from __future__ import annotations

import random
from dataclasses import dataclass
from typing import TYPE_CHECKING

from kartsim.core.registry import create_racer
from kartsim.core.state import LogContext, RaceRules, RaceState
from kartsim.engine.race_engine import RaceEngine

if TYPE_CHECKING:
    from kartsim.core.agent import Agent
    from kartsim.core.state import RacerState


@dataclass
class RacerConfig:
    idx: int
    name: str
    start_pos: float = 0
    is_automated: bool = True
    is_primary: bool = False


class RaceScenario:
    """
    Builds a ready-to-run engine from pilot names.
    """

    def __init__(
        self,
        racers_config: list[RacerConfig],
        seed: int | None = None,
        rules: RaceRules | None = None,
        agents: dict[int, Agent] | None = None,
        rng: random.Random | None = None,
        *,
        verbose: bool = True,
    ):
        racers: list[RacerState] = []
        for cfg in racers_config:
            racer = create_racer(
                cfg.idx,
                cfg.name,
                is_automated=cfg.is_automated,
                is_primary=cfg.is_primary,
            )
            racer.position = cfg.start_pos
            racers.append(racer)

        self.rng: random.Random = rng if rng is not None else random.Random(seed)
        self.state: RaceState = RaceState(racers, rules=rules or RaceRules())
        self.engine: RaceEngine = RaceEngine(
            self.state,
            self.rng,
            log_context=LogContext(),
            agents=dict(agents or {}),
            verbose=verbose,
        )

    def run_turn(self):
        outcome = self.engine.run_turn()
        self.engine._advance_turn()
        return outcome

    def run_turns(self, n: int):
        return [self.run_turn() for _ in range(n)]

    def run_race(self) -> RacerState:
        return self.engine.run_race()

    def get_racer(self, idx: int) -> RacerState:
        return self.engine.get_racer(idx)
