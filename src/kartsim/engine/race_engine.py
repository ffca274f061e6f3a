from __future__ import annotations

import logging
import random
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from kartsim.core.agent import AutoAgent
from kartsim.core.errors import PreconditionError
from kartsim.core.events import RaceFinishedEvent
from kartsim.core.state import LogContext, RaceRules, RaceState
from kartsim.core.types import Effect
from kartsim.engine.logging import LOGGER_NAME, ContextFilter

if TYPE_CHECKING:
    from collections.abc import Sequence

    from kartsim.core.agent import Agent
    from kartsim.core.events import RaceEvent, TurnOutcomeEvent
    from kartsim.core.state import RacerState


@dataclass
class RaceEngine:
    state: RaceState
    rng: random.Random
    log_context: LogContext = field(default_factory=LogContext)
    agents: dict[int, Agent] = field(default_factory=dict)

    # Callback for external observers (renderers, telemetry)
    on_event_processed: Callable[[RaceEngine, RaceEvent], None] | None = None
    verbose: bool = True
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.log_context.engine_id = id(self) % 10_000
        self._logger = logging.getLogger(LOGGER_NAME).getChild(
            f"engine.{self.log_context.engine_id}",
        )

        # Engine ids repeat once an old engine has been garbage collected
        for old_filter in list(self._logger.filters):
            if isinstance(old_filter, ContextFilter):
                self._logger.removeFilter(old_filter)

        if self.verbose:
            self._logger.addFilter(ContextFilter(self.log_context))

        for racer in self.state.racers:
            _ = self.agents.setdefault(racer.idx, AutoAgent())

    # --- Main Loop ---
    def run_race(self) -> RacerState:
        """Play turns in round-robin order until someone crosses the line."""
        self._require_racers()
        self.log_info(
            f"=== RACE START: {', '.join(r.repr for r in self.state.racers)} "
            f"(track length {self.state.rules.track_length}) ===",
        )
        while True:
            _ = self.run_turn()
            winner = self.state.winner
            if winner is not None:
                return winner
            self._advance_turn()

    def run_turn(self) -> TurnOutcomeEvent:
        """Play exactly one turn for the current racer and check only that racer."""
        self._require_racers()
        if self.state.race_over:
            msg = "Race is already finished."
            raise PreconditionError(msg)

        racer = self.get_racer(self.state.current_racer_idx)
        self.log_context.start_turn_log(racer.repr)
        self.log_debug(f"=== START TURN: {racer.repr} ===")

        self.get_agent(racer.idx).before_roll(self, racer.idx)

        outcome = racer.take_turn(self.rng, self.state.rules)
        self.state.turns_taken += 1
        self._log_outcome(outcome, racer)
        self._emit(outcome)

        if racer.has_won(self.state.rules.track_length):
            self.state.winner_idx = racer.idx
            self.log_info(
                f"{racer.repr} WINS after {self.state.turns_taken} turns "
                f"(round {self.log_context.round}) at {_fmt(racer.position)}!",
            )
            self._emit(
                RaceFinishedEvent(
                    winner_idx=racer.idx,
                    winner_name=racer.name,
                    position=racer.position,
                    turns_taken=self.state.turns_taken,
                ),
            )

        return outcome

    def _advance_turn(self) -> None:
        if self.state.race_over:
            return

        curr = self.state.current_racer_idx
        next_idx = (curr + 1) % len(self.state.racers)

        # A new round starts when we wrap around to the first racer
        if next_idx <= curr:
            self.log_context.new_round()

        self.state.current_racer_idx = next_idx

    def _require_racers(self) -> None:
        if not self.state.racers:
            msg = "Cannot run a race without participants."
            raise PreconditionError(msg)

    def _emit(self, event: RaceEvent) -> None:
        if self.on_event_processed:
            self.on_event_processed(self, event)

    def _log_outcome(self, outcome: TurnOutcomeEvent, racer: RacerState) -> None:
        self.log_info(f"Dice Roll: {outcome.dice} | Effect: {outcome.effect.upper()}")
        match outcome.skid_reason:
            case "Effect":
                self.log_info(f"{racer.repr} hits a SKID and stays put.")
            case "Instability":
                self.log_info(
                    f"{racer.repr} SKID: Instability on a {outcome.dice} "
                    f"(stability {_fmt(racer.profile.stability)}).",
                )
            case None:
                if outcome.effect is Effect.BOOST:
                    self.log_info(
                        f"{racer.repr} gets a BOOST (+{self.state.rules.boost_bonus}).",
                    )
                self.log_info(
                    f"{racer.repr} Moves {_fmt(outcome.delta)} -> {_fmt(outcome.position)}",
                )
        self.log_info(f"|{racer.track_repr(self.state.rules.track_length)}|")

    # -- Getters for convenience --
    def get_agent(self, racer_idx: int) -> Agent:
        return self.agents[racer_idx]

    def get_racer(self, idx: int) -> RacerState:
        return self.state.racers[idx]

    def get_racer_pos(self, idx: int) -> float:
        return self.state.racers[idx].position

    # -- Logging --
    def _log(self, level: int, msg: str, *args: Any, **kwargs: Any) -> None:
        """Core logging helper; respects engine verbosity."""
        if not self.verbose:
            return
        self._logger.log(level, msg, *args, **kwargs)

    def log_debug(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._log(logging.DEBUG, msg, *args, **kwargs)

    def log_info(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._log(logging.INFO, msg, *args, **kwargs)


def _fmt(value: float) -> str:
    return f"{value:g}"


def run_race(
    participants: Sequence[RacerState],
    rng: random.Random | None = None,
    rules: RaceRules | None = None,
    *,
    verbose: bool = False,
) -> RacerState:
    """Run one race on a fresh engine and return the winner."""
    if not participants:
        msg = "Cannot run a race without participants."
        raise PreconditionError(msg)

    engine = RaceEngine(
        RaceState(list(participants), rules=rules or RaceRules()),
        rng or random.Random(),
        verbose=verbose,
    )
    return engine.run_race()
