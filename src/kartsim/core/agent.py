from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from kartsim.engine.race_engine import RaceEngine


@runtime_checkable
class Agent(Protocol):
    """
    Input-collection capability for one racer.

    The engine calls `before_roll` at the start of every turn, before any
    randomness is drawn. Agents never influence the outcome of a turn.
    """

    def before_roll(self, engine: RaceEngine, racer_idx: int) -> None: ...


class AutoAgent:
    """Agent for automated racers: rolls straight away."""

    def before_roll(self, engine: RaceEngine, racer_idx: int) -> None:
        _ = engine, racer_idx
