"""CLI command for running a single race."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from pathlib import Path  # cappa needs this at runtime
from typing import TYPE_CHECKING, Annotated, get_args

import cappa
import msgspec

from kartsim.cli.converters import (
    parse_house_rules,
    validate_pilot_name,
    validate_pilot_names,
)
from kartsim.core.errors import KartSimError, PreconditionError
from kartsim.core.state import RaceRules
from kartsim.core.types import PilotName
from kartsim.engine.logging import configure_logging
from kartsim.engine.scenario import RaceScenario, RacerConfig
from kartsim.simulation.config import PartialRaceConfig, RaceConfig

if TYPE_CHECKING:
    from kartsim.core.agent import Agent
    from kartsim.engine.race_engine import RaceEngine

logger = logging.getLogger(__name__)


class ConsoleAgent:
    """Waits for the player to press Enter before each roll."""

    def before_roll(self, engine: RaceEngine, racer_idx: int) -> None:
        racer = engine.get_racer(racer_idx)
        _ = input(f"\nPress [Enter] to roll the dice ({racer.name})...")


def build_roster(
    racers: list[PilotName],
    player: PilotName | None,
) -> tuple[list[PilotName], int | None]:
    """
    Final turn order and the slot of the human player.

    The player always drives slot 0. Without explicit racers the remaining
    catalog pilots join as bots.
    """
    if player is None:
        return (racers or list(get_args(PilotName))), None

    if racers:
        return [player, *racers], 0

    bots = [name for name in get_args(PilotName) if name != player]
    return [player, *bots], 0


def run_console_game(config: RaceConfig, max_turns: int = 200) -> None:
    """
    Execute the race and report the result through the log.

    Args:
        config: The race configuration.
        max_turns: Maximum number of turns allowed before abandoning the race.
    """
    logger.info(config.repr)
    logger.info("-" * 20)

    rules = RaceRules.from_overrides(config.rules)

    racer_configs = [
        RacerConfig(
            idx=i,
            name=name,
            is_automated=i != config.player_idx,
            is_primary=i == config.player_idx,
        )
        for i, name in enumerate(config.racers)
    ]
    agents: dict[int, Agent] = {}
    if config.player_idx is not None:
        agents[config.player_idx] = ConsoleAgent()

    scenario = RaceScenario(
        racers_config=racer_configs,
        seed=config.seed,
        rules=rules,
        agents=agents,
    )

    turn = 0
    while not scenario.state.race_over:
        if turn >= max_turns:
            logger.error(f"Race abandoned: Exceeded {max_turns} turns.")
            return
        _ = scenario.run_turn()
        turn += 1

    logger.info("-" * 20)
    winner = scenario.state.winner
    primary = scenario.state.primary
    if winner is None:
        msg = "Race loop ended without a winner."
        raise PreconditionError(msg)

    if primary is None:
        logger.info(f"{winner.repr} WINS the race!")
    elif primary.idx == winner.idx:
        logger.info(f"{winner.repr} WINS! You win the race.")
    else:
        logger.info(
            f"{winner.repr} WINS the race. You finished at "
            f"{min(primary.position, rules.track_length):g}/{rules.track_length}.",
        )


@cappa.command(
    name="game",
    help="Run a single race. Uses every catalog pilot if none are specified.",
)
@dataclass
class GameCommand:
    racers: Annotated[
        list[PilotName] | None,
        cappa.Arg(
            short="-r",
            long="--racers",
            parse=validate_pilot_names,
            num_args=-1,
            help="Space separated list of automated pilots.",
        ),
    ] = None
    player: Annotated[
        PilotName | None,
        cappa.Arg(
            short="-p",
            long="--player",
            parse=validate_pilot_name,
            help="Pilot for a human player, who presses Enter to roll.",
        ),
    ] = None
    seed: Annotated[
        int | None,
        cappa.Arg(short="-s", long="--seed", help="RNG seed."),
    ] = None

    config_file: Annotated[
        Path | None,
        cappa.Arg(short="-c", long="--config", help="Path to TOML config file."),
    ] = None
    encoding: Annotated[
        str | None,
        cappa.Arg(short="-e", long="--encoding", help="Base64 encoded configuration."),
    ] = None

    house_rules: Annotated[
        list[str] | None,
        cappa.Arg(
            short="-H",
            long="--houserule",
            num_args=-1,
            help="House rules as key=value, e.g. track_length=30.",
        ),
    ] = None

    max_turns: Annotated[
        int,
        cappa.Arg(long="--max-turns", help="Max turns before stopping."),
    ] = 200
    quiet: Annotated[
        bool,
        cappa.Arg(short="-q", long="--quiet", help="Only log warnings and errors."),
    ] = False

    def __call__(self):
        configure_logging(logging.WARNING if self.quiet else logging.INFO)

        final_racers: list[PilotName] = []
        final_player: PilotName | None = None
        final_seed: int = random.randint(0, 1000000)
        final_rules: dict[str, int | float] = {}

        # 1. Load File (Middle Priority)
        if self.config_file:
            if not self.config_file.exists():
                msg = f"Config file not found: {self.config_file}"
                raise cappa.Exit(msg, code=1)
            try:
                file_conf = PartialRaceConfig.from_toml(self.config_file)
            except msgspec.DecodeError as e:
                msg = f"Invalid TOML config: {e}"
                raise cappa.Exit(msg, code=1) from e

            if file_conf.racers:
                final_racers = validate_pilot_names(file_conf.racers)
            if file_conf.player:
                final_player = validate_pilot_name(file_conf.player)
            if file_conf.seed is not None:
                final_seed = file_conf.seed
            if file_conf.rules:
                final_rules.update(file_conf.rules)

        # 2. Load Encoding (High Priority - Overrides File)
        if self.encoding:
            try:
                decoded = RaceConfig.from_encoded(self.encoding)
            except (ValueError, msgspec.DecodeError) as e:
                msg = f"Invalid encoding: {e}"
                raise cappa.Exit(msg, code=1) from e
            final_racers = list(decoded.racers)
            final_seed = decoded.seed
            final_rules.update(decoded.rules)

        # 3. CLI Args (Highest Priority - Overrides Everything)
        if self.racers:
            final_racers = self.racers
        if self.player:
            final_player = self.player
        if self.seed is not None:
            final_seed = self.seed
        if self.house_rules:
            final_rules.update(parse_house_rules(self.house_rules))

        roster, player_idx = build_roster(final_racers, final_player)

        config = RaceConfig(
            racers=tuple(roster),
            seed=final_seed,
            player_idx=player_idx,
            rules=final_rules,
        )

        try:
            run_console_game(config, max_turns=self.max_turns)
        except KartSimError as e:
            raise cappa.Exit(str(e), code=1) from e
