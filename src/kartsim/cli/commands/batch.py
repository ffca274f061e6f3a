"""CLI command for Monte Carlo batches of seeded races."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path  # cappa needs this at runtime
from typing import Annotated

import cappa
import msgspec
import polars as pl
from tqdm import tqdm

from kartsim.cli.converters import parse_house_rules, validate_pilot_names
from kartsim.core.errors import KartSimError
from kartsim.core.types import PilotName
from kartsim.engine.logging import LOGGER_NAME
from kartsim.simulation.config import BatchConfig
from kartsim.simulation.metrics import results_frame, summarize_pilots
from kartsim.simulation.runner import SimulationResult, run_single_simulation


def run_batch(config: BatchConfig) -> list[SimulationResult]:
    results: list[SimulationResult] = []
    with tqdm(
        desc="Simulating",
        unit="race",
        total=config.runs,
        dynamic_ncols=True,
    ) as pbar:
        for race_config in config.race_configs():
            results.append(
                run_single_simulation(race_config, config.max_turns_per_race),
            )
            pbar.update(1)
    return results


@cappa.command(name="batch", help="Run many seeded races and summarize the results.")
@dataclass
class BatchCommand:
    config: Annotated[
        Path | None,
        cappa.Arg(short="-c", long="--config", help="Path to TOML batch config file."),
    ] = None

    runs: Annotated[
        int | None,
        cappa.Arg(short="-n", long="--runs", help="Override number of races."),
    ] = None

    racers: Annotated[
        list[PilotName] | None,
        cappa.Arg(
            short="-r",
            long="--racers",
            parse=validate_pilot_names,
            num_args=-1,
            help="Override the pilots in every race.",
        ),
    ] = None

    max_turns: Annotated[
        int | None,
        cappa.Arg(long="--turns", help="Override max turns per race."),
    ] = None

    seed_offset: Annotated[
        int | None,
        cappa.Arg(long="--seed-offset", help="Seed of the first race."),
    ] = None

    house_rules: Annotated[
        list[str] | None,
        cappa.Arg(
            short="-H",
            long="--houserule",
            num_args=-1,
            help="House rules as key=value.",
        ),
    ] = None

    def __call__(self) -> None:
        logging.getLogger(LOGGER_NAME).setLevel(logging.CRITICAL)

        # Load Config
        if self.config is not None:
            if not self.config.exists():
                msg = f"Config file not found: {self.config}"
                raise cappa.Exit(msg, code=1)
            try:
                batch_config = BatchConfig.from_toml(str(self.config))
            except msgspec.DecodeError as e:
                msg = f"Invalid config file: {e}"
                raise cappa.Exit(msg, code=1) from e
        else:
            batch_config = BatchConfig()

        # CLI overrides
        if self.runs is not None:
            batch_config.runs = self.runs
        if self.racers:
            batch_config.racers = self.racers
        if self.max_turns is not None:
            batch_config.max_turns_per_race = self.max_turns
        if self.seed_offset is not None:
            batch_config.seed_offset = self.seed_offset
        if self.house_rules:
            batch_config.rules.update(parse_house_rules(self.house_rules))

        if not batch_config.racers:
            raise cappa.Exit("No racers configured.", code=1)

        tqdm.write(f"Racers: {', '.join(batch_config.racers)}")
        tqdm.write(f"Runs: {batch_config.runs} (seeds from {batch_config.seed_offset})")
        if batch_config.rules:
            tqdm.write(f"House Rules: {batch_config.rules}")
        tqdm.write("")

        try:
            results = run_batch(batch_config)
        except KartSimError as e:
            raise cappa.Exit(str(e), code=1) from e

        completed = [r for r in results if not r.aborted]
        aborted = len(results) - len(completed)

        summary = summarize_pilots(results_frame(results))

        with pl.Config(tbl_rows=-1, float_precision=3, tbl_hide_dataframe_shape=True):
            tqdm.write(str(summary))

        avg_rounds = (
            sum(r.rounds for r in completed) / len(completed) if completed else 0.0
        )
        tqdm.write(
            f"""
    Completed: {len(completed)}
    Aborted:   {aborted}
    Avg rounds per race: {avg_rounds:.2f}
    """,
        )
