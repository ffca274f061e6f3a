"""
Aggregate statistics over many simulated races.
Uses Polars for vectorized group-bys.
"""

from __future__ import annotations

from dataclasses import asdict
from typing import TYPE_CHECKING

import polars as pl

if TYPE_CHECKING:
    from collections.abc import Sequence

    from kartsim.simulation.runner import SimulationResult


def results_frame(results: Sequence[SimulationResult]) -> pl.DataFrame:
    """
    One row per racer per completed race.

    Aborted races are dropped since they have no winner.
    """
    rows = [
        {**asdict(metric), "seed": result.seed, "rounds": result.rounds}
        for result in results
        if not result.aborted
        for metric in result.metrics
    ]
    if not rows:
        return pl.DataFrame(
            schema={
                "config_hash": pl.String,
                "racer_id": pl.Int64,
                "racer_name": pl.String,
                "turns_taken": pl.Int64,
                "normal_turns": pl.Int64,
                "skid_turns": pl.Int64,
                "boost_turns": pl.Int64,
                "instability_skids": pl.Int64,
                "sum_dice_rolled": pl.Int64,
                "distance": pl.Float64,
                "final_position": pl.Float64,
                "won": pl.Boolean,
                "seed": pl.Int64,
                "rounds": pl.Int64,
            },
        )
    return pl.DataFrame(rows).with_columns(
        pl.col("distance").cast(pl.Float64),
        pl.col("final_position").cast(pl.Float64),
    )


def summarize_pilots(df_results: pl.DataFrame) -> pl.DataFrame:
    """
    Per pilot: races, wins, win rate, average finishing round of its wins,
    and the observed share of each turn effect.
    """
    return (
        df_results.group_by("racer_name")
        .agg(
            pl.len().alias("races"),
            pl.col("won").sum().alias("wins"),
            pl.col("rounds").filter(pl.col("won")).mean().alias("avg_winning_round"),
            pl.col("turns_taken").sum().alias("turns"),
            pl.col("normal_turns").sum().alias("normal"),
            pl.col("skid_turns").sum().alias("skid"),
            pl.col("boost_turns").sum().alias("boost"),
            pl.col("instability_skids").sum().alias("instability"),
        )
        .with_columns(
            (pl.col("wins") / pl.col("races")).alias("win_rate"),
            (pl.col("normal") / pl.col("turns")).alias("normal_rate"),
            (pl.col("skid") / pl.col("turns")).alias("skid_rate"),
            (pl.col("boost") / pl.col("turns")).alias("boost_rate"),
            (pl.col("instability") / pl.col("turns")).alias("instability_rate"),
        )
        .select(
            "racer_name",
            "races",
            "wins",
            "win_rate",
            "avg_winning_round",
            "normal_rate",
            "skid_rate",
            "boost_rate",
            "instability_rate",
        )
        .sort("win_rate", descending=True)
    )
