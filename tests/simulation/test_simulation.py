from pathlib import Path

import msgspec
import pytest

from kartsim.core.errors import ConfigurationError
from kartsim.core.events import RaceFinishedEvent, TurnOutcomeEvent
from kartsim.core.types import Effect
from kartsim.simulation.config import BatchConfig, PartialRaceConfig, RaceConfig
from kartsim.simulation.metrics import results_frame, summarize_pilots
from kartsim.simulation.runner import run_single_simulation
from kartsim.simulation.telemetry import MetricsAggregator, RacerResult


def test_race_config_hash_is_stable_and_seed_sensitive():
    a = RaceConfig(racers=("Mario", "Luigi"), seed=1)
    b = RaceConfig(racers=("Mario", "Luigi"), seed=1)
    c = RaceConfig(racers=("Mario", "Luigi"), seed=2)

    assert a.compute_hash() == b.compute_hash()
    assert a.compute_hash() != c.compute_hash()


def test_race_config_encoding_round_trips_rules():
    config = RaceConfig(racers=("Peach", "Mario"), seed=42, rules={"track_length": 30})

    decoded = RaceConfig.from_encoded(config.encoded)

    assert decoded.racers == config.racers
    assert decoded.seed == 42
    assert decoded.rules == {"track_length": 30}


def test_race_config_rejects_unknown_pilots():
    with pytest.raises(msgspec.ValidationError):
        msgspec.json.decode(b'{"racers": ["Bowser"], "seed": 1}', type=RaceConfig)


def test_partial_race_config_from_toml(tmp_path: Path):
    path = tmp_path / "race.toml"
    path.write_text('racers = ["mario", "PEACH"]\nplayer = "luigi"\nseed = 5\n\n[rules]\ntrack_length = 25\n')

    conf = PartialRaceConfig.from_toml(path)

    assert conf.racers == ["mario", "PEACH"]
    assert conf.player == "luigi"
    assert conf.seed == 5
    assert conf.rules == {"track_length": 25}


def test_batch_config_defaults_and_seeds(tmp_path: Path):
    path = tmp_path / "batch.toml"
    path.write_text('racers = ["Mario", "Peach"]\nruns = 3\nseed_offset = 10\n')

    conf = BatchConfig.from_toml(str(path))
    configs = conf.race_configs()

    assert conf.max_turns_per_race == 500
    assert [c.seed for c in configs] == [10, 11, 12]
    assert all(c.racers == ("Mario", "Peach") for c in configs)


def test_batch_config_uses_every_pilot_by_default():
    assert BatchConfig().racers == ["Mario", "Luigi", "Peach"]


def test_single_simulation_records_every_turn():
    result = run_single_simulation(RaceConfig(racers=("Mario", "Luigi", "Peach"), seed=3))

    assert not result.aborted
    assert result.winner_name in {"Mario", "Luigi", "Peach"}
    assert sum(m.turns_taken for m in result.metrics) == result.turn_count
    assert [m.won for m in result.metrics].count(True) == 1

    winner = next(m for m in result.metrics if m.won)
    assert winner.final_position >= 20
    for m in result.metrics:
        assert m.normal_turns + m.skid_turns + m.boost_turns == m.turns_taken
        assert m.distance == m.final_position


def test_single_simulation_turn_cap_aborts():
    config = RaceConfig(racers=("Luigi",), seed=0, rules={"track_length": 10_000})

    result = run_single_simulation(config, max_turns=5)

    assert result.error_code == "MAX_TURNS_REACHED"
    assert result.aborted
    assert result.turn_count == 5
    assert result.winner_name is None


def test_single_simulation_rejects_bad_rules():
    with pytest.raises(ConfigurationError):
        run_single_simulation(RaceConfig(racers=("Mario",), seed=0, rules={"track_length": -1}))


def test_pilot_summary():
    results = [
        run_single_simulation(config)
        for config in BatchConfig(runs=300).race_configs()
    ]

    df = results_frame(results)
    summary = summarize_pilots(df)

    assert df.height == 900
    assert set(summary["racer_name"].to_list()) == {"Mario", "Luigi", "Peach"}
    assert summary["races"].to_list() == [300, 300, 300]
    assert summary["wins"].sum() == 300
    assert summary["win_rate"].sum() == pytest.approx(1.0)

    # Only Peach is unstable enough to skid on a six
    instability = dict(zip(summary["racer_name"], summary["instability_rate"], strict=True))
    assert instability["Mario"] == 0
    assert instability["Luigi"] == 0
    assert instability["Peach"] > 0


def test_results_frame_drops_aborted_races():
    aborted = run_single_simulation(
        RaceConfig(racers=("Luigi",), seed=0, rules={"track_length": 10_000}),
        max_turns=1,
    )

    df = results_frame([aborted])

    assert df.height == 0
    assert summarize_pilots(df).height == 0


def test_aggregator_keeps_running_totals_per_racer():
    aggregator = MetricsAggregator(config_hash="abc")
    aggregator.results[0] = RacerResult(config_hash="abc", racer_id=0, racer_name="Peach")

    events = [
        TurnOutcomeEvent(racer_idx=0, racer_name="Peach", dice=4, effect=Effect.NORMAL, delta=12, position=12),
        TurnOutcomeEvent(
            racer_idx=0,
            racer_name="Peach",
            dice=6,
            effect=Effect.NORMAL,
            delta=0,
            position=12,
            skid_reason="Instability",
        ),
        TurnOutcomeEvent(racer_idx=0, racer_name="Peach", dice=3, effect=Effect.BOOST, delta=10, position=22),
        RaceFinishedEvent(winner_idx=0, winner_name="Peach", position=22, turns_taken=3),
    ]
    for event in events:
        aggregator.on_event(event)

    stats = aggregator.results[0]
    assert stats.turns_taken == 3
    assert stats.normal_turns == 2
    assert stats.boost_turns == 1
    assert stats.instability_skids == 1
    assert stats.sum_dice_rolled == 13
    assert stats.distance == 22
    assert stats.won
    assert list(aggregator.__slots__) == ["config_hash", "results"]
