import logging

import cappa
import pytest

from kartsim.__main__ import Main
from kartsim.cli.commands.batch import BatchCommand
from kartsim.cli.commands.game import GameCommand, build_roster, run_console_game
from kartsim.cli.converters import (
    parse_house_rules,
    validate_pilot_name,
    validate_pilot_names,
)
from kartsim.core.errors import ConfigurationError
from kartsim.simulation.config import RaceConfig


def test_validate_pilot_names_normalizes_case():
    assert validate_pilot_names(["mario", " PEACH "]) == ["Mario", "Peach"]


def test_validate_pilot_name_suggests_close_matches():
    with pytest.raises(cappa.Exit) as excinfo:
        validate_pilot_name("Luigee")

    assert excinfo.value.code == 1
    assert "Did you mean: Luigi" in str(excinfo.value.message)


def test_validate_pilot_name_lists_choices_without_match():
    with pytest.raises(cappa.Exit) as excinfo:
        validate_pilot_name("Zzz")

    assert "Choose from: Mario, Luigi, Peach" in str(excinfo.value.message)


def test_parse_house_rules():
    assert parse_house_rules(["track_length=30", "instability_threshold=1.5"]) == {
        "track_length": 30,
        "instability_threshold": 1.5,
    }


@pytest.mark.parametrize("bad", ["track_length", "track_length=long"])
def test_parse_house_rules_rejects_bad_input(bad: str):
    with pytest.raises(cappa.Exit) as excinfo:
        parse_house_rules([bad])

    assert excinfo.value.code == 1


def test_roster_defaults_to_every_pilot():
    assert build_roster([], None) == (["Mario", "Luigi", "Peach"], None)


def test_roster_adds_the_other_pilots_as_bots():
    assert build_roster([], "Luigi") == (["Luigi", "Mario", "Peach"], 0)


def test_roster_with_explicit_bots():
    assert build_roster(["Peach", "Peach"], "Mario") == (["Mario", "Peach", "Peach"], 0)


def test_console_game_reports_the_winner(caplog: pytest.LogCaptureFixture):
    caplog.set_level(logging.INFO, logger="kartsim.cli.commands.game")

    run_console_game(RaceConfig(racers=("Mario", "Luigi", "Peach"), seed=11))

    assert any("WINS the race!" in m for m in caplog.messages)


def test_console_game_with_human_player(monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture):
    prompts: list[str] = []
    monkeypatch.setattr("builtins.input", lambda msg="": prompts.append(msg) or "")
    caplog.set_level(logging.INFO, logger="kartsim.cli.commands.game")

    run_console_game(RaceConfig(racers=("Peach", "Mario"), seed=4, player_idx=0))

    assert prompts
    assert all("(Peach)" in p for p in prompts)
    assert any("You win the race." in m or "You finished at" in m for m in caplog.messages)


def test_console_game_gives_up_after_max_turns(caplog: pytest.LogCaptureFixture):
    caplog.set_level(logging.INFO, logger="kartsim.cli.commands.game")

    run_console_game(
        RaceConfig(racers=("Luigi",), seed=1, rules={"track_length": 10_000}),
        max_turns=3,
    )

    assert any("Race abandoned" in m for m in caplog.messages)


def test_console_game_rejects_unknown_rules():
    with pytest.raises(ConfigurationError):
        run_console_game(RaceConfig(racers=("Mario",), seed=1, rules={"laps": 3}))


def test_game_command_turns_bad_rules_into_exit():
    command = GameCommand(racers=["Mario"], seed=1, house_rules=["track_length=20.5"], quiet=True)

    with pytest.raises(cappa.Exit) as excinfo:
        command()

    assert excinfo.value.code == 1
    assert "track_length must be a whole number" in str(excinfo.value.message)


def test_game_command_missing_config(tmp_path):
    command = GameCommand(config_file=tmp_path / "missing.toml", quiet=True)

    with pytest.raises(cappa.Exit) as excinfo:
        command()

    assert excinfo.value.code == 1


def test_batch_command_prints_summary(capsys: pytest.CaptureFixture[str]):
    cappa.invoke(Main, argv=["batch", "-n", "25", "--seed-offset", "100"])

    out = capsys.readouterr().out
    assert "Completed: 25" in out
    assert "Aborted:   0" in out
    for name in ("Mario", "Luigi", "Peach"):
        assert name in out


def test_batch_command_missing_config(tmp_path):
    with pytest.raises(cappa.Exit) as excinfo:
        BatchCommand(config=tmp_path / "missing.toml")()

    assert excinfo.value.code == 1
    assert "Config file not found" in str(excinfo.value.message)


@pytest.mark.parametrize(
    ("rule", "expected"),
    [
        ("track_length=0", "track_length must be positive"),
        ("special_effect_odds=2.5", "special_effect_odds must be a whole number"),
    ],
)
def test_batch_command_reports_bad_rules(rule: str, expected: str):
    with pytest.raises(cappa.Exit) as excinfo:
        BatchCommand(runs=2, house_rules=[rule])()

    assert excinfo.value.code == 1
    assert expected in str(excinfo.value.message)


def test_unknown_pilot_stops_the_cli():
    with pytest.raises(cappa.Exit):
        cappa.invoke(Main, argv=["game", "-r", "Bowser"])
