import logging

import pytest
from tests.test_utils import ScriptedScenario

from kartsim.engine.logging import LOGGER_NAME


@pytest.fixture(autouse=True)
def _quiet_engine_logs():
    logging.getLogger(LOGGER_NAME).setLevel(logging.WARNING)


@pytest.fixture
def scenario():
    """Factory fixture to create scripted scenarios."""

    def _builder(racers_config, dice_rolls=None, effects=None, rules=None):
        return ScriptedScenario(racers_config, dice_rolls, effects, rules)

    return _builder
