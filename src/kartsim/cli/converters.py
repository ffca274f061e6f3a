from __future__ import annotations

import difflib
from typing import get_args

import cappa

from kartsim.core.registry import resolve_pilot_name
from kartsim.core.types import PilotName


def validate_pilot_name(value: str) -> PilotName:
    """
    Resolve a pilot name case-insensitively, suggesting close matches on failure.
    """
    name = resolve_pilot_name(value)
    if name is not None:
        return name

    matches = difflib.get_close_matches(
        value.strip().capitalize(),
        get_args(PilotName),
        n=3,
        cutoff=0.5,
    )

    msg = f"Pilot '{value}' not found."
    if matches:
        msg += f" Did you mean: {', '.join(matches)}?"
    else:
        msg += f" Choose from: {', '.join(get_args(PilotName))}."

    raise cappa.Exit(msg, code=1)


def validate_pilot_names(values: list[str]) -> list[PilotName]:
    return [validate_pilot_name(v) for v in values]


def parse_house_rules(value: list[str]) -> dict[str, int | float]:
    """
    Parse a list of key=value strings into a dictionary.
    Values must be numeric; whole numbers stay ints.
    """
    rules: dict[str, int | float] = {}
    for item in value:
        if "=" not in item:
            msg = f"Invalid house rule format '{item}'. Expected 'key=value'."
            raise cappa.Exit(msg, code=1)

        k, v = item.split("=", 1)
        k = k.strip()
        v = v.strip()

        try:
            rules[k] = int(v)
        except ValueError:
            try:
                rules[k] = float(v)
            except ValueError:
                msg = f"House rule '{k}' needs a numeric value, got '{v}'."
                raise cappa.Exit(msg, code=1) from None

    return rules
