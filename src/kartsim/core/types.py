from __future__ import annotations

from enum import StrEnum
from typing import Literal

PilotName = Literal[
    "Mario",
    "Luigi",
    "Peach",
]


class Effect(StrEnum):
    NORMAL = "normal"
    SKID = "skid"
    BOOST = "boost"


SkidReason = Literal["Effect", "Instability"]

ErrorCode = Literal["MAX_TURNS_REACHED"]

D6Values = Literal[1, 2, 3, 4, 5, 6]
