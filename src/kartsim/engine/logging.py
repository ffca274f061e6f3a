from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, get_args, override

from rich.highlighter import Highlighter
from rich.logging import RichHandler

from kartsim.core.palettes import get_pilot_color
from kartsim.core.types import PilotName

if TYPE_CHECKING:
    from rich.text import Text

    from kartsim.core.state import LogContext

LOGGER_NAME = "kartsim"

PILOT_NAMES = set(get_args(PilotName))

# Captures "0:Mario" or "2•Peach"
# Group 1 (prefix): "0:" or "2•"
# Group 2 (name): "Mario"
PILOT_COMPOSITE_PATTERN = re.compile(
    rf"(?P<prefix>[\d\.]*[:•])(?P<name>{'|'.join(map(re.escape, sorted(PILOT_NAMES)))})\b",
)

COLOR = {
    "move": "bold #23d18b",  # light green
    "boost": "bold #ffaf00",  # orange
    "skid": "bold bright_red",
    "winner": "bold #f5f543",  # yellow
    "prefix": "grey50",
    "dice_roll": "bold #29b8db",  # cyan
    "track": "grey62",
}


class ContextFilter(logging.Filter):
    """Inject per-race runtime context into every log record."""

    def __init__(self, log_context: LogContext, name: str = "") -> None:
        super().__init__(name)
        self.log_context: LogContext = log_context

    @override
    def filter(self, record: logging.LogRecord) -> bool:
        logctx = self.log_context
        record.race_round = logctx.round
        record.turn_log_count = logctx.turn_log_count
        record.racer_repr = logctx.current_racer_repr
        record.engine_id = logctx.engine_id
        logctx.inc_log_count()
        return True


class RichMarkupFormatter(logging.Formatter):
    @override
    def format(self, record: logging.LogRecord) -> str:
        race_round = getattr(record, "race_round", 0)
        turn_log_count = getattr(record, "turn_log_count", 0)
        racer_repr = getattr(record, "racer_repr", "_")
        engine_id = getattr(record, "engine_id", 0)

        prefix = f"{engine_id} {race_round}.{racer_repr}.{turn_log_count}"
        message = record.getMessage()

        # The highlighter applies stronger colors on top of the grey prefix.
        return f"[{COLOR['prefix']}]{prefix:<16}[/{COLOR['prefix']}]  {message}"


class RaceLogHighlighter(Highlighter):
    @override
    def highlight(self, text: Text) -> None:
        text.highlight_regex(r"\bMoves\b", COLOR["move"])
        text.highlight_regex(r"\bBOOST\b", COLOR["boost"])
        text.highlight_regex(r"\bSKID\b", COLOR["skid"])
        text.highlight_regex(r"\bInstability\b", COLOR["skid"])
        text.highlight_regex(r"\bDice Roll\b", COLOR["dice_roll"])
        text.highlight_regex(r"\bWINS\b", COLOR["winner"])
        text.highlight_regex(r"\|[A-Z-]+\|", COLOR["track"])

        for match in PILOT_COMPOSITE_PATTERN.finditer(text.plain):
            prefix_span = match.span("prefix")
            name_span = match.span("name")
            hex_color = get_pilot_color(match.group("name"))

            if prefix_span[0] != -1:
                text.stylize(hex_color, start=prefix_span[0], end=prefix_span[1])

            text.stylize("bold white", start=name_span[0], end=name_span[1])


def configure_logging(level: int = logging.INFO) -> None:
    logger = logging.getLogger()
    logger.setLevel(level)
    handler = RichHandler(
        markup=True,
        show_path=False,
        show_time=False,
        highlighter=RaceLogHighlighter(),
    )
    handler.setFormatter(RichMarkupFormatter())
    logger.handlers.clear()
    logger.addHandler(handler)
