from kartsim.core.types import PilotName

PILOT_COLORS: dict[PilotName, str] = {
    "Mario": "#E52521",  # Red
    "Luigi": "#43B047",  # Green
    "Peach": "#F699CD",  # Pink
}


def get_pilot_color(name: str) -> str:
    return PILOT_COLORS.get(name, "#FFFFFF")  # pyright: ignore[reportArgumentType, reportCallIssue]
