"""Exceptions raised by the race engine and its configuration layer."""

from __future__ import annotations


class KartSimError(Exception):
    """Base class for every error raised by kartsim."""


class ConfigurationError(KartSimError, ValueError):
    """Invalid setup detected before any turn is played."""


class UnknownProfileError(ConfigurationError):
    def __init__(self, identifier: str, known: tuple[str, ...]) -> None:
        self.identifier: str = identifier
        self.known: tuple[str, ...] = known
        super().__init__(
            f"Unknown pilot '{identifier}'. Known pilots: {', '.join(known)}",
        )


class PreconditionError(KartSimError, RuntimeError):
    """The race loop was asked to run in a state it cannot handle."""
