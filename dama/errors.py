"""
Dama error hierarchy.

Every error raised by the engine or the session layer derives from DamaError,
so callers can catch the whole family at once:

    from dama.errors import DamaError, IllegalAction

    try:
        session.play(action)
    except IllegalAction as e:
        log.warning("Rejected: %s", e)
"""
from __future__ import annotations

__all__ = [
    "DamaError",
    "IllegalAction",
    "OutOfBounds",
    "ConfigurationError",
]


class DamaError(Exception):
    """Base class for all dama errors."""


class IllegalAction(DamaError, ValueError):
    """Action does not match the position it is applied to.

    Raised for a missing or foreign piece at the start square, a stale
    jumped cell, an occupied landing square, or an action outside the
    current legal set. Refetch the legal actions before retrying.
    """


class OutOfBounds(DamaError, ValueError):
    """Rank, file, index or square name outside the 8x8 board."""


class ConfigurationError(DamaError, ValueError):
    """Invalid settings value."""
