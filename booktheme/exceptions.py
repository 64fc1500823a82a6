"""
Error types raised by the matching engine.
"""


class BookThemeError(Exception):
    """Base class for all matching engine errors."""


class NoCandidatesError(BookThemeError):
    """Raised when a match is requested against an empty song sequence."""


class MalformedEntityError(BookThemeError, ValueError):
    """Raised when a book or song is missing a required field or has a non-numeric one."""


class ValueRangeError(MalformedEntityError):
    """Raised under the ``reject`` range policy for values outside [0, 1]."""


class UnknownEntityError(BookThemeError, KeyError):
    """Raised when an id is not present in a catalogue or assignment mapping."""

    def __str__(self) -> str:
        # KeyError quotes its message by default
        return str(self.args[0]) if self.args else ""
