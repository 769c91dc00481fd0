from __future__ import annotations


class CoalitionOddsError(Exception):
    """Base error for the coalition probability pipeline."""


class ValidationError(CoalitionOddsError, ValueError):
    """Raised when caller input (survey, coalitions, counts) is malformed."""


class SeatAllocationError(CoalitionOddsError, RuntimeError):
    """Raised when an apportionment does not hand out exactly the seat total.

    This signals a ranking or tie-break bug, never bad input.
    """


class HurdleError(CoalitionOddsError, RuntimeError):
    """Raised when no party clears the hurdle in a simulated election."""
