import inspect
from typing import Callable, Dict, Optional, Union

import numpy as np

from coalition_odds.model.errors import SeatAllocationError, ValidationError
from coalition_odds.model.posterior import make_rng

# f(votes, seats_total) or f(votes, seats_total, rng=...) -> seats per party
Apportion = Callable[..., np.ndarray]


def _check_inputs(votes, seats_total: int) -> np.ndarray:
    if int(seats_total) != seats_total or seats_total < 1:
        raise ValidationError(f"seats_total must be a positive integer, got {seats_total}")
    v = np.asarray(votes, dtype=float)
    if v.ndim != 1 or v.size == 0:
        raise ValidationError("votes must be a non-empty one-dimensional vector")
    if not np.isfinite(v).all() or (v < 0).any():
        raise ValidationError("votes must be finite and non-negative")
    if v.sum() <= 0:
        raise ValidationError("at least one party needs a positive number of votes")
    return v


def highest_averages(
    votes,
    seats_total: int,
    divisors: np.ndarray,
    rng: Optional[np.random.Generator] = None,
) -> np.ndarray:
    """
    Allocate seats by ranking all ``vote / divisor`` quotients.

    Every party gets one quotient per divisor; the ``seats_total`` largest
    quotients each win a seat for the party they came from. Equal quotients
    are ordered by a uniform random key, so ties at the cutoff are broken at
    random.

    Args:
        votes: Votes (or shares) per party, already filtered for eligibility
        seats_total: Number of seats to hand out
        divisors: Increasing divisor sequence, at least ``seats_total`` long
        rng: Random stream for the tie-break

    Returns:
        Integer seats per party, in the order of ``votes``
    """
    v = _check_inputs(votes, seats_total)
    rng = rng if rng is not None else make_rng()
    seats_total = int(seats_total)

    quotients = (v[:, None] / divisors[None, :seats_total]).ravel()
    owners = np.repeat(np.arange(v.size), min(seats_total, divisors.size))
    tiebreak = rng.random(quotients.size)
    # lexsort sorts by the last key first: quotient descending, then random key
    top = np.lexsort((tiebreak, -quotients))[:seats_total]
    seats = np.bincount(owners[top], minlength=v.size)

    if seats.sum() != seats_total:
        raise SeatAllocationError(
            f"Number of seats distributed ({seats.sum()}) not equal to {seats_total}"
        )
    return seats


def sainte_lague(votes, seats_total: int, rng: Optional[np.random.Generator] = None) -> np.ndarray:
    """Sainte-Laguë/Schepers: divisors 1, 3, 5, ..."""
    divisors = 2.0 * np.arange(int(seats_total)) + 1.0
    return highest_averages(votes, seats_total, divisors, rng=rng)


def dhondt(votes, seats_total: int, rng: Optional[np.random.Generator] = None) -> np.ndarray:
    """D'Hondt: divisors 1, 2, 3, ..."""
    divisors = np.arange(int(seats_total)) + 1.0
    return highest_averages(votes, seats_total, divisors, rng=rng)


APPORTIONMENT_METHODS: Dict[str, Apportion] = {
    "sainte_lague": sainte_lague,
    "dhondt": dhondt,
}


def get_apportionment(method: Union[str, Apportion]) -> Apportion:
    """Resolve an apportionment function from its name, or pass a callable through."""
    if callable(method):
        return method
    try:
        return APPORTIONMENT_METHODS[method]
    except KeyError:
        raise ValidationError(
            f"Unknown apportionment method {method!r}, "
            f"expected one of {sorted(APPORTIONMENT_METHODS)}"
        ) from None


def accepts_rng(apportion: Apportion) -> bool:
    """Whether an apportionment function takes the ``rng`` keyword."""
    try:
        params = inspect.signature(apportion).parameters
    except (TypeError, ValueError):
        return False
    return "rng" in params or any(p.kind is inspect.Parameter.VAR_KEYWORD for p in params.values())


def apportion_seats(
    apportion: Apportion,
    votes,
    seats_total: int,
    rng: Optional[np.random.Generator] = None,
) -> np.ndarray:
    """Call an apportionment function, handing over ``rng`` only if it takes one."""
    if accepts_rng(apportion):
        seats = apportion(votes, seats_total, rng=rng)
    else:
        seats = apportion(votes, seats_total)
    seats = np.asarray(seats)
    if seats.shape != np.shape(votes) or seats.sum() != seats_total:
        raise SeatAllocationError(
            f"Apportionment returned {seats.tolist()} for {seats_total} seats "
            f"and {np.size(votes)} parties"
        )
    return seats
